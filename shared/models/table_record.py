"""
Base record for Azure Table Storage entities.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional, Type, TypeVar

from shared.utils.convert import convert_from_table_entity, convert_to_table_entity

WILDCARD_ETAG = "*"

# Set from the entity keys and metadata, never from stored properties
RECORD_IDENTITY_FIELDS = {"partition_key", "row_key", "etag"}

RecordT = TypeVar("RecordT", bound="TableRecord")


@dataclass
class TableRecord:
    """
    A typed record stored in a table.
    Identity is (partition_key, row_key); etag is the concurrency token
    of the stored version and is never written as a property.
    """
    partition_key: str = ""
    row_key: str = ""
    etag: Optional[str] = None

    @property
    def keys(self) -> tuple[str, str]:
        return self.partition_key, self.row_key

    def to_entity(self) -> Dict[str, Any]:
        """Convert the record to a table entity dictionary."""
        data = asdict(self)
        data.pop("partition_key")
        data.pop("row_key")
        data.pop("etag")
        entity = {"PartitionKey": self.partition_key, "RowKey": self.row_key}
        entity.update(convert_to_table_entity(data))
        return entity

    @classmethod
    def from_entity(cls: Type[RecordT], data: Dict[str, Any]) -> RecordT:
        """Create a record from a stored entity, ignoring undeclared properties."""
        declared = {f.name for f in fields(cls)} - RECORD_IDENTITY_FIELDS
        values = {
            key: value
            for key, value in convert_from_table_entity(data).items()
            if key in declared
        }
        return cls(
            partition_key=data.get("PartitionKey", ""),
            row_key=data.get("RowKey", ""),
            etag=data.get("etag"),
            **values
        )
