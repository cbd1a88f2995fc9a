from typing import Any, Generic, Type

from shared.models.table_record import WILDCARD_ETAG, RecordT
from shared.utils.logging_config import get_logger
from table_store_app.application.interfaces.service_interfaces import TableServiceInterface
from table_store_app.application.services.record_updater import merge_record

logger = get_logger(__name__)


class EntityRepository(Generic[RecordT]):
    """
    Table operations for any TableRecord type.

    Attributes:
        record_type (Type[RecordT]): Record class entities are converted to
        table_service (TableServiceInterface): Table holding the entities
    """

    def __init__(self, record_type: Type[RecordT], table_service: TableServiceInterface):
        self.record_type = record_type
        self.table_service = table_service

    async def insert_record(self, record: RecordT) -> RecordT:
        """Insert a new record and return it with the stored etag."""
        stored = await self.table_service.insert_entity(record.to_entity())
        logger.info(f"Inserted {self.record_type.__name__} {record.partition_key}/{record.row_key}")
        return self.record_type.from_entity(stored)

    async def load_records(self) -> list[RecordT]:
        """Load every record, following continuation tokens until the scan is done."""
        entities, continuation_token = await self.table_service.query_entities_segment()
        records = [self.record_type.from_entity(entity) for entity in entities]
        while continuation_token is not None:
            entities, continuation_token = await self.table_service.query_entities_segment(continuation_token)
            records.extend(self.record_type.from_entity(entity) for entity in entities)
        logger.info(f"Loaded {len(records)} {self.record_type.__name__} records")
        return records

    async def load_record(self, partition_key: str, row_key: str) -> RecordT | None:
        entity = await self.table_service.get_entity(partition_key, row_key)
        if entity is None:
            return None
        return self.record_type.from_entity(entity)

    async def update_record(self, new_data: Any, partition_key: str, row_key: str) -> RecordT | None:
        """
        Merge new_data onto a stored record and replace it.

        Every field new_data shares with the record type is copied over, then
        the record is written back with the wildcard etag: the last writer
        wins. A failed replace leaves the returned record merged in memory.

        Args:
            new_data: Object or mapping with the new field values
            partition_key: Partition key of the stored record
            row_key: Row key of the stored record

        Returns:
            The merged record, or None when no record has these keys

        Raises:
            EntityReplaceException: If the table rejects the replace
        """
        record = await self.load_record(partition_key, row_key)
        if record is None:
            logger.info(f"No {self.record_type.__name__} to update at {partition_key}/{row_key}")
            return None

        merge_record(record, new_data)
        record.etag = WILDCARD_ETAG
        stored = await self.table_service.replace_entity(record.to_entity(), etag=record.etag)
        record.etag = stored.get("etag")
        return record
