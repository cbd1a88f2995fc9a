"""
Person domain model.
"""

from dataclasses import dataclass

from shared.models.table_record import TableRecord


@dataclass
class Person(TableRecord):
    """
    Person record aligned with the persons table.
    PartitionKey: id
    RowKey: first_name + last_name
    """
    id: str = ""
    first_name: str = ""
    last_name: str = ""

    def __post_init__(self):
        if not self.partition_key:
            self.partition_key = self.id
        if not self.row_key:
            self.row_key = f"{self.first_name}{self.last_name}"

    @classmethod
    def create(cls, id: str, first_name: str, last_name: str) -> 'Person':
        return cls(id=id, first_name=first_name, last_name=last_name)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class PersonName:
    """Name fields only, used as the source of a partial update."""
    first_name: str
    last_name: str
