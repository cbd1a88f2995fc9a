"""
Table service interface for dependency injection.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

# Opaque cursor handed back by a segmented query, None when the scan is done
ContinuationToken = Optional[Any]


class TableServiceInterface(ABC):
    """Abstract base class for table service implementations."""

    @abstractmethod
    async def create_table_if_not_exists(self) -> None:
        """Create the table if it does not exist yet."""
        pass

    @abstractmethod
    async def insert_entity(self, entity: dict) -> dict:
        """Insert a new entity and return it with its etag."""
        pass

    @abstractmethod
    async def query_entities_segment(
        self,
        continuation_token: ContinuationToken = None
    ) -> tuple[list[dict], ContinuationToken]:
        """Return one page of entities and the token for the next page."""
        pass

    @abstractmethod
    async def get_entity(self, partition_key: str, row_key: str) -> dict | None:
        """Retrieve entity by keys, None when it does not exist."""
        pass

    @abstractmethod
    async def replace_entity(self, entity: dict, etag: str) -> dict:
        """Replace a stored entity. A '*' etag overwrites unconditionally."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any resources held by the service."""
        pass
