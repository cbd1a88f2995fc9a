import uuid
from datetime import datetime, timezone

from shared.config.settings import settings
from shared.models.table_record import WILDCARD_ETAG
from shared.utils.exceptions import EntityInsertException, EntityReplaceException
from shared.utils.logging_config import get_logger
from table_store_app.application.interfaces.service_interfaces import ContinuationToken, TableServiceInterface

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 1000


class InMemoryTableRepositoryService(TableServiceInterface):
    """Dict backed table with the same paging and etag rules as Azure Table Storage."""

    def __init__(self, table_name: str = None, page_size: int = None):
        if page_size is not None and page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.table_name = table_name or settings.persons_table_name
        self.page_size = page_size or settings.scan_page_size or DEFAULT_PAGE_SIZE
        self._entities: dict[tuple[str, str], dict] = {}

    async def create_table_if_not_exists(self) -> None:
        logger.info(f"Table '{self.table_name}' ready (in memory)")

    async def insert_entity(self, entity: dict) -> dict:
        key = (entity["PartitionKey"], entity["RowKey"])
        if key in self._entities:
            raise EntityInsertException(f"Entity already exists: {key[0]}/{key[1]}")
        stored = self._store(key, entity)
        logger.info(f"Entity inserted. Row Key: {key[1]}")
        return dict(stored)

    async def query_entities_segment(
        self,
        continuation_token: ContinuationToken = None
    ) -> tuple[list[dict], ContinuationToken]:
        # Azure returns entities ordered by PartitionKey, then RowKey
        keys = sorted(self._entities)
        if continuation_token is not None:
            keys = [key for key in keys if key >= continuation_token]
        page = [dict(self._entities[key]) for key in keys[:self.page_size]]
        next_token = keys[self.page_size] if len(keys) > self.page_size else None
        return page, next_token

    async def get_entity(self, partition_key: str, row_key: str) -> dict | None:
        entity = self._entities.get((partition_key, row_key))
        if entity is None:
            logger.debug(f"Entity not found: {partition_key}/{row_key}")
            return None
        return dict(entity)

    async def replace_entity(self, entity: dict, etag: str) -> dict:
        key = (entity["PartitionKey"], entity["RowKey"])
        current = self._entities.get(key)
        if current is None:
            raise EntityReplaceException(f"Entity not found: {key[0]}/{key[1]}")
        if etag != WILDCARD_ETAG and etag != current["etag"]:
            raise EntityReplaceException(
                f"The update condition specified in the request was not satisfied: {key[0]}/{key[1]}"
            )
        stored = self._store(key, entity)
        logger.info(f"Entity replaced successfully. Row Key: {key[1]}")
        return dict(stored)

    async def close(self) -> None:
        logger.debug(f"In memory table '{self.table_name}' closed")

    def _store(self, key: tuple[str, str], entity: dict) -> dict:
        stored = {k: v for k, v in entity.items() if k != "etag"}
        timestamp = datetime.now(timezone.utc).isoformat()
        stored["etag"] = f'W/"datetime\'{timestamp}\'-{uuid.uuid4().hex[:8]}"'
        self._entities[key] = stored
        return stored
