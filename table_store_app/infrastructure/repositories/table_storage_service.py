from typing import Optional

from azure.core import MatchConditions
from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.data.tables import UpdateMode
from azure.data.tables.aio import TableClient

from shared.config.settings import settings
from shared.models.table_record import WILDCARD_ETAG
from shared.utils.exceptions import (
    EntityInsertException,
    EntityQueryException,
    EntityReplaceException,
    TableCreateException,
)
from shared.utils.logging_config import get_logger
from table_store_app.application.interfaces.service_interfaces import ContinuationToken, TableServiceInterface


logger = get_logger(__name__)

AZURE_TABLE_METADATA_FIELDS = {'Timestamp', 'odata.etag', 'odata.metadata'}


class TableStorageService(TableServiceInterface):
    """Azure Table Storage implementation bound to a single table."""

    def __init__(self, connection_string: str, table_name: str = None, page_size: Optional[int] = None):
        if page_size is not None and page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")

        self.table_name = table_name or settings.persons_table_name
        self.page_size = page_size if page_size is not None else settings.scan_page_size
        self.table_client = TableClient.from_connection_string(
            conn_str=connection_string,
            table_name=self.table_name
        )

    async def create_table_if_not_exists(self) -> None:
        """Create the table, an existing table is left as is."""
        try:
            await self.table_client.create_table()
            logger.info(f"Table '{self.table_name}' created")
        except ResourceExistsError:
            logger.info(f"Table '{self.table_name}' ready")
        except AzureError as e:
            logger.error(f"Failed to create table '{self.table_name}': {e}")
            raise TableCreateException(str(e)) from e

    async def insert_entity(self, entity: dict) -> dict:
        """Insert an entity, failing when the keys are already taken."""
        try:
            metadata = await self.table_client.create_entity(entity=entity)
            logger.info(f"Entity inserted. Row Key: {entity.get('RowKey')}")
            return {**entity, "etag": metadata.get("etag")}
        except AzureError as e:
            logger.error(f"Error inserting entity into Table Storage: {e}")
            raise EntityInsertException(str(e)) from e

    async def query_entities_segment(
        self,
        continuation_token: ContinuationToken = None
    ) -> tuple[list[dict], ContinuationToken]:
        """Fetch one page of the full table scan."""
        try:
            pages = self.table_client.list_entities(
                results_per_page=self.page_size
            ).by_page(continuation_token=continuation_token)
            async for page in pages:
                entities = [self._to_record(entity) async for entity in page]
                logger.debug(f"Fetched {len(entities)} entities from '{self.table_name}'")
                return entities, pages.continuation_token
            return [], None
        except AzureError as e:
            logger.error(f"Error querying entities from Table Storage: {e}")
            raise EntityQueryException(str(e)) from e

    async def get_entity(self, partition_key: str, row_key: str) -> dict | None:
        """Retrieve entity data from Azure Table Storage by its keys."""
        try:
            entity = await self.table_client.get_entity(partition_key=partition_key, row_key=row_key)
            logger.info(f"Entity retrieved successfully. Row Key: {row_key}")
            return self._to_record(entity)
        except ResourceNotFoundError:
            logger.debug(f"Entity not found: {partition_key}/{row_key}")
            return None
        except AzureError as e:
            logger.error(f"Error retrieving entity from Table Storage: {e}")
            raise EntityQueryException(str(e)) from e

    async def replace_entity(self, entity: dict, etag: str) -> dict:
        """Replace an entity, unconditionally when etag is the wildcard."""
        entity = {k: v for k, v in entity.items() if k != "etag"}
        # The SDK sends If-Match: * itself for an unconditional write
        if etag == WILDCARD_ETAG:
            conditions = {"match_condition": MatchConditions.Unconditionally}
        else:
            conditions = {"etag": etag, "match_condition": MatchConditions.IfNotModified}
        try:
            metadata = await self.table_client.update_entity(
                entity=entity,
                mode=UpdateMode.REPLACE,
                **conditions
            )
            logger.info(f"Entity replaced successfully. Row Key: {entity.get('RowKey')}")
            return {**entity, "etag": metadata.get("etag")}
        except AzureError as e:
            logger.error(f"Error replacing entity in Table Storage: {e}")
            raise EntityReplaceException(str(e)) from e

    async def close(self) -> None:
        """Close the Table Storage client."""
        if self.table_client:
            await self.table_client.close()
            logger.info("Table Storage client closed.")

    def _to_record(self, entity) -> dict:
        """Strip Azure metadata fields and surface the etag as a key."""
        record = {k: v for k, v in dict(entity).items() if k not in AZURE_TABLE_METADATA_FIELDS}
        record["etag"] = entity.metadata.get("etag")
        return record
