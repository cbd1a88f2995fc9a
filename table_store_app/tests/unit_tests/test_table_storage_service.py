import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from azure.core import MatchConditions
from azure.core.exceptions import HttpResponseError, ResourceExistsError, ResourceNotFoundError
from azure.data.tables import UpdateMode

from shared.models.table_record import WILDCARD_ETAG
from shared.utils.exceptions import (
    EntityInsertException,
    EntityQueryException,
    EntityReplaceException,
    TableCreateException,
)
from table_store_app.infrastructure.repositories.table_storage_service import TableStorageService

CONNECTION_STRING = (
    "DefaultEndpointsProtocol=http;AccountName=devstoreaccount1;AccountKey=a2V5;"
    "BlobEndpoint=http://127.0.0.1:10000/devstoreaccount1;"
    "TableEndpoint=http://127.0.0.1:10002/devstoreaccount1;"
    "QueueEndpoint=http://127.0.0.1:10001/devstoreaccount1;"
)


class FakeTableEntity(dict):
    """Stand-in for azure.data.tables.TableEntity, a dict with metadata."""

    def __init__(self, data: dict, etag: str):
        super().__init__(data)
        self.metadata = {"etag": etag, "timestamp": None}


class FakePage:

    def __init__(self, entities):
        self._entities = iter(entities)

    def __aiter__(self):
        return self

    async def __anext__(self):
        try:
            return next(self._entities)
        except StopIteration:
            raise StopAsyncIteration


class FakePageIterator:
    """Mimics AsyncPageIterator: continuation_token is set once a page is fetched."""

    def __init__(self, pages):
        self._pages = iter(pages)
        self.continuation_token = None

    def __aiter__(self):
        return self

    async def __anext__(self):
        try:
            entities, token = next(self._pages)
        except StopIteration:
            raise StopAsyncIteration
        self.continuation_token = token
        return FakePage(entities)


class TestTableStorageService:

    @pytest_asyncio.fixture
    async def table_client(self):
        client = MagicMock()
        client.create_table = AsyncMock()
        client.create_entity = AsyncMock()
        client.get_entity = AsyncMock()
        client.update_entity = AsyncMock()
        client.close = AsyncMock()
        return client

    @pytest_asyncio.fixture
    async def service(self, table_client):
        with patch(
            "table_store_app.infrastructure.repositories.table_storage_service.TableClient"
        ) as table_client_class:
            table_client_class.from_connection_string.return_value = table_client
            service = TableStorageService(CONNECTION_STRING, table_name="persons", page_size=2)
            table_client_class.from_connection_string.assert_called_once_with(
                conn_str=CONNECTION_STRING, table_name="persons"
            )
        yield service
        await service.close()

    @pytest.mark.asyncio
    async def test_create_table_existing_is_ok(self, service: TableStorageService, table_client):
        table_client.create_table.side_effect = ResourceExistsError(message="TableAlreadyExists")

        await service.create_table_if_not_exists()

        table_client.create_table.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_table_failure_is_wrapped(self, service: TableStorageService, table_client):
        table_client.create_table.side_effect = HttpResponseError(message="AuthenticationFailed")

        with pytest.raises(TableCreateException) as exc_info:
            await service.create_table_if_not_exists()
        assert isinstance(exc_info.value.__cause__, HttpResponseError)

    @pytest.mark.asyncio
    async def test_insert_entity_returns_etag(self, service: TableStorageService, table_client):
        table_client.create_entity.return_value = {"etag": 'W/"1"', "version": "2019-02-02"}
        entity = {"PartitionKey": "p", "RowKey": "r", "first_name": "Nick"}

        stored = await service.insert_entity(entity)

        table_client.create_entity.assert_awaited_once_with(entity=entity)
        assert stored == {**entity, "etag": 'W/"1"'}

    @pytest.mark.asyncio
    async def test_insert_conflict_is_wrapped(self, service: TableStorageService, table_client):
        table_client.create_entity.side_effect = ResourceExistsError(message="EntityAlreadyExists")

        with pytest.raises(EntityInsertException):
            await service.insert_entity({"PartitionKey": "p", "RowKey": "r"})

    @pytest.mark.asyncio
    async def test_query_segment_returns_page_and_token(self, service: TableStorageService, table_client):
        pages = FakePageIterator([
            ([FakeTableEntity({"PartitionKey": "p", "RowKey": "r1", "Timestamp": "t"}, 'W/"1"')],
             {"PartitionKey": "p", "RowKey": "r2"}),
        ])
        table_client.list_entities.return_value.by_page.return_value = pages

        entities, token = await service.query_entities_segment()

        table_client.list_entities.assert_called_once_with(results_per_page=2)
        table_client.list_entities.return_value.by_page.assert_called_once_with(continuation_token=None)
        assert entities == [{"PartitionKey": "p", "RowKey": "r1", "etag": 'W/"1"'}]
        assert token == {"PartitionKey": "p", "RowKey": "r2"}

    @pytest.mark.asyncio
    async def test_query_segment_passes_token(self, service: TableStorageService, table_client):
        table_client.list_entities.return_value.by_page.return_value = FakePageIterator([([], None)])

        entities, token = await service.query_entities_segment("next")

        table_client.list_entities.return_value.by_page.assert_called_once_with(continuation_token="next")
        assert (entities, token) == ([], None)

    @pytest.mark.asyncio
    async def test_query_segment_without_pages(self, service: TableStorageService, table_client):
        table_client.list_entities.return_value.by_page.return_value = FakePageIterator([])

        assert await service.query_entities_segment() == ([], None)

    @pytest.mark.asyncio
    async def test_get_entity_not_found_returns_none(self, service: TableStorageService, table_client):
        table_client.get_entity.side_effect = ResourceNotFoundError(message="ResourceNotFound")

        assert await service.get_entity("p", "r") is None

    @pytest.mark.asyncio
    async def test_get_entity_other_error_is_wrapped(self, service: TableStorageService, table_client):
        table_client.get_entity.side_effect = HttpResponseError(message="ServerBusy")

        with pytest.raises(EntityQueryException):
            await service.get_entity("p", "r")

    @pytest.mark.asyncio
    async def test_get_entity_surfaces_etag(self, service: TableStorageService, table_client):
        table_client.get_entity.return_value = FakeTableEntity(
            {"PartitionKey": "p", "RowKey": "r", "first_name": "Nick"}, 'W/"7"'
        )

        entity = await service.get_entity("p", "r")

        table_client.get_entity.assert_awaited_once_with(partition_key="p", row_key="r")
        assert entity == {"PartitionKey": "p", "RowKey": "r", "first_name": "Nick", "etag": 'W/"7"'}

    @pytest.mark.asyncio
    async def test_replace_wildcard_is_unconditional(self, service: TableStorageService, table_client):
        table_client.update_entity.return_value = {"etag": 'W/"2"'}
        entity = {"PartitionKey": "p", "RowKey": "r", "first_name": "Simon", "etag": "*"}

        stored = await service.replace_entity(entity, etag=WILDCARD_ETAG)

        table_client.update_entity.assert_awaited_once_with(
            entity={"PartitionKey": "p", "RowKey": "r", "first_name": "Simon"},
            mode=UpdateMode.REPLACE,
            match_condition=MatchConditions.Unconditionally
        )
        assert stored["etag"] == 'W/"2"'

    @pytest.mark.asyncio
    async def test_replace_with_etag_is_conditional(self, service: TableStorageService, table_client):
        table_client.update_entity.return_value = {"etag": 'W/"3"'}

        await service.replace_entity({"PartitionKey": "p", "RowKey": "r"}, etag='W/"2"')

        kwargs = table_client.update_entity.call_args.kwargs
        assert kwargs["etag"] == 'W/"2"'
        assert kwargs["match_condition"] == MatchConditions.IfNotModified

    @pytest.mark.asyncio
    async def test_replace_failure_is_wrapped(self, service: TableStorageService, table_client):
        table_client.update_entity.side_effect = ResourceNotFoundError(message="ResourceNotFound")

        with pytest.raises(EntityReplaceException):
            await service.replace_entity({"PartitionKey": "p", "RowKey": "r"}, etag=WILDCARD_ETAG)
