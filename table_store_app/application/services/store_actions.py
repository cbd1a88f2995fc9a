from shared.models.person import Person, PersonName
from shared.utils.logging_config import get_logger
from table_store_app.application.interfaces.service_interfaces import TableServiceInterface
from table_store_app.application.services.entity_repository import EntityRepository
from table_store_app.application.services.person_repository import PersonRepository

logger = get_logger(__name__)

STATIC_PERSON = Person.create("some_random_id", "Nick", "Glas")
STATIC_NEW_FIRST_NAME = "Simon"
GENERIC_PERSON = Person.create("some_id_2", "henk", "karels")
GENERIC_NEW_NAME = PersonName(first_name="Willen", last_name="Annink")


class StoreActions:
    """
    Walks the persons table through insert, scan, lookup and update, first
    with the hand-written PersonRepository, then with EntityRepository[Person].
    """

    def __init__(self, table_service: TableServiceInterface, skip_insert: bool = False):
        self.table_service = table_service
        self.skip_insert = skip_insert
        self.person_repository = PersonRepository(table_service)
        self.entity_repository: EntityRepository[Person] = EntityRepository(Person, table_service)

    async def run(self) -> None:
        await self.table_service.create_table_if_not_exists()
        await self.run_static()
        await self.run_generic()

    async def run_static(self) -> None:
        """Person specific calls."""
        if not self.skip_insert:
            await self.person_repository.insert_person(STATIC_PERSON)

        for person in await self.person_repository.load_persons():
            logger.info(f"(STATIC) Found person {person.full_name} with id: {person.id}")

        found = await self.person_repository.load_person(STATIC_PERSON.partition_key, STATIC_PERSON.row_key)
        if found is not None:
            logger.info(f"(STATIC) Found person {found.full_name} with filter search")
        else:
            logger.warning(f"(STATIC) No person at {STATIC_PERSON.partition_key}/{STATIC_PERSON.row_key}")

        updated = await self.person_repository.update_first_name(
            STATIC_PERSON.partition_key, STATIC_PERSON.row_key, STATIC_NEW_FIRST_NAME
        )
        if updated is not None:
            logger.info(f"(STATIC) Person updated with new firstname {updated.first_name}")

    async def run_generic(self) -> None:
        """Same sequence through the generic repository."""
        if not self.skip_insert:
            await self.entity_repository.insert_record(GENERIC_PERSON)

        for person in await self.entity_repository.load_records():
            logger.info(f"(GENERIC) Found person {person.full_name} with id: {person.id}")

        found = await self.entity_repository.load_record(GENERIC_PERSON.partition_key, GENERIC_PERSON.row_key)
        if found is not None:
            logger.info(f"(GENERIC) Found person {found.full_name} with filter search")
        else:
            logger.warning(f"(GENERIC) No person at {GENERIC_PERSON.partition_key}/{GENERIC_PERSON.row_key}")

        updated = await self.entity_repository.update_record(
            GENERIC_NEW_NAME, GENERIC_PERSON.partition_key, GENERIC_PERSON.row_key
        )
        if updated is not None:
            logger.info(f"(GENERIC) Person updated with new name {updated.full_name}")
