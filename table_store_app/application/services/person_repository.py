from shared.models.person import Person
from shared.utils.logging_config import get_logger
from table_store_app.application.interfaces.service_interfaces import TableServiceInterface

logger = get_logger(__name__)


class PersonRepository:
    """
    Person specific table operations, written out by hand.

    Attributes:
        table_service (TableServiceInterface): Table holding the person entities
    """

    def __init__(self, table_service: TableServiceInterface):
        self.table_service = table_service

    async def insert_person(self, person: Person) -> Person:
        """Insert a new person and return it with the stored etag."""
        stored = await self.table_service.insert_entity(person.to_entity())
        logger.info(f"Inserted person {person.full_name} ({person.partition_key}/{person.row_key})")
        return Person.from_entity(stored)

    async def load_persons(self) -> list[Person]:
        """Load every person, following continuation tokens until the scan is done."""
        entities, continuation_token = await self.table_service.query_entities_segment()
        persons = [Person.from_entity(entity) for entity in entities]
        while continuation_token is not None:
            entities, continuation_token = await self.table_service.query_entities_segment(continuation_token)
            persons.extend(Person.from_entity(entity) for entity in entities)
        logger.info(f"Loaded {len(persons)} persons")
        return persons

    async def load_person(self, partition_key: str, row_key: str) -> Person | None:
        entity = await self.table_service.get_entity(partition_key, row_key)
        if entity is None:
            return None
        return Person.from_entity(entity)

    async def update_first_name(self, partition_key: str, row_key: str, first_name: str) -> Person | None:
        """
        Change the first name of a stored person.

        The replace is conditional on the etag read by the lookup, so a
        concurrent change makes it fail with EntityReplaceException.

        Returns:
            The updated person, or None when no person has these keys
        """
        person = await self.load_person(partition_key, row_key)
        if person is None:
            logger.info(f"No person to update at {partition_key}/{row_key}")
            return None

        person.first_name = first_name
        stored = await self.table_service.replace_entity(person.to_entity(), etag=person.etag)
        person.etag = stored.get("etag")
        return person
