import argparse
import json
import asyncio

from shared.config.settings import settings
from shared.models.person import Person
from shared.utils.logging_config import get_logger, setup_logging
from table_store_app.application.interfaces.di_container import DIContainer
from table_store_app.application.services.entity_repository import EntityRepository

setup_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        log_to_console=settings.log_to_console
    )
logger = get_logger(__name__)

json_filename = "scripts/data-source/persons.json"


async def seed_persons(repository: EntityRepository[Person], persons: list[Person]):
    """Seed persons into the persons table."""
    tasks = []
    for person in persons:
        logger.info(f"Queuing person: {person.full_name} with keys {person.partition_key}/{person.row_key}")
        tasks.append(repository.insert_record(person))

    # Wait for all operations and get results
    results = await asyncio.gather(*tasks, return_exceptions=True)

    success_count = 0
    for person, result in zip(persons, results):
        if isinstance(result, Exception):
            logger.error(f"Failed to seed person {person.id} ({person.row_key}): {result}")
        else:
            success_count += 1
            logger.debug(f"Successfully seeded person {person.id} ({person.row_key})")

    logger.info(f"Seeding complete: {success_count}/{len(persons)} successful")
    return success_count == len(persons)


async def main(args: argparse.Namespace):
    container = DIContainer(repository_type=args.repository_type, table_name=args.table)
    try:
        table_service = container.get_table_service()
        await table_service.create_table_if_not_exists()

        with open(args.file, "r") as f:
            persons = [Person.create(**item) for item in json.load(f)]

        completed = await seed_persons(EntityRepository(Person, table_service), persons)
        if completed:
            logger.info("Person seeding completed successfully.")
        else:
            logger.error("Person seeding failed.")
    finally:
        await container.close_all_services()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the persons table")
    parser.add_argument("--file", default=json_filename)
    parser.add_argument("--table", default=settings.persons_table_name)
    parser.add_argument("--repository-type", default=settings.repository_type,
                        choices=["azure_table_storage", "in_memory"])
    asyncio.run(main(parser.parse_args()))
