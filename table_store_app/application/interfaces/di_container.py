"""Dependency Injection Container."""
from typing import Optional

from shared.config.settings import Settings, settings, validate_storage_settings
from table_store_app.application.interfaces.service_interfaces import TableServiceInterface
from table_store_app.infrastructure.repositories.in_memory_table_repository_service import InMemoryTableRepositoryService
from table_store_app.infrastructure.repositories.table_storage_service import TableStorageService


class DIContainer:
    """Simple dependency injection container."""

    def __init__(self, app_settings: Optional[Settings] = None, repository_type: Optional[str] = None,
                 table_name: Optional[str] = None):
        self.settings = app_settings or settings
        self.repository_type = repository_type or self.settings.repository_type
        self.table_name = table_name or self.settings.persons_table_name
        self._singletons = {}
        self._setup_services()

    def _setup_services(self):

        if self.repository_type == "in_memory":
            self._singletons[TableServiceInterface] = InMemoryTableRepositoryService(
                table_name=self.table_name,
                page_size=self.settings.scan_page_size
            )
        elif self.repository_type == "azure_table_storage":
            validate_storage_settings(self.settings)
            self._singletons[TableServiceInterface] = TableStorageService(
                connection_string=self.settings.storage_connection_string,
                table_name=self.table_name,
                page_size=self.settings.scan_page_size
            )
        else:
            raise ValueError(f"Unknown repository type: {self.repository_type}")

    def get_service(self, service_type):
        """Get a service instance by type."""
        if service_type in self._singletons:
            return self._singletons[service_type]
        raise ValueError(f"Service {service_type} not registered")

    async def close_all_services(self) -> None:
        """Close all services that require cleanup."""
        for service in self._singletons.values():
            if hasattr(service, "close") and callable(service.close):
                await service.close()

    def get_table_service(self) -> TableServiceInterface:
        return self.get_service(TableServiceInterface)
