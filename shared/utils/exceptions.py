"""Custom exceptions for the person table store demo."""


class InvalidConfigurationException(Exception):
    """Raised when required storage settings are missing."""
    pass


class TableStorageException(Exception):
    """Base exception for table storage operations."""
    pass


class TableCreateException(TableStorageException):
    """Exception raised when a table cannot be created."""
    pass


class EntityInsertException(TableStorageException):
    """Exception raised when entity insert operation fails."""
    pass


class EntityQueryException(TableStorageException):
    """Exception raised when entity query operation fails."""
    pass


class EntityReplaceException(TableStorageException):
    """Exception raised when entity replace operation fails."""
    pass
