from datetime import datetime
from enum import Enum
import json

# Keys the table service adds to every entity, never record fields
TABLE_METADATA_FIELDS = {"PartitionKey", "RowKey", "Timestamp", "etag", "odata.etag", "odata.metadata"}


def convert_to_table_entity(data: dict) -> dict:
    """Convert complex types to Azure Table Storage compatible types."""
    entity = {}
    for key, value in data.items():
        if value is None:
            entity[key] = None
        elif isinstance(value, Enum):
            entity[key] = value.value
        elif isinstance(value, (list, dict)):
            entity[key] = json.dumps(value, default=str)
        elif isinstance(value, (str, int, float, bool, bytes, datetime)):
            entity[key] = value
        else:
            entity[key] = str(value)
    return entity


def convert_from_table_entity(data: dict) -> dict:
    """Drop table metadata and turn TablesEntityDatetime values into datetime."""
    converted = {}
    for key, value in data.items():
        if key in TABLE_METADATA_FIELDS:
            continue
        if 'TablesEntityDatetime' in value.__class__.__name__:
            converted[key] = datetime.fromisoformat(value.isoformat())
        else:
            converted[key] = value
    return converted
