"""
Field-by-field merge of one record onto another.
"""
import dataclasses
from collections.abc import Mapping
from typing import Any, Iterator, Optional, TypeVar

T = TypeVar("T")


def _field_names(record_type: type) -> Iterator[str]:
    """Names of the dataclass fields and properties defined on a record type."""
    seen = set()
    if dataclasses.is_dataclass(record_type):
        for field in dataclasses.fields(record_type):
            seen.add(field.name)
            yield field.name
    for klass in record_type.__mro__:
        for name, value in vars(klass).items():
            if isinstance(value, property) and name not in seen:
                seen.add(name)
                yield name


def _is_writable(obj: Any, name: str) -> bool:
    """True when the attribute exists on obj and can be assigned."""
    if isinstance(obj, Mapping):
        return name in obj
    if not hasattr(obj, name):
        return False
    record_type = type(obj)
    attribute = getattr(record_type, name, None)
    if isinstance(attribute, property):
        return attribute.fset is not None
    if dataclasses.is_dataclass(record_type):
        return not record_type.__dataclass_params__.frozen
    return True


def merge_record(target: Optional[T], source: Any) -> Optional[T]:
    """
    Copy every writable field of target's type that source also exposes.

    Fields the source does not expose are left untouched; no field is added
    or removed. The target is changed in place and returned.

    Args:
        target: Record to update, may be None when it was not found
        source: Object or mapping carrying the new values, matched by name

    Returns:
        The merged target, or None when target is None
    """
    if target is None:
        return None

    for name in _field_names(type(target)):
        if _is_writable(source, name) and _is_writable(target, name):
            value = source[name] if isinstance(source, Mapping) else getattr(source, name)
            setattr(target, name, value)

    return target
