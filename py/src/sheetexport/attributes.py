import dataclasses
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from .errors import ConfigError
from .spec import SpecExportConfig


@runtime_checkable
class SupportsExport(Protocol):
    """
    Capability of a record type that exposes its exportable attributes.

    The returned mapping's iteration order is the column order used when the
    session derives its properties from the first record.
    """

    def export_attributes(self) -> Mapping[str, Any]: ...


def convert_record_to_mapping(record: Any) -> Mapping[str, Any]:
    """
    Return the attribute view of ``record`` without copying mappings.

    Accepted, in order: mappings, :class:`SupportsExport` implementers,
    dataclass instances and named tuples.
    """
    if isinstance(record, Mapping):
        return record
    if isinstance(record, SupportsExport):
        return record.export_attributes()
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return {
            _field.name: getattr(record, _field.name)
            for _field in dataclasses.fields(record)
        }
    if isinstance(record, tuple) and hasattr(record, "_asdict"):
        return record._asdict()
    raise TypeError(
        f"Record of type {type(record).__name__!r} is not exportable: "
        "use a mapping, a dataclass, a named tuple or implement "
        "`export_attributes()`."
    )


def resolve_properties(config: SpecExportConfig, record_first: Any | None) -> list[str]:
    """
    Resolve the ordered, de-duplicated properties to export.

    ``config.properties`` is derived from ``record_first`` when empty, then
    ``config.exclude_properties`` is subtracted. The result is written back to
    ``config.properties``.

    Raises:
        ConfigError: If there is nothing to derive from or nothing is left.
    """
    if not config.properties:
        if record_first is None:
            raise ConfigError(
                "No records to derive properties from; set `properties` or write records."
            )
        config.set_properties(convert_record_to_mapping(record_first).keys())

    l_properties = list(dict.fromkeys(config.properties))
    if config.exclude_properties:
        l_properties = [
            _prop for _prop in l_properties if _prop not in config.exclude_properties
        ]
    if not l_properties:
        raise ConfigError("Resolved properties are empty.")

    config.set_properties(l_properties)
    return l_properties
