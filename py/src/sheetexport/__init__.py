from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .attributes import SupportsExport, convert_record_to_mapping, resolve_properties
from .conf import FormatKind
from .errors import ConfigError
from .session import ExportSession
from .spec import (
    UNSET,
    SpecBooleanMapping,
    SpecCellFormat,
    SpecCellOverride,
    SpecExportConfig,
    SpecExportReport,
    SpecFormatLimits,
    SpecStylingPolicy,
)

__all__ = [
    "__version__",
    "ConfigError",
    "ExportSession",
    "FormatKind",
    "SupportsExport",
    "UNSET",
    "SpecBooleanMapping",
    "SpecCellFormat",
    "SpecCellOverride",
    "SpecExportConfig",
    "SpecExportReport",
    "SpecFormatLimits",
    "SpecStylingPolicy",
    "convert_record_to_mapping",
    "resolve_properties",
]

try:
    __version__ = version("sheetexport")
except PackageNotFoundError:
    __version__ = "0.0.0"
