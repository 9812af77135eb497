from .cell import SpecCellFormat
from .sheet import SpecFormatLimits
from .export import (
    UNSET,
    SpecBooleanMapping,
    SpecCellOverride,
    SpecExportConfig,
    SpecExportReport,
    SpecStylingPolicy,
)

__all__ = [
    "UNSET",
    "SpecBooleanMapping",
    "SpecCellFormat",
    "SpecCellOverride",
    "SpecExportConfig",
    "SpecExportReport",
    "SpecFormatLimits",
    "SpecStylingPolicy",
]
