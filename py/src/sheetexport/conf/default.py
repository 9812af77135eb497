# Strategy/Preference/Adjustable Parameters for spreadsheet export.

from collections.abc import Mapping
from types import MappingProxyType

from ..spec.cell import SpecCellFormat
from ..spec.sheet import SpecFormatLimits
from .constant import (
    N_NCOLS_XLS_MAX,
    N_NCOLS_XLSX_MAX,
    N_NROWS_XLS_MAX,
    N_NROWS_XLSX_MAX,
    N_SIZE_FONT_TITLE_DEFAULT,
    FormatKind,
)

DEFAULT_CELL_FORMAT = SpecCellFormat(align="center", valign="vcenter")
DEFAULT_TITLE_FORMAT = DEFAULT_CELL_FORMAT.with_(
    bold=True, font_size=N_SIZE_FONT_TITLE_DEFAULT
)

DICT_FORMAT_LIMITS: Mapping[FormatKind, SpecFormatLimits] = MappingProxyType(
    {
        FormatKind.LEGACY: SpecFormatLimits(
            rows_max=N_NROWS_XLS_MAX, cols_max=N_NCOLS_XLS_MAX
        ),
        FormatKind.MODERN: SpecFormatLimits(
            rows_max=N_NROWS_XLSX_MAX, cols_max=N_NCOLS_XLSX_MAX
        ),
    }
)
