from .constant import (
    C_DATE_FORMAT_DEFAULT,
    C_SHEET_NAME_DEFAULT,
    N_LEN_EXCEL_SHEET_NAME_MAX,
    N_NCOLS_XLS_MAX,
    N_NCOLS_XLSX_MAX,
    N_NROWS_XLS_MAX,
    N_NROWS_XLSX_MAX,
    N_ROWS_RESERVED_MAX,
    N_SIZE_FONT_TITLE_DEFAULT,
    N_WIDTH_COLUMN_DEFAULT,
    TUP_EXCEL_ILLEGAL,
    FormatKind,
)
from .default import DEFAULT_CELL_FORMAT, DEFAULT_TITLE_FORMAT, DICT_FORMAT_LIMITS

__all__ = [
    "FormatKind",
    "N_NROWS_XLSX_MAX",
    "N_NCOLS_XLSX_MAX",
    "N_NROWS_XLS_MAX",
    "N_NCOLS_XLS_MAX",
    "N_ROWS_RESERVED_MAX",
    "N_LEN_EXCEL_SHEET_NAME_MAX",
    "N_SIZE_FONT_TITLE_DEFAULT",
    "N_WIDTH_COLUMN_DEFAULT",
    "TUP_EXCEL_ILLEGAL",
    "C_DATE_FORMAT_DEFAULT",
    "C_SHEET_NAME_DEFAULT",
    "DEFAULT_CELL_FORMAT",
    "DEFAULT_TITLE_FORMAT",
    "DICT_FORMAT_LIMITS",
]
