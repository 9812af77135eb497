from enum import StrEnum


class FormatKind(StrEnum):
    LEGACY = "xls"  # BIFF8
    MODERN = "xlsx"  # Office Open XML


N_NROWS_XLSX_MAX = 1_048_576
N_NCOLS_XLSX_MAX = 16_384
N_NROWS_XLS_MAX = 65_535
N_NCOLS_XLS_MAX = 256

N_ROWS_RESERVED_MAX = 256
N_LEN_EXCEL_SHEET_NAME_MAX = 31
TUP_EXCEL_ILLEGAL = ("*", ":", "?", "/", "\\", "[", "]")

C_DATE_FORMAT_DEFAULT = "%Y/%m/%d %H:%M:%S"
C_SHEET_NAME_DEFAULT = "Sheet"
N_WIDTH_COLUMN_DEFAULT = 16
N_SIZE_FONT_TITLE_DEFAULT = 16
