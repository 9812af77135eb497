from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from .attributes import convert_record_to_mapping
from .backend.base import SheetBackend, WorkbookBackend
from .conf import N_LEN_EXCEL_SHEET_NAME_MAX, N_ROWS_RESERVED_MAX, TUP_EXCEL_ILLEGAL
from .errors import ConfigError
from .rows import CellCallback, SpecRowHandle, write_row, write_title_row
from .spec import SpecExportConfig, SpecFormatLimits, SpecStylingPolicy
from .styles import resolve_column_width, resolve_row_height

# (sheet, session) -> None
ReservedRowsCallback = Callable[[SheetBackend, Any], None]


################################################################################
# #region DocumentCursor
@dataclass(slots=True)
class SpecDocumentCursor:
    rows_per_page_allowed: int  # reserved + title + data rows, 1-based
    row_idx_start: int  # first row below the reserved block, 0-based
    row_idx_in_page: int = -1  # 0-based, last row written on the page
    is_last_row_blank: bool = False
    row_last_blank: SpecRowHandle | None = None  # kept only while suppressing
    rows_non_blank: int = 0  # title rows included, reserved rows excluded
    pages: int = 0


# #endregion
################################################################################
# #region PageLayout
def derive_allowed_rows_per_page(
    *,
    rows_per_page: int,
    reserved_rows: int,
    if_write_title: bool,
    limits: SpecFormatLimits,
) -> int:
    """
    Number of sheet rows a page may hold, reserved and title rows included.

    With ``rows_per_page <= 0`` the page is bounded by the format ceiling only.

    Raises:
        ConfigError: If ``reserved_rows`` exceeds the reserved-rows maximum or
            the per-page total exceeds the format's row ceiling.
    """
    if reserved_rows > N_ROWS_RESERVED_MAX:
        raise ConfigError(
            f"reserved_rows={reserved_rows} exceeds the maximum of {N_ROWS_RESERVED_MAX}."
        )
    if rows_per_page <= 0:
        return limits.rows_max

    n_rows_allowed = max(0, reserved_rows) + int(if_write_title) + rows_per_page
    if n_rows_allowed > limits.rows_max:
        raise ConfigError(
            f"Rows per page ({n_rows_allowed}, reserved and title rows included) "
            f"exceed the format limit of {limits.rows_max}."
        )
    return n_rows_allowed


def sanitize_sheet_name(name: str, *, replace_to: str = "_") -> str:
    for ch in TUP_EXCEL_ILLEGAL:
        name = name.replace(ch, replace_to)
    name = name.strip() or "Sheet"
    return name[:N_LEN_EXCEL_SHEET_NAME_MAX]


def _create_sheet_identifier(base_name: str, part_idx_1based: int) -> str:
    c_sheet_name_suffix = f"_{part_idx_1based}"
    n_len_base_name_max = N_LEN_EXCEL_SHEET_NAME_MAX - len(c_sheet_name_suffix)
    c_sheet_name_base = base_name[: max(1, n_len_base_name_max)]
    return f"{c_sheet_name_base}{c_sheet_name_suffix}"


# #endregion
################################################################################
# #region PaginationEngine
class PaginationEngine:
    """
    Lays records out over pages (worksheets) of a document backend.

    Each page is laid out as: ``reserved_rows`` rows left to the
    ``on_reserved_rows`` callback, one title row when titles are written, then
    data rows until the page holds ``rows_per_page_allowed`` rows. A page is
    opened lazily by the first record that does not fit on the current one.

    With blank-row suppression on, a record that produces a blank row leaves
    the row in place (not counted) and the next record is written over it.
    The suppressed row stays visible if no record follows.

    Not safe for concurrent use; one engine serves one session.
    """

    def __init__(
        self,
        backend: WorkbookBackend,
        config: SpecExportConfig,
        policy: SpecStylingPolicy,
        *,
        on_reserved_rows: ReservedRowsCallback | None = None,
        on_cell: CellCallback | None = None,
        session: Any = None,
    ):
        self.backend = backend
        self.config = config
        self.policy = policy
        self.on_reserved_rows = on_reserved_rows
        self.on_cell = on_cell
        self.session = session

        self.cursor = SpecDocumentCursor(
            rows_per_page_allowed=derive_allowed_rows_per_page(
                rows_per_page=config.rows_per_page,
                reserved_rows=config.reserved_rows,
                if_write_title=config.if_write_title,
                limits=backend.limits,
            ),
            row_idx_start=max(0, config.reserved_rows),
        )
        self.sheet: SheetBackend | None = None
        self._sheet_names: list[str] = []

    @property
    def sheet_names(self) -> tuple[str, ...]:
        return tuple(self._sheet_names)

    def apply_layout(self) -> None:
        """Re-derive the page layout from the (possibly mutated) config."""
        self.cursor.rows_per_page_allowed = derive_allowed_rows_per_page(
            rows_per_page=self.config.rows_per_page,
            reserved_rows=self.config.reserved_rows,
            if_write_title=self.config.if_write_title,
            limits=self.backend.limits,
        )
        self.cursor.row_idx_start = max(0, self.config.reserved_rows)

    def _is_reusing_last_row(self) -> bool:
        return self.cursor.is_last_row_blank and self.config.if_skip_blank_rows

    def need_new_page(self) -> bool:
        if self.sheet is None:
            return True
        n_row_idx_next = self.cursor.row_idx_in_page
        if not self._is_reusing_last_row():
            n_row_idx_next += 1
        return n_row_idx_next >= self.cursor.rows_per_page_allowed

    def _create_sheet_name(self) -> str:
        c_base_name = sanitize_sheet_name(self.config.sheet_name)
        n_part_idx = len(self._sheet_names) + 1
        c_candidate_name = _create_sheet_identifier(c_base_name, n_part_idx)
        while c_candidate_name in self._sheet_names:
            n_part_idx += 1
            c_candidate_name = _create_sheet_identifier(c_base_name, n_part_idx)
        return c_candidate_name

    def init_page(self) -> SheetBackend:
        c_sheet_name = self._create_sheet_name()
        sheet = self.backend.add_sheet(c_sheet_name)
        self._sheet_names.append(c_sheet_name)
        for _col_idx, _prop in enumerate(self.config.properties):
            sheet.set_column_width(_col_idx, resolve_column_width(_prop, self.policy))

        self.sheet = sheet
        self.cursor.pages += 1
        self.cursor.row_idx_in_page = self.cursor.row_idx_start - 1
        self.cursor.is_last_row_blank = False
        self.cursor.row_last_blank = None
        logger.debug(
            f"Page {self.cursor.pages} opened: {c_sheet_name!r} "
            f"(rows allowed: {self.cursor.rows_per_page_allowed})"
        )

        if self.on_reserved_rows is not None and self.config.reserved_rows > 0:
            self.on_reserved_rows(sheet, self.session)
        self._write_title()
        return sheet

    def _create_row(self, *, if_title: bool) -> SpecRowHandle:
        assert self.sheet is not None
        self.cursor.row_idx_in_page += 1
        row = SpecRowHandle(sheet=self.sheet, row_idx=self.cursor.row_idx_in_page)
        n_height = resolve_row_height(self.policy, if_title=if_title)
        if n_height is not None:
            self.sheet.set_row_height(row.row_idx, n_height)
        return row

    def _write_title(self) -> None:
        if not self.config.if_write_title:
            return
        row = self._create_row(if_title=True)
        write_title_row(row, self.config.titles, self.config.properties, self.policy)
        self.cursor.rows_non_blank += 1

    def write_record(self, record: Any) -> bool:
        """
        Write one record, opening a new page first if it does not fit.

        Returns:
            bool: ``True`` if the record produced a non-blank row.
        """
        if self.need_new_page():
            self.init_page()

        record_mapping = convert_record_to_mapping(record)
        if self._is_reusing_last_row() and self.cursor.row_last_blank is not None:
            row = self.cursor.row_last_blank
        else:
            row = self._create_row(if_title=False)

        b_is_non_blank = write_row(
            row,
            record_mapping,
            record,
            self.config.properties,
            self.policy,
            date_format=self.config.date_format,
            on_cell=self.on_cell,
            session=self.session,
        )
        if b_is_non_blank:
            self.cursor.rows_non_blank += 1
            self.cursor.is_last_row_blank = False
            self.cursor.row_last_blank = None
        elif self.config.if_skip_blank_rows:
            self.cursor.is_last_row_blank = True
            self.cursor.row_last_blank = row
        return b_is_non_blank


# #endregion
################################################################################
