from typing import BinaryIO, Protocol

from ..conf import FormatKind
from ..spec import SpecCellFormat, SpecFormatLimits

CellScalar = str | bool | int | float


class SheetBackend(Protocol):
    """
    One worksheet of a document backend.

    Coordinates are 0-based. Writing the same cell twice overwrites it; an
    empty string is written as a blank (formatted) cell.
    """

    @property
    def name(self) -> str: ...

    def write_cell(
        self,
        row_idx: int,
        col_idx: int,
        value: CellScalar,
        fmt: SpecCellFormat | None = None,
    ) -> None: ...

    def set_row_height(self, row_idx: int, height: float) -> None: ...

    def set_column_width(self, col_idx: int, width: float) -> None: ...


class WorkbookBackend(Protocol):
    """
    Spreadsheet document: creates sheets and serializes the whole workbook.

    Implementations differ only in their ceilings and binary layout; the
    pagination engine is written once against this interface.
    """

    @property
    def format_kind(self) -> FormatKind: ...

    @property
    def limits(self) -> SpecFormatLimits: ...

    def add_sheet(self, name: str) -> SheetBackend: ...

    def save(self, sink: BinaryIO) -> None: ...
