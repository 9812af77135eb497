import json
from dataclasses import dataclass, field
from typing import BinaryIO

from ..conf import DICT_FORMAT_LIMITS, FormatKind
from ..spec import SpecCellFormat, SpecFormatLimits
from .base import CellScalar


@dataclass(slots=True)
class MemorySheet:
    name: str
    cells: dict[tuple[int, int], CellScalar] = field(default_factory=dict)
    formats: dict[tuple[int, int], SpecCellFormat | None] = field(default_factory=dict)
    row_heights: dict[int, float] = field(default_factory=dict)
    column_widths: dict[int, float] = field(default_factory=dict)

    def write_cell(
        self,
        row_idx: int,
        col_idx: int,
        value: CellScalar,
        fmt: SpecCellFormat | None = None,
    ) -> None:
        self.cells[(row_idx, col_idx)] = value
        self.formats[(row_idx, col_idx)] = fmt

    def set_row_height(self, row_idx: int, height: float) -> None:
        self.row_heights[row_idx] = height

    def set_column_width(self, col_idx: int, width: float) -> None:
        self.column_widths[col_idx] = width

    @property
    def height(self) -> int:
        """Number of rows up to the last row holding a cell."""
        if not self.cells:
            return 0
        return max(_row_idx for _row_idx, _ in self.cells) + 1

    def get_row(self, row_idx: int) -> dict[int, CellScalar]:
        return {
            _col_idx: _val
            for (_row_idx, _col_idx), _val in sorted(self.cells.items())
            if _row_idx == row_idx
        }

    def to_rows(self) -> list[list[CellScalar | None]]:
        """Dense grid of the sheet; missing cells are ``None``."""
        if not self.cells:
            return []
        n_width = max(_col_idx for _, _col_idx in self.cells) + 1
        return [
            [self.cells.get((_row_idx, _col_idx)) for _col_idx in range(n_width)]
            for _row_idx in range(self.height)
        ]


class MemoryWorkbookBackend:
    """
    Document backend that keeps every cell in Python objects.

    Useful for previews and for asserting on the exact layout an export
    produces. ``save`` serializes the sheets as JSON.
    """

    def __init__(self, format_kind: FormatKind = FormatKind.MODERN) -> None:
        self._format_kind = FormatKind(format_kind)
        self.sheets: list[MemorySheet] = []

    @property
    def format_kind(self) -> FormatKind:
        return self._format_kind

    @property
    def limits(self) -> SpecFormatLimits:
        return DICT_FORMAT_LIMITS[self._format_kind]

    def add_sheet(self, name: str) -> MemorySheet:
        sheet = MemorySheet(name=name)
        self.sheets.append(sheet)
        return sheet

    def save(self, sink: BinaryIO) -> None:
        dict_doc = {
            "format_kind": str(self._format_kind),
            "sheets": [
                {"name": _sheet.name, "rows": _sheet.to_rows()} for _sheet in self.sheets
            ],
        }
        sink.write(json.dumps(dict_doc, ensure_ascii=False).encode("utf-8"))
