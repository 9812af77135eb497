import io
from typing import Any, BinaryIO

import xlsxwriter
import xlsxwriter.format
import xlsxwriter.worksheet

from ..conf import DICT_FORMAT_LIMITS, FormatKind
from ..spec import SpecCellFormat, SpecFormatLimits
from .base import CellScalar


class XlsxSheet:
    def __init__(self, backend: "XlsxWorkbookBackend", ws: xlsxwriter.worksheet.Worksheet):
        self._backend = backend
        self._ws = ws

    @property
    def name(self) -> str:
        return self._ws.get_name()

    def write_cell(
        self,
        row_idx: int,
        col_idx: int,
        value: CellScalar,
        fmt: SpecCellFormat | None = None,
    ) -> None:
        cfg_fmt = (
            None
            if fmt is None or fmt.is_empty
            else self._backend.create_format_cached(fmt)
        )
        if isinstance(value, bool):
            self._ws.write_boolean(row_idx, col_idx, value, cfg_fmt)
        elif isinstance(value, (int, float)):
            self._ws.write_number(row_idx, col_idx, value, cfg_fmt)
        elif value == "":
            self._ws.write_blank(row_idx, col_idx, None, cfg_fmt)
        else:
            self._ws.write_string(row_idx, col_idx, str(value), cfg_fmt)

    def set_row_height(self, row_idx: int, height: float) -> None:
        self._ws.set_row(row_idx, height)

    def set_column_width(self, col_idx: int, width: float) -> None:
        self._ws.set_column(col_idx, col_idx, width)


class XlsxWorkbookBackend:
    """
    Modern (``.xlsx``) document backend on top of :mod:`xlsxwriter`.

    The workbook is assembled in memory and only serialized by :meth:`save`,
    so the engine may revisit the current row (blank-row overwrite) and the
    reserved-rows callback may write rows in any order. Native format objects
    are created once per distinct :class:`SpecCellFormat`.
    """

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self.wb = xlsxwriter.Workbook(
            self._buffer,
            {
                "in_memory": True,
                # NaN/Inf are turned into text before they reach the backend.
                "nan_inf_to_errors": False,
            },
        )
        self._format_cache: dict[SpecCellFormat, xlsxwriter.format.Format] = {}

    @property
    def format_kind(self) -> FormatKind:
        return FormatKind.MODERN

    @property
    def limits(self) -> SpecFormatLimits:
        return DICT_FORMAT_LIMITS[FormatKind.MODERN]

    def create_format_cached(self, spec: SpecCellFormat) -> Any:
        fmt = self._format_cache.get(spec)
        if fmt is None:
            fmt = self.wb.add_format(spec.to_xlsxwriter())
            self._format_cache[spec] = fmt
        return fmt

    def add_sheet(self, name: str) -> XlsxSheet:
        return XlsxSheet(self, self.wb.add_worksheet(name))

    def save(self, sink: BinaryIO) -> None:
        self.wb.close()
        sink.write(self._buffer.getvalue())
