from typing import BinaryIO

import xlwt
from loguru import logger

from ..conf import DICT_FORMAT_LIMITS, FormatKind
from ..spec import SpecCellFormat, SpecFormatLimits
from .base import CellScalar

N_TWIPS_PER_POINT = 20
N_WIDTH_UNITS_PER_CHAR = 256
N_WIDTH_UNITS_MAX = 65_535

_DICT_ALIGN_HORZ = {
    "general": xlwt.Alignment.HORZ_GENERAL,
    "left": xlwt.Alignment.HORZ_LEFT,
    "center": xlwt.Alignment.HORZ_CENTER,
    "right": xlwt.Alignment.HORZ_RIGHT,
    "fill": xlwt.Alignment.HORZ_FILLED,
    "justify": xlwt.Alignment.HORZ_JUSTIFIED,
    "center_across": xlwt.Alignment.HORZ_CENTER_ACROSS_SEL,
    "distributed": xlwt.Alignment.HORZ_DISTRIBUTED,
}
_DICT_ALIGN_VERT = {
    "top": xlwt.Alignment.VERT_TOP,
    "vcenter": xlwt.Alignment.VERT_CENTER,
    "bottom": xlwt.Alignment.VERT_BOTTOM,
    "vjustify": xlwt.Alignment.VERT_JUSTIFIED,
    "vdistributed": xlwt.Alignment.VERT_DISTRIBUTED,
}


def _resolve_colour_index(colour: str) -> int | None:
    # BIFF8 only knows a fixed palette, referenced by name.
    n_idx = xlwt.Style.colour_map.get(colour.strip().lower().replace(" ", "_"))
    if n_idx is None:
        logger.debug(f"Colour {colour!r} is not in the xls palette, ignored.")
    return n_idx


def convert_format_to_xlwt(spec: SpecCellFormat) -> xlwt.XFStyle:
    """Translate a :class:`SpecCellFormat` into an ``xlwt`` cell style."""
    style = xlwt.XFStyle()

    font = xlwt.Font()
    if spec.font_name is not None:
        font.name = spec.font_name
    if spec.font_size is not None:
        font.height = int(spec.font_size * N_TWIPS_PER_POINT)
    if spec.bold is not None:
        font.bold = spec.bold
    if spec.italic is not None:
        font.italic = spec.italic
    if spec.font_color is not None:
        n_colour_idx = _resolve_colour_index(spec.font_color)
        if n_colour_idx is not None:
            font.colour_index = n_colour_idx
    style.font = font

    alignment = xlwt.Alignment()
    if spec.align is not None:
        alignment.horz = _DICT_ALIGN_HORZ.get(spec.align, xlwt.Alignment.HORZ_GENERAL)
    if spec.valign is not None:
        alignment.vert = _DICT_ALIGN_VERT.get(spec.valign, xlwt.Alignment.VERT_BOTTOM)
    if spec.text_wrap:
        alignment.wrap = xlwt.Alignment.WRAP_AT_RIGHT
    style.alignment = alignment

    if spec.border:
        borders = xlwt.Borders()
        borders.left = borders.right = borders.top = borders.bottom = spec.border
        style.borders = borders

    if spec.bg_color is not None:
        n_colour_idx = _resolve_colour_index(spec.bg_color)
        if n_colour_idx is not None:
            pattern = xlwt.Pattern()
            pattern.pattern = xlwt.Pattern.SOLID_PATTERN
            pattern.pattern_fore_colour = n_colour_idx
            style.pattern = pattern

    if spec.num_format is not None:
        style.num_format_str = spec.num_format
    return style


class XlsSheet:
    def __init__(self, backend: "XlsWorkbookBackend", ws: xlwt.Worksheet):
        self._backend = backend
        self._ws = ws

    @property
    def name(self) -> str:
        return self._ws.name

    def write_cell(
        self,
        row_idx: int,
        col_idx: int,
        value: CellScalar,
        fmt: SpecCellFormat | None = None,
    ) -> None:
        # xlwt writes "" as a blank cell
        if fmt is None:
            self._ws.write(row_idx, col_idx, value)
        else:
            self._ws.write(
                row_idx, col_idx, value, self._backend.create_style_cached(fmt)
            )

    def set_row_height(self, row_idx: int, height: float) -> None:
        row = self._ws.row(row_idx)
        row.height_mismatch = True
        row.height = int(height * N_TWIPS_PER_POINT)

    def set_column_width(self, col_idx: int, width: float) -> None:
        self._ws.col(col_idx).width = min(
            N_WIDTH_UNITS_MAX, int(width * N_WIDTH_UNITS_PER_CHAR)
        )


class XlsWorkbookBackend:
    """
    Legacy (``.xls``, BIFF8) document backend on top of :mod:`xlwt`.

    Sheets are opened with ``cell_overwrite_ok=True`` because a suppressed
    blank row is overwritten in place by the next record.
    """

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self.wb = xlwt.Workbook(encoding=encoding)
        self._style_cache: dict[SpecCellFormat, xlwt.XFStyle] = {}

    @property
    def format_kind(self) -> FormatKind:
        return FormatKind.LEGACY

    @property
    def limits(self) -> SpecFormatLimits:
        return DICT_FORMAT_LIMITS[FormatKind.LEGACY]

    def create_style_cached(self, spec: SpecCellFormat) -> xlwt.XFStyle:
        style = self._style_cache.get(spec)
        if style is None:
            style = convert_format_to_xlwt(spec)
            self._style_cache[spec] = style
        return style

    def add_sheet(self, name: str) -> XlsSheet:
        return XlsSheet(self, self.wb.add_sheet(name, cell_overwrite_ok=True))

    def save(self, sink: BinaryIO) -> None:
        self.wb.save(sink)
