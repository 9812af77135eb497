from .conf import DEFAULT_CELL_FORMAT, DEFAULT_TITLE_FORMAT, N_WIDTH_COLUMN_DEFAULT
from .spec import SpecCellFormat, SpecStylingPolicy


def fill_default_formats(policy: SpecStylingPolicy, *, if_write_title: bool) -> None:
    if policy.cell_format is None:
        policy.cell_format = DEFAULT_CELL_FORMAT
    if if_write_title and policy.title_format is None:
        policy.title_format = DEFAULT_TITLE_FORMAT


def resolve_cell_format(prop: str, policy: SpecStylingPolicy) -> SpecCellFormat:
    fmt = policy.cell_formats.get(prop)
    if fmt is not None:
        return fmt
    return DEFAULT_CELL_FORMAT if policy.cell_format is None else policy.cell_format


def resolve_title_format(prop: str, policy: SpecStylingPolicy) -> SpecCellFormat:
    fmt = policy.title_formats.get(prop)
    if fmt is not None:
        return fmt
    return DEFAULT_TITLE_FORMAT if policy.title_format is None else policy.title_format


def resolve_column_width(prop: str, policy: SpecStylingPolicy) -> float:
    n_width = policy.column_widths.get(prop)
    if n_width is None:
        n_width = policy.column_width
    # non-positive widths fall back to the package default
    return n_width if n_width > 0 else N_WIDTH_COLUMN_DEFAULT


def resolve_row_height(policy: SpecStylingPolicy, *, if_title: bool) -> float | None:
    n_height = policy.title_row_height if if_title else policy.row_height
    return n_height if n_height > 0 else None
