from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .backend.base import SheetBackend
from .spec import SpecCellFormat, SpecCellOverride, SpecStylingPolicy
from .styles import resolve_cell_format, resolve_title_format
from .values import coerce_cell_value

# (property, raw value, record, session) -> optional replacement
CellCallback = Callable[[str, Any, Any, Any], SpecCellOverride | None]


@dataclass(frozen=True, slots=True)
class SpecRowHandle:
    sheet: SheetBackend
    row_idx: int  # 0-based, within `sheet`


def _apply_cell_override(
    override: SpecCellOverride | None,
    *,
    value: Any,
    fmt: SpecCellFormat,
) -> tuple[Any, SpecCellFormat]:
    if override is None:
        return value, fmt
    if not isinstance(override, SpecCellOverride):
        raise TypeError(
            "Cell callback must return a SpecCellOverride or None, "
            f"got {type(override).__name__!r}."
        )
    if isinstance(override.format, SpecCellFormat):
        fmt = override.format
    if override.has_value:
        value = override.value
    return value, fmt


def write_row(
    row: SpecRowHandle,
    record_mapping: Mapping[str, Any],
    record: Any,
    properties: Sequence[str],
    policy: SpecStylingPolicy,
    *,
    date_format: str,
    on_cell: CellCallback | None = None,
    session: Any = None,
) -> bool:
    """
    Write one record into ``row``, one cell per property present in the record.

    Properties missing from ``record_mapping`` leave their cell untouched
    (sparse rows are allowed). For every other property ``on_cell`` may return
    a :class:`SpecCellOverride` replacing the value and/or the format; the
    resulting value is coerced and written with the resolved format.

    Returns:
        bool: ``True`` if at least one written cell is not blank. A row without
        any written cell is blank.
    """
    b_is_non_blank = False
    for _col_idx, _prop in enumerate(properties):
        if _prop not in record_mapping:
            continue

        v_raw = record_mapping[_prop]
        cfg_override = (
            None if on_cell is None else on_cell(_prop, v_raw, record, session)
        )
        v_cell_, fmt_cell_ = _apply_cell_override(
            cfg_override, value=v_raw, fmt=resolve_cell_format(_prop, policy)
        )

        cell_value_ = coerce_cell_value(
            v_cell_, _prop, policy, date_format=date_format
        )
        row.sheet.write_cell(row.row_idx, _col_idx, cell_value_.value, fmt_cell_)
        if not cell_value_.is_blank:
            b_is_non_blank = True
    return b_is_non_blank


def write_title_row(
    row: SpecRowHandle,
    titles: Sequence[str],
    properties: Sequence[str],
    policy: SpecStylingPolicy,
) -> None:
    for _col_idx, _title in enumerate(titles):
        row.sheet.write_cell(
            row.row_idx,
            _col_idx,
            _title,
            resolve_title_format(properties[_col_idx], policy),
        )
