import math
import numbers
from dataclasses import dataclass
from datetime import date
from typing import Any

from .errors import ConfigError
from .spec import SpecStylingPolicy

CellScalar = str | bool | int | float


@dataclass(frozen=True, slots=True)
class SpecCellValue:
    value: CellScalar
    is_blank: bool = False


def convert_nan_inf_to_str(x: float) -> str:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Inf" if x > 0 else "-Inf"
    raise ValueError("Input is neither NaN nor Inf.")


def coerce_cell_value(
    value: Any,
    prop: str,
    policy: SpecStylingPolicy,
    *,
    date_format: str,
) -> SpecCellValue:
    """
    Map an arbitrary attribute value onto a spreadsheet primitive.

    Rules, first match wins:

    1. ``None`` -> ``""``, the only blank outcome.
    2. ``date`` / ``datetime`` -> text via ``strftime``, using the attribute's
       entry in ``policy.date_formats`` or ``date_format``.
    3. ``bool`` -> the attribute's boolean mapping (coerced again) if any,
       else the bool itself. A mapped substitute that is a bool is rejected.
    4. Numbers -> ``int`` / ``float``; NaN, infinities and numbers beyond
       the double range become text.
    5. ``str`` -> unchanged.
    6. Anything else -> ``str(value)``.

    Raises:
        ConfigError: If the boolean mapping of ``prop`` maps onto a bool.
    """
    if value is None:
        return SpecCellValue(value="", is_blank=True)

    if isinstance(value, date):
        c_date_format = policy.date_formats.get(prop) or date_format
        return SpecCellValue(value=value.strftime(c_date_format))

    if isinstance(value, bool):
        cfg_mapping = policy.boolean_mappings.get(prop)
        if cfg_mapping is None:
            return SpecCellValue(value=value)
        v_mapped = cfg_mapping.select(value)
        if isinstance(v_mapped, bool):
            raise ConfigError(
                f"Boolean mapping of property {prop!r} must not map onto a bool."
            )
        return coerce_cell_value(v_mapped, prop, policy, date_format=date_format)

    if isinstance(value, numbers.Real):
        try:
            n_value = float(value)
        except OverflowError:
            # out of double range, no backend stores it as a number
            return SpecCellValue(value=str(value))
        if not math.isfinite(n_value):
            return SpecCellValue(value=convert_nan_inf_to_str(n_value))
        if isinstance(value, numbers.Integral):
            return SpecCellValue(value=int(value))
        return SpecCellValue(value=n_value)

    if isinstance(value, str):
        return SpecCellValue(value=value)

    return SpecCellValue(value=str(value))
