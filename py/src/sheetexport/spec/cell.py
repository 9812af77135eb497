# Immutable style value shared by every document backend.

from collections.abc import Iterator
from dataclasses import dataclass, fields, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class SpecCellFormat:
    """
    Style of one cell; ``None`` fields are left to the backend default.

    Instances are hashable and used as cache keys, so each backend creates a
    native format object at most once per distinct value. Field names follow
    the xlsxwriter format properties; the legacy backend maps the same fields
    onto ``xlwt`` styles and ignores what BIFF8 cannot express.
    """

    font_name: str | None = None
    font_size: int | None = None
    bold: bool | None = None
    italic: bool | None = None
    font_color: str | None = None

    align: str | None = None
    valign: str | None = None
    text_wrap: bool | None = None
    border: int | None = None
    bg_color: str | None = None

    num_format: str | None = None

    def iter_set_items(self) -> Iterator[tuple[str, Any]]:
        for _field in fields(self):
            v_field = getattr(self, _field.name)
            if v_field is not None:
                yield _field.name, v_field

    @property
    def is_empty(self) -> bool:
        return next(self.iter_set_items(), None) is None

    def with_(self, **kwargs: Any) -> "SpecCellFormat":
        return replace(self, **kwargs)

    def to_xlsxwriter(self) -> dict[str, Any]:
        return dict(self.iter_set_items())
