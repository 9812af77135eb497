from typing import TYPE_CHECKING, Any

from .._optional_deps import import_optional_attr
from ..conf import FormatKind
from .base import SheetBackend, WorkbookBackend
from .memory import MemorySheet, MemoryWorkbookBackend

__all__ = [
    "SheetBackend",
    "WorkbookBackend",
    "MemorySheet",
    "MemoryWorkbookBackend",
    "XlsxWorkbookBackend",
    "XlsWorkbookBackend",
    "create_workbook_backend",
]

if TYPE_CHECKING:
    from .xls import XlsWorkbookBackend
    from .xlsx import XlsxWorkbookBackend


def __getattr__(name: str) -> Any:
    if name == "XlsxWorkbookBackend":
        return import_optional_attr(".xlsx", name, dependency="xlsx", package=__name__)
    if name == "XlsWorkbookBackend":
        return import_optional_attr(".xls", name, dependency="xls", package=__name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def create_workbook_backend(format_kind: FormatKind | str) -> WorkbookBackend:
    """Create the document backend for ``format_kind``."""
    match FormatKind(format_kind):
        case FormatKind.MODERN:
            cls_backend = __getattr__("XlsxWorkbookBackend")
        case FormatKind.LEGACY:
            cls_backend = __getattr__("XlsWorkbookBackend")
        case _:
            raise ValueError(f"Unsupported format kind: {format_kind!r}")
    return cls_backend()
