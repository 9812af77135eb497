from __future__ import annotations

from dataclasses import dataclass
from importlib import import_module
from types import MappingProxyType, ModuleType
from typing import Any


@dataclass(frozen=True, slots=True)
class SpecOptionalDependency:
    """A feature that needs libraries shipped through a package extra."""

    feature: str
    extra: str
    modules: tuple[str, ...]

    def is_missing(self, module_name: str | None) -> bool:
        c_top_level = (module_name or "").split(".")[0]
        return c_top_level in {_mod.split(".")[0] for _mod in self.modules}

    def build_error(self, missing_module: str | None) -> ModuleNotFoundError:
        c_missing = (
            f"Missing optional dependency `{missing_module}`."
            if missing_module
            else "Missing optional dependency."
        )
        return ModuleNotFoundError(
            f"{self.feature} is unavailable. {c_missing} "
            f'Install it with `pip install "sheetexport[{self.extra}]"`.'
        )


DICT_OPTIONAL_DEPENDENCIES = MappingProxyType(
    {
        "xlsx": SpecOptionalDependency(
            feature="Modern (.xlsx) export", extra="xlsx", modules=("xlsxwriter",)
        ),
        "xls": SpecOptionalDependency(
            feature="Legacy (.xls) export", extra="xls", modules=("xlwt",)
        ),
        "polars": SpecOptionalDependency(
            feature="DataFrame export", extra="polars", modules=("polars",)
        ),
        "cli": SpecOptionalDependency(
            feature="Command line interface",
            extra="cli",
            modules=("polars", "rich", "rich_argparse"),
        ),
    }
)


def import_optional_module(
    module_name: str,
    *,
    dependency: SpecOptionalDependency | str,
    package: str | None = None,
) -> ModuleType:
    """
    Import ``module_name``; a missing library of ``dependency`` becomes a
    ``ModuleNotFoundError`` with an install hint.

    Any other import error propagates unchanged.
    """
    if isinstance(dependency, str):
        dependency = DICT_OPTIONAL_DEPENDENCIES[dependency]
    try:
        return import_module(module_name, package=package)
    except ModuleNotFoundError as exc:
        if dependency.is_missing(exc.name):
            raise dependency.build_error(exc.name) from exc
        raise


def import_optional_attr(
    module_name: str,
    attr_name: str,
    *,
    dependency: SpecOptionalDependency | str,
    package: str | None = None,
) -> Any:
    module = import_optional_module(
        module_name, dependency=dependency, package=package
    )
    return getattr(module, attr_name)
