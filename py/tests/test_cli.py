from __future__ import annotations

import io
import sys
import zipfile
from pathlib import Path

import pytest

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

pytest.importorskip("polars")
pytest.importorskip("rich_argparse")
from rich.console import Console  # noqa: E402

from sheetexport.cli import build_parser, main, read_table, resolve_format_kind  # noqa: E402
from sheetexport.conf import FormatKind  # noqa: E402


def _write_csv(path: Path, n_rows: int) -> Path:
    l_lines = ["id,name,joined"]
    l_lines += [f"{_idx},n{_idx},2024-01-0{_idx % 9 + 1}" for _idx in range(n_rows)]
    path.write_text("\n".join(l_lines) + "\n", encoding="utf-8")
    return path


def test_parser_defaults() -> None:
    ns = build_parser().parse_args(["in.csv", "-o", "out.xlsx"])
    assert ns.input == Path("in.csv")
    assert ns.output == Path("out.xlsx")
    assert ns.format_kind is None
    assert ns.rows_per_page == -1
    assert ns.reserved_rows == 0
    assert not ns.no_title
    assert ns.sheet_name == "Sheet"


def test_format_kind_inferred_from_output_suffix() -> None:
    assert resolve_format_kind(None, Path("a.xls")) == FormatKind.LEGACY
    assert resolve_format_kind(None, Path("a.XLSX")) == FormatKind.MODERN
    assert resolve_format_kind("xls", Path("a.xlsx")) == FormatKind.LEGACY


def test_main_exports_csv_to_xlsx(tmp_path: Path) -> None:
    path_in = _write_csv(tmp_path / "in.csv", 5)
    path_out = tmp_path / "out.xlsx"
    buffer = io.StringIO()

    n_code = main(
        [str(path_in), "-o", str(path_out), "--rows-per-page", "2", "--exclude", "joined"],
        console=Console(file=buffer, width=120),
    )

    assert n_code == 0
    with zipfile.ZipFile(path_out) as zf:
        l_sheets = [_name for _name in zf.namelist() if _name.startswith("xl/worksheets/sheet")]
    assert len(l_sheets) == 3
    assert "Sheets" in buffer.getvalue()


def test_main_returns_2_on_unsupported_input_type(tmp_path: Path) -> None:
    path_in = tmp_path / "in.txt"
    path_in.write_text("a\n1\n", encoding="utf-8")

    n_code = main(
        [str(path_in), "-o", str(tmp_path / "out.xlsx")],
        console=Console(file=io.StringIO()),
    )
    assert n_code == 2


def test_main_rejects_title_mismatch(tmp_path: Path) -> None:
    path_in = _write_csv(tmp_path / "in.csv", 2)
    n_code = main(
        [str(path_in), "-o", str(tmp_path / "out.xlsx"), "--titles", "Only one"],
        console=Console(file=io.StringIO()),
    )
    assert n_code == 2


def test_read_table_rejects_unknown_suffix(tmp_path: Path) -> None:
    path_in = tmp_path / "in.xml"
    path_in.write_text("<a/>", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported input file type"):
        read_table(path_in)
