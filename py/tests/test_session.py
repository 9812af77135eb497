from __future__ import annotations

import io
import json
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import pytest

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from sheetexport import (  # noqa: E402
    UNSET,
    ConfigError,
    ExportSession,
    FormatKind,
    SpecBooleanMapping,
    SpecCellFormat,
    SpecCellOverride,
    SpecExportConfig,
    SpecStylingPolicy,
)
from sheetexport.backend import MemoryWorkbookBackend  # noqa: E402
from sheetexport.conf import DEFAULT_CELL_FORMAT, DEFAULT_TITLE_FORMAT  # noqa: E402


@dataclass
class Employee:
    name: str
    active: bool
    joined: datetime


def _build_session(
    *,
    format_kind: FormatKind = FormatKind.MODERN,
    policy: SpecStylingPolicy | None = None,
    **kwargs,
) -> tuple[ExportSession, MemoryWorkbookBackend]:
    backend = MemoryWorkbookBackend(format_kind)
    cfg = SpecExportConfig(format_kind=format_kind, **kwargs)
    return ExportSession(cfg, policy, backend=backend), backend


def test_properties_and_titles_derived_from_first_record() -> None:
    session, backend = _build_session()
    session.write(
        [
            Employee("Ann", True, datetime(2020, 1, 2, 3, 4, 5)),
            Employee("Bob", False, datetime(2021, 6, 7)),
        ]
    )

    assert session.config.properties == ["name", "active", "joined"]
    assert session.config.titles == ["name", "active", "joined"]
    assert backend.sheets[0].to_rows() == [
        ["name", "active", "joined"],
        ["Ann", True, "2020/01/02 03:04:05"],
        ["Bob", False, "2021/06/07 00:00:00"],
    ]


def test_title_and_data_formats_are_applied() -> None:
    session, backend = _build_session(properties=["a"])
    session.write([{"a": 1}])

    sheet = backend.sheets[0]
    assert sheet.formats[(0, 0)] == DEFAULT_TITLE_FORMAT
    assert sheet.formats[(1, 0)] == DEFAULT_CELL_FORMAT
    assert session.policy.cell_format == DEFAULT_CELL_FORMAT


def test_titles_must_match_properties() -> None:
    session, backend = _build_session(properties=["a", "b"], titles=["A"])
    with pytest.raises(ConfigError):
        session.write([{"a": 1, "b": 2}])
    assert backend.sheets == []


def test_titles_ignored_when_not_written() -> None:
    session, backend = _build_session(
        properties=["a", "b"], titles=["A"], if_write_title=False
    )
    session.write([{"a": 1, "b": 2}])
    assert backend.sheets[0].to_rows() == [[1, 2]]


def test_column_ceiling_of_legacy_format() -> None:
    l_props = [f"c{_idx}" for _idx in range(300)]
    session, backend = _build_session(
        format_kind=FormatKind.LEGACY, properties=l_props
    )
    with pytest.raises(ConfigError):
        session.write([{_prop: 1 for _prop in l_props}])
    assert backend.sheets == []

    session_modern, _ = _build_session(properties=l_props)
    session_modern.write([{_prop: 1 for _prop in l_props}])
    assert session_modern.rows_data == 1


def test_row_ceiling_of_legacy_format() -> None:
    with pytest.raises(ConfigError):
        _build_session(format_kind=FormatKind.LEGACY, rows_per_page=65_535)
    session, _ = _build_session(format_kind=FormatKind.LEGACY, rows_per_page=65_534)
    assert session.cursor.rows_per_page_allowed == 65_535


def test_backend_must_match_format_kind() -> None:
    with pytest.raises(ConfigError):
        ExportSession(
            SpecExportConfig(format_kind=FormatKind.MODERN),
            backend=MemoryWorkbookBackend(FormatKind.LEGACY),
        )


def test_boolean_mapping_onto_bool_fails_validation_and_session_stays_usable() -> None:
    policy = SpecStylingPolicy(
        boolean_mappings={"ok": SpecBooleanMapping(true_value=True, false_value="no")}
    )
    session, backend = _build_session(policy=policy, properties=["ok"])
    with pytest.raises(ConfigError):
        session.write([{"ok": True}])
    assert backend.sheets == []

    policy.put_boolean_mapping("ok", "yes", "no")
    session.write([{"ok": True}, {"ok": False}])
    assert backend.sheets[0].to_rows() == [["ok"], ["yes"], ["no"]]


def test_batches_continue_where_the_previous_one_ended() -> None:
    session, backend = _build_session(rows_per_page=5, properties=["n"])
    session.write([{"n": _idx} for _idx in range(3)])
    session.write([{"n": _idx} for _idx in range(3, 7)])
    session.write_one({"n": 7})

    assert [_sheet.height for _sheet in backend.sheets] == [6, 4]
    assert backend.sheets[1].to_rows() == [["n"], [5], [6], [7]]
    assert session.rows_data == 8
    assert session.pages == 2


def test_empty_batch_writes_nothing() -> None:
    session, backend = _build_session(properties=["n"])
    session.write([])
    assert backend.sheets == []
    assert session.pages == 0


def test_empty_batch_without_properties_fails() -> None:
    session, _ = _build_session()
    with pytest.raises(ConfigError):
        session.write([])


def test_write_rejects_a_single_mapping() -> None:
    session, _ = _build_session()
    with pytest.raises(TypeError):
        session.write({"a": 1})


def test_cell_callback_overrides_value_and_format() -> None:
    fmt_alert = SpecCellFormat(font_color="red")

    def on_cell(prop, value, record, session):
        if prop == "score" and value < 0:
            return SpecCellOverride(value="n/a", format=fmt_alert)
        if prop == "note":
            return SpecCellOverride(value=None)
        if prop == "score":
            return SpecCellOverride(format=fmt_alert)
        return None

    backend = MemoryWorkbookBackend()
    session = ExportSession(
        SpecExportConfig(properties=["score", "note"]), backend=backend, on_cell=on_cell
    )
    session.write([{"score": -1, "note": "x"}, {"score": 5, "note": "y"}])

    sheet = backend.sheets[0]
    assert sheet.to_rows() == [["score", "note"], ["n/a", ""], [5, ""]]
    assert sheet.formats[(1, 0)] == fmt_alert
    assert sheet.formats[(2, 0)] == fmt_alert
    assert sheet.formats[(1, 1)] == DEFAULT_CELL_FORMAT
    assert SpecCellOverride().has_value is False
    assert SpecCellOverride(value=UNSET).has_value is False


def test_callback_sees_record_and_session() -> None:
    l_seen: list[tuple] = []

    def on_cell(prop, value, record, session):
        l_seen.append((prop, value, record, session.rows_non_blank))

    session = ExportSession(
        SpecExportConfig(properties=["a"]),
        backend=MemoryWorkbookBackend(),
        on_cell=on_cell,
    )
    dict_record = {"a": 1}
    session.write([dict_record])
    assert l_seen == [("a", 1, dict_record, 1)]


def test_callback_returning_wrong_type_fails_session() -> None:
    session = ExportSession(
        SpecExportConfig(properties=["a"]),
        backend=MemoryWorkbookBackend(),
        on_cell=lambda prop, value, record, session: "oops",
    )
    with pytest.raises(TypeError):
        session.write([{"a": 1}])
    with pytest.raises(RuntimeError):
        session.write([{"a": 2}])


def test_end_write_saves_rows_emitted_before_a_failed_write() -> None:
    def on_cell(prop, value, record, session):
        if value == 3:
            raise ValueError("bad value")
        return None

    session = ExportSession(
        SpecExportConfig(properties=["a"]),
        backend=MemoryWorkbookBackend(),
        on_cell=on_cell,
    )
    with pytest.raises(ValueError):
        session.write([{"a": 1}, {"a": 2}, {"a": 3}, {"a": 4}])
    with pytest.raises(RuntimeError):
        session.write([{"a": 5}])

    buffer = io.BytesIO()
    assert session.end_write(buffer) is True
    dict_doc = json.loads(buffer.getvalue())
    assert dict_doc["sheets"][0]["rows"] == [["a"], [1], [2]]
    assert session.rows_data == 2
    with pytest.raises(RuntimeError):
        session.end_write(io.BytesIO())


def test_end_write_serializes_and_closes() -> None:
    session, _ = _build_session(properties=["a"])
    session.write([{"a": 1}, {"a": "b"}])

    buffer = io.BytesIO()
    assert session.end_write(buffer) is True
    dict_doc = json.loads(buffer.getvalue())
    assert dict_doc["format_kind"] == "xlsx"
    assert dict_doc["sheets"] == [{"name": "Sheet_1", "rows": [["a"], [1], ["b"]]}]

    with pytest.raises(RuntimeError):
        session.write([{"a": 2}])
    with pytest.raises(RuntimeError):
        session.end_write(io.BytesIO())


def test_session_as_context_manager_saves_inside_the_block() -> None:
    buffer = io.BytesIO()
    with ExportSession(
        SpecExportConfig(properties=["a"]), backend=MemoryWorkbookBackend()
    ) as session:
        session.write([{"a": 1}])
        session.end_write(buffer)

    assert session.is_ended
    assert json.loads(buffer.getvalue())["sheets"][0]["rows"] == [["a"], [1]]


def test_session_closed_before_end_write_discards_document() -> None:
    with pytest.raises(KeyError):
        with ExportSession(
            SpecExportConfig(properties=["a"]), backend=MemoryWorkbookBackend()
        ) as session:
            session.write([{"a": 1}])
            raise KeyError("boom")

    assert session.is_ended
    with pytest.raises(RuntimeError):
        session.write([{"a": 2}])
    with pytest.raises(RuntimeError):
        session.end_write(io.BytesIO())
    session.close()

def test_end_write_accepts_a_path(tmp_path: Path) -> None:
    session, _ = _build_session(properties=["a"])
    session.write([{"a": 1}])
    path_out = tmp_path / "out.json"
    assert session.end_write(path_out)
    assert json.loads(path_out.read_text(encoding="utf-8"))["sheets"][0]["rows"] == [
        ["a"],
        [1],
    ]


def test_report_summarizes_document() -> None:
    session, _ = _build_session(rows_per_page=2, properties=["a"])
    session.write([{"a": _idx} for _idx in range(5)])

    report = session.report()
    assert report.format_kind == FormatKind.MODERN
    assert report.pages == 3
    assert report.rows_data == 5
    assert report.rows_non_blank == 8
    assert report.sheet_names == ("Sheet_1", "Sheet_2", "Sheet_3")


def test_write_frame_uses_dataframe_columns() -> None:
    pl = pytest.importorskip("polars")

    df = pl.DataFrame({"id": [1, 2], "label": ["a", None]})
    session, backend = _build_session()
    session.write_frame(df)

    assert session.config.properties == ["id", "label"]
    assert backend.sheets[0].to_rows() == [["id", "label"], [1, "a"], [2, ""]]
