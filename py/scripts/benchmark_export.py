from __future__ import annotations

import argparse
import json
import platform
import statistics
import sys
import tempfile
import zipfile
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from time import perf_counter

import polars as pl

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from sheetexport import ExportSession, FormatKind, SpecExportConfig  # noqa: E402


@dataclass(frozen=True)
class ExportBenchmarkScenario:
    name: str
    n_rows: int
    n_numeric_cols: int
    n_text_cols: int
    rows_per_page: int = -1
    format_kind: FormatKind = FormatKind.MODERN


@dataclass(frozen=True)
class ExportBenchmarkStats:
    scenario: ExportBenchmarkScenario
    n_cols: int
    n_pages: int
    repeats: int
    warmup_runs: int
    times_seconds: list[float]
    mean_seconds: float
    median_seconds: float
    min_seconds: float
    max_seconds: float
    stdev_seconds: float
    output_size_bytes_mean: int


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run paginated export benchmarks for sheetexport.ExportSession.",
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=3,
        help="Number of measured runs for each scenario.",
    )
    parser.add_argument(
        "--warmup",
        type=int,
        default=1,
        help="Number of warmup runs for each scenario.",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=PROJECT_ROOT / "benchmarks" / "export" / "results",
        help="Directory where benchmark result files are written.",
    )
    parser.add_argument(
        "--profile",
        choices=("default", "huge"),
        default="default",
        help="Scenario profile to run.",
    )
    return parser.parse_args()


def build_scenarios(profile: str) -> list[ExportBenchmarkScenario]:
    if profile == "default":
        return [
            ExportBenchmarkScenario(
                name="narrow_tall_single_page",
                n_rows=20_000,
                n_numeric_cols=6,
                n_text_cols=2,
            ),
            ExportBenchmarkScenario(
                name="narrow_tall_paged",
                n_rows=20_000,
                n_numeric_cols=6,
                n_text_cols=2,
                rows_per_page=5_000,
            ),
            ExportBenchmarkScenario(
                name="legacy_paged",
                n_rows=20_000,
                n_numeric_cols=6,
                n_text_cols=2,
                rows_per_page=10_000,
                format_kind=FormatKind.LEGACY,
            ),
        ]

    return [
        ExportBenchmarkScenario(
            name="huge_tall_paged",
            n_rows=200_000,
            n_numeric_cols=10,
            n_text_cols=4,
            rows_per_page=50_000,
        ),
        ExportBenchmarkScenario(
            name="huge_legacy_at_ceiling",
            n_rows=150_000,
            n_numeric_cols=10,
            n_text_cols=4,
            format_kind=FormatKind.LEGACY,
        ),
    ]


def detect_sheetexport_version() -> str:
    try:
        return metadata.version("sheetexport")
    except metadata.PackageNotFoundError:
        return "local-src"


def build_dataframe(
    *, n_rows: int, n_numeric_cols: int, n_text_cols: int
) -> pl.DataFrame:
    # one column per coercion path: numbers, text, booleans, dates and nulls
    df = pl.DataFrame({"row_id": pl.Series("row_id", range(n_rows), dtype=pl.Int64)})
    df = df.with_columns(
        [
            ((pl.col("row_id") * (_idx + 1)).cast(pl.Float64) / 7.0).alias(
                f"value_{_idx:02d}"
            )
            for _idx in range(n_numeric_cols)
        ]
        + [
            pl.format("item_{}_{}", pl.lit(_idx), pl.col("row_id") % 997).alias(
                f"text_{_idx:02d}"
            )
            for _idx in range(n_text_cols)
        ]
        + [
            ((pl.col("row_id") % 3) == 0).alias("is_flagged"),
            pl.date(2024, 1, 1).alias("day"),
            pl.when((pl.col("row_id") % 50) == 0)
            .then(None)
            .otherwise(pl.col("row_id"))
            .alias("sparse"),
        ]
    )
    return df


def count_xlsx_sheets(path_xlsx_out: Path) -> int:
    with zipfile.ZipFile(path_xlsx_out) as zf:
        return sum(
            1
            for _name in zf.namelist()
            if _name.startswith("xl/worksheets/sheet") and _name.endswith(".xml")
        )


def run_one_export(
    *, df: pl.DataFrame, scenario: ExportBenchmarkScenario, path_file_out: Path
) -> tuple[float, int]:
    n_t_start = perf_counter()
    session = ExportSession(
        SpecExportConfig(
            rows_per_page=scenario.rows_per_page, format_kind=scenario.format_kind
        )
    )
    session.write_frame(df)
    session.end_write(path_file_out)
    n_elapsed = perf_counter() - n_t_start

    if scenario.format_kind == FormatKind.MODERN:
        n_sheets = count_xlsx_sheets(path_file_out)
        if n_sheets != session.pages:
            raise ValueError(
                f"Sheet count mismatch: session={session.pages}, file={n_sheets}."
            )
    if session.rows_data != df.height:
        raise ValueError(
            f"Row count mismatch: expected={df.height}, got={session.rows_data}."
        )
    return n_elapsed, session.pages


def benchmark_scenario(
    *,
    scenario: ExportBenchmarkScenario,
    repeat: int,
    warmup: int,
    path_dir_tmp: Path,
) -> ExportBenchmarkStats:
    df = build_dataframe(
        n_rows=scenario.n_rows,
        n_numeric_cols=scenario.n_numeric_cols,
        n_text_cols=scenario.n_text_cols,
    )
    c_suffix = f".{scenario.format_kind}"

    for n_idx in range(warmup):
        path_file_out = path_dir_tmp / f"{scenario.name}_warmup_{n_idx}{c_suffix}"
        run_one_export(df=df, scenario=scenario, path_file_out=path_file_out)
        path_file_out.unlink(missing_ok=True)

    l_times_seconds: list[float] = []
    l_output_size_bytes: list[int] = []
    n_pages = 0
    for n_idx in range(repeat):
        path_file_out = path_dir_tmp / f"{scenario.name}_{n_idx}{c_suffix}"
        n_elapsed, n_pages = run_one_export(
            df=df, scenario=scenario, path_file_out=path_file_out
        )
        l_times_seconds.append(n_elapsed)
        l_output_size_bytes.append(path_file_out.stat().st_size)
        path_file_out.unlink(missing_ok=True)

    return ExportBenchmarkStats(
        scenario=scenario,
        n_cols=df.width,
        n_pages=n_pages,
        repeats=repeat,
        warmup_runs=warmup,
        times_seconds=l_times_seconds,
        mean_seconds=statistics.mean(l_times_seconds),
        median_seconds=statistics.median(l_times_seconds),
        min_seconds=min(l_times_seconds),
        max_seconds=max(l_times_seconds),
        stdev_seconds=(
            statistics.stdev(l_times_seconds) if len(l_times_seconds) > 1 else 0.0
        ),
        output_size_bytes_mean=round(statistics.mean(l_output_size_bytes)),
    )


def main() -> int:
    args = parse_args()
    if args.repeat < 1:
        raise ValueError("--repeat must be >= 1")

    l_stats: list[ExportBenchmarkStats] = []
    with tempfile.TemporaryDirectory(prefix="sheetexport_bench_") as c_dir_tmp:
        for scenario in build_scenarios(args.profile):
            stats = benchmark_scenario(
                scenario=scenario,
                repeat=args.repeat,
                warmup=max(0, args.warmup),
                path_dir_tmp=Path(c_dir_tmp),
            )
            l_stats.append(stats)
            print(
                f"{scenario.name}: median={stats.median_seconds:.3f}s "
                f"pages={stats.n_pages} size={stats.output_size_bytes_mean}B"
            )

    c_timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    payload = {
        "timestamp_utc": c_timestamp,
        "command": " ".join(sys.argv),
        "platform": platform.platform(),
        "python_version": platform.python_version(),
        "packages": {
            "sheetexport": detect_sheetexport_version(),
            "polars": pl.__version__,
        },
        "scenarios": [asdict(_stats) for _stats in l_stats],
    }

    args.out_dir.mkdir(parents=True, exist_ok=True)
    path_file_json = args.out_dir / f"export_benchmark_{c_timestamp}.json"
    path_file_json.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"Results written to {path_file_json}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
