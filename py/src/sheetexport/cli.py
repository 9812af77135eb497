import argparse
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from ._optional_deps import import_optional_attr, import_optional_module
from .conf import C_DATE_FORMAT_DEFAULT, C_SHEET_NAME_DEFAULT, N_WIDTH_COLUMN_DEFAULT, FormatKind
from .errors import ConfigError
from .session import ExportSession
from .spec import SpecExportConfig, SpecExportReport, SpecStylingPolicy

pl = import_optional_module("polars", dependency="cli")
rich_argparse = import_optional_module("rich_argparse", dependency="cli")
Console = import_optional_attr("rich.console", "Console", dependency="cli")
Table = import_optional_attr("rich.table", "Table", dependency="cli")


class SmartFormatter(
    rich_argparse.ArgumentDefaultsRichHelpFormatter,
    rich_argparse.RawTextRichHelpFormatter,
):
    """
    Keep manual newlines/indentation AND show (default: ...) in help.
    """

    pass


################################################################################
# #region Input
def read_table(path: Path) -> pl.DataFrame:
    """Read a tabular file with polars, picking the reader by file suffix."""
    match path.suffix.lower():
        case ".csv":
            return pl.read_csv(path, try_parse_dates=True)
        case ".tsv" | ".tab":
            return pl.read_csv(path, separator="\t", try_parse_dates=True)
        case ".parquet" | ".pq":
            return pl.read_parquet(path)
        case ".json":
            return pl.read_json(path)
        case ".ndjson" | ".jsonl":
            return pl.read_ndjson(path)
        case _:
            raise ValueError(
                f"Unsupported input file type: {path.suffix!r} "
                "(expected csv, tsv, parquet, json or ndjson)."
            )


def resolve_format_kind(format_kind: str | None, path_output: Path) -> FormatKind:
    if format_kind:
        return FormatKind(format_kind)
    if path_output.suffix.lower() == ".xls":
        return FormatKind.LEGACY
    return FormatKind.MODERN


# #endregion
################################################################################
# #region Parser
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheetexport",
        description=(
            "Export a tabular file into a paginated spreadsheet document.\n"
            "Input: csv, tsv, parquet, json, ndjson."
        ),
        formatter_class=SmartFormatter,
    )
    parser.add_argument("input", type=Path, help="Input table.")
    parser.add_argument(
        "-o", "--output", type=Path, required=True, help="Output .xlsx / .xls file."
    )
    parser.add_argument(
        "--format",
        dest="format_kind",
        choices=[str(_kind) for _kind in FormatKind],
        default=None,
        help="Document format. Inferred from the output suffix when omitted.",
    )
    parser.add_argument(
        "--rows-per-page",
        type=int,
        default=-1,
        help="Data rows per sheet; <= 0 fills sheets up to the format limit.",
    )
    parser.add_argument(
        "--reserved-rows",
        type=int,
        default=0,
        help="Empty rows left at the top of every sheet.",
    )
    parser.add_argument(
        "--no-title", action="store_true", help="Do not write a title row."
    )
    parser.add_argument(
        "--keep-blank-rows",
        action="store_true",
        help="Keep rows whose cells are all empty.",
    )
    parser.add_argument(
        "--columns", nargs="+", default=None, help="Columns to export, in order."
    )
    parser.add_argument(
        "--exclude", nargs="+", default=None, help="Columns to leave out."
    )
    parser.add_argument(
        "--titles", nargs="+", default=None, help="Title row, one per column."
    )
    parser.add_argument(
        "--date-format",
        default=C_DATE_FORMAT_DEFAULT,
        help="strftime pattern for date and datetime cells.",
    )
    parser.add_argument(
        "--column-width",
        type=float,
        default=N_WIDTH_COLUMN_DEFAULT,
        help="Column width in characters.",
    )
    parser.add_argument(
        "--sheet-name",
        default=C_SHEET_NAME_DEFAULT,
        help="Sheet base name; sheets are named <name>_1, <name>_2, ...",
    )
    return parser


# #endregion
################################################################################
# #region Main
def print_report(report: SpecExportReport, path_output: Path, console: Console) -> None:
    table = Table(title=f"Export: {path_output}", show_header=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Format", str(report.format_kind))
    table.add_row("Sheets", str(report.pages))
    table.add_row("Data rows", str(report.rows_data))
    table.add_row("Non-blank rows", str(report.rows_non_blank))
    console.print(table)


def main(argv: Sequence[str] | None = None, *, console: Console | None = None) -> int:
    args = build_parser().parse_args(argv)
    console = console or Console()

    try:
        cfg_export = SpecExportConfig(
            if_write_title=not args.no_title,
            if_skip_blank_rows=not args.keep_blank_rows,
            properties=args.columns or [],
            exclude_properties=args.exclude or [],
            titles=args.titles or [],
            rows_per_page=args.rows_per_page,
            reserved_rows=args.reserved_rows,
            format_kind=resolve_format_kind(args.format_kind, args.output),
            date_format=args.date_format,
            sheet_name=args.sheet_name,
        )
        policy = SpecStylingPolicy(column_width=args.column_width)

        df = read_table(args.input)
        logger.info(f"Read {df.height} rows x {df.width} columns from {args.input}")

        session = ExportSession(cfg_export, policy)
        session.write_frame(df)
        session.end_write(args.output)
    except (ConfigError, ValueError) as e:
        logger.error(f"Export failed: {e}")
        return 2

    print_report(session.report(), args.output, console)
    return 0


# #endregion
################################################################################
