import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import TracebackType
from typing import Any, BinaryIO, Self

from loguru import logger

from ._optional_deps import import_optional_module
from .attributes import resolve_properties
from .backend import WorkbookBackend, create_workbook_backend
from .errors import ConfigError
from .pagination import (
    PaginationEngine,
    ReservedRowsCallback,
    SpecDocumentCursor,
    derive_allowed_rows_per_page,
)
from .rows import CellCallback
from .spec import (
    SpecExportConfig,
    SpecExportReport,
    SpecFormatLimits,
    SpecStylingPolicy,
)
from .styles import fill_default_formats


################################################################################
# #region Validation
def validate_on_construct(config: SpecExportConfig, limits: SpecFormatLimits) -> int:
    """Validate the page layout once per session; returns rows allowed per page."""
    return derive_allowed_rows_per_page(
        rows_per_page=config.rows_per_page,
        reserved_rows=config.reserved_rows,
        if_write_title=config.if_write_title,
        limits=limits,
    )


def validate_per_write(
    config: SpecExportConfig,
    policy: SpecStylingPolicy,
    limits: SpecFormatLimits,
    record_first: Any | None,
) -> list[str]:
    """
    Resolve and validate the configuration before a batch is written.

    Runs for every batch since the caller may change properties, titles and
    formats between ``write`` calls. Fills titles and default formats in place.

    Returns:
        list[str]: The resolved properties, in column order.

    Raises:
        ConfigError: On any invalid setting; nothing of the batch is written.
    """
    l_properties = resolve_properties(config, record_first)

    if config.if_write_title:
        if not config.titles:
            config.set_titles(l_properties)
        if len(config.titles) != len(l_properties):
            raise ConfigError(
                f"Titles ({len(config.titles)}) and properties "
                f"({len(l_properties)}) differ in length."
            )

    if len(l_properties) > limits.cols_max:
        raise ConfigError(
            f"{len(l_properties)} properties exceed the format limit of "
            f"{limits.cols_max} columns."
        )

    validate_on_construct(config, limits)

    for _prop, _mapping in policy.boolean_mappings.items():
        if isinstance(_mapping.true_value, bool) or isinstance(
            _mapping.false_value, bool
        ):
            raise ConfigError(
                f"Boolean mapping of property {_prop!r} must not map onto a bool."
            )

    fill_default_formats(policy, if_write_title=config.if_write_title)
    return l_properties


# #endregion
################################################################################
# #region ExportSession
class ExportSession:
    """
    Stateful export of record batches into one paginated spreadsheet document.

    ``write`` may be called any number of times; every call validates the
    configuration against its batch and appends the records after those of
    the previous calls. ``end_write`` serializes the document and closes the
    session.

    A session must only be used by one writer at a time. A failure while rows
    are being emitted leaves the document partially written: further ``write``
    calls are refused, but ``end_write`` still saves the rows emitted so far.
    A validation failure is raised before anything of the batch is written.

    Used as a context manager, the session is closed on exit; a session closed
    before ``end_write`` discards its document.

    Parameters
    ----------
    config:
        Export configuration; defaults to :class:`SpecExportConfig`.
    policy:
        Formatting policy; defaults to :class:`SpecStylingPolicy`.
    backend:
        Document backend. Created from ``config.format_kind`` when omitted;
        a backend of another format kind is rejected.
    on_reserved_rows:
        ``(sheet, session) -> None``, called once per page to fill the
        reserved rows. Only called when ``config.reserved_rows > 0``.
    on_cell:
        ``(property, value, record, session) -> SpecCellOverride | None``,
        called for every cell written from a record.
    """

    def __init__(
        self,
        config: SpecExportConfig | None = None,
        policy: SpecStylingPolicy | None = None,
        *,
        backend: WorkbookBackend | None = None,
        on_reserved_rows: ReservedRowsCallback | None = None,
        on_cell: CellCallback | None = None,
    ):
        self.config = SpecExportConfig() if config is None else config
        self.policy = SpecStylingPolicy() if policy is None else policy

        if backend is None:
            backend = create_workbook_backend(self.config.format_kind)
        elif backend.format_kind != self.config.format_kind:
            raise ConfigError(
                f"Backend writes {backend.format_kind!s} but the config asks for "
                f"{self.config.format_kind!s}."
            )
        validate_on_construct(self.config, backend.limits)

        self.backend = backend
        self._engine = PaginationEngine(
            backend,
            self.config,
            self.policy,
            on_reserved_rows=on_reserved_rows,
            on_cell=on_cell,
            session=self,
        )
        self._is_ended = False
        self._is_failed = False

    @property
    def cursor(self) -> SpecDocumentCursor:
        return self._engine.cursor

    @property
    def rows_non_blank(self) -> int:
        """Non-blank rows of the whole document, title rows included."""
        return self._engine.cursor.rows_non_blank

    @property
    def pages(self) -> int:
        return self._engine.cursor.pages

    @property
    def rows_data(self) -> int:
        """Non-blank data rows of the whole document."""
        if not self.config.if_write_title:
            return self.rows_non_blank
        return self.rows_non_blank - self.pages

    def report(self) -> SpecExportReport:
        return SpecExportReport(
            format_kind=self.backend.format_kind,
            pages=self.pages,
            rows_non_blank=self.rows_non_blank,
            rows_data=self.rows_data,
            sheet_names=self._engine.sheet_names,
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self, exc_type: type | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        self.close()

    @property
    def is_ended(self) -> bool:
        return self._is_ended

    def close(self) -> None:
        """End the session; a document not yet saved is discarded."""
        if self._is_ended:
            return
        self._is_ended = True
        logger.warning(
            f"Export session closed before `end_write`; {self.pages} page(s) "
            "discarded."
        )

    def _check_not_ended(self) -> None:
        if self._is_ended:
            raise RuntimeError("Export session already ended; start a new session.")

    def _check_writable(self) -> None:
        self._check_not_ended()
        if self._is_failed:
            raise RuntimeError(
                "Export session failed during a previous write; start a new session."
            )

    def write(self, records: Iterable[Any]) -> Self:
        """
        Validate the configuration and append ``records`` to the document.

        Raises:
            ConfigError: If the configuration is invalid for this batch.
            RuntimeError: If the session has ended or failed.
        """
        self._check_writable()
        if isinstance(records, Mapping):
            raise TypeError("`write` expects an iterable of records; use `write_one`.")

        l_records = [] if records is None else list(records)
        validate_per_write(
            self.config,
            self.policy,
            self.backend.limits,
            l_records[0] if l_records else None,
        )
        self._engine.apply_layout()
        logger.debug(
            f"Writing batch of {len(l_records)} records, "
            f"{len(self.config.properties)} columns."
        )

        try:
            for _record in l_records:
                self._engine.write_record(_record)
        except BaseException:
            self._is_failed = True
            raise
        return self

    def write_one(self, record: Any) -> Self:
        return self.write([] if record is None else [record])

    def write_frame(self, df: Any) -> Self:
        """
        Append the rows of a polars ``DataFrame`` (or anything polars can
        build one from). Its columns are used as properties when none are set.
        """
        pl = import_optional_module("polars", dependency="polars")
        df_custom = df if isinstance(df, pl.DataFrame) else pl.DataFrame(df)
        if not self.config.properties:
            self.config.set_properties(df_custom.columns)
        return self.write(df_custom.iter_rows(named=True))

    def end_write(self, sink: BinaryIO | os.PathLike[str] | str) -> bool:
        """
        Serialize the document into ``sink`` and end the session.

        ``sink`` is a writable binary stream (left open) or a file path.
        Backend and I/O errors propagate unchanged. Allowed after a failed
        ``write``.

        Returns:
            bool: ``True`` once the document has been written.
        """
        self._check_not_ended()
        self._is_ended = True
        if self._is_failed:
            logger.warning(
                "Saving a document whose last write failed; it holds the rows "
                "emitted before the failure."
            )
        if isinstance(sink, (str, os.PathLike)):
            with open(Path(sink), "wb") as fh:
                self.backend.save(fh)
        else:
            self.backend.save(sink)

        if self.cursor.is_last_row_blank:
            logger.warning(
                f"Last row of page {self.pages} is a suppressed blank row and "
                "stays in the document."
            )
        logger.success(
            f"Export done: {self.pages} page(s), {self.rows_data} data row(s), "
            f"format {self.backend.format_kind!s}."
        )
        return True


# #endregion
################################################################################
