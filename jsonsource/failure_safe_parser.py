"""Per-record failure isolation shared by every reader and by schema inference."""
from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterable, List, Optional, TypeVar

from .parse_modes import ParseMode
from .types import StringType, StructType

logger = logging.getLogger(__name__)

R = TypeVar("R")

_MAX_RECORD_IN_MESSAGE = 1000


class BadRecordError(Exception):
    """Raised by a raw parser when one record cannot become rows.

    ``record`` is a zero-argument callable so the raw text is only built when a
    policy actually needs it (reading a whole file back is not free).
    """

    def __init__(self, record: Callable[[], str], cause: Optional[BaseException] = None):
        super().__init__(str(cause) if cause is not None else "bad record")
        self.record = record
        self.cause = cause


class MalformedRecordError(Exception):
    """A malformed record was met while the parse mode is FAILFAST."""

    def __init__(self, record: str, mode: ParseMode = ParseMode.FAILFAST,
                 cause: Optional[BaseException] = None):
        shown = record if len(record) <= _MAX_RECORD_IN_MESSAGE else record[:_MAX_RECORD_IN_MESSAGE] + "..."
        super().__init__(
            f"Malformed records are detected in record parsing. Parse Mode: {mode.value}. "
            f"Record: {shown!r}. Cause: {cause}")
        self.record = record
        self.mode = mode
        self.cause = cause


class FailureSafeParser(Generic[R]):
    """Run ``raw_parser`` on one record, resolving failures per ``mode``.

    ``raw_parser`` returns rows of the data columns (``schema`` without the
    corrupt-record column) and raises :class:`BadRecordError` on malformed
    input. Any other exception is a structural failure and is not caught here.
    """

    def __init__(self, raw_parser: Callable[[R], Iterable[Any]], mode: ParseMode,
                 schema: StructType, column_name_of_corrupt_record: Optional[str] = None):
        self.raw_parser = raw_parser
        self.mode = mode
        self.schema = schema
        self.corrupt_field_index = (
            schema.field_index(column_name_of_corrupt_record)
            if column_name_of_corrupt_record else None)
        if self.corrupt_field_index is not None:
            field = schema.fields[self.corrupt_field_index]
            if not isinstance(field.data_type, StringType) or not field.nullable:
                raise ValueError(
                    f"The field for corrupt records must be string type and nullable: {field}")
        self._on_bad_record = {
            ParseMode.PERMISSIVE: self._permissive,
            ParseMode.DROPMALFORMED: self._drop,
            ParseMode.FAILFAST: self._fail,
        }[mode]

    def parse(self, record: R) -> List[Any]:
        try:
            rows = list(self.raw_parser(record))
        except BadRecordError as e:
            return self._on_bad_record(e)
        return [self.to_result_row(row) for row in rows]

    def to_result_row(self, row: tuple) -> Any:
        if self.corrupt_field_index is None:
            return row
        i = self.corrupt_field_index
        return row[:i] + (None,) + row[i:]

    def to_corrupt_row(self, record: Callable[[], str]) -> Any:
        values = [None] * len(self.schema)
        if self.corrupt_field_index is not None:
            values[self.corrupt_field_index] = record()
        return tuple(values)

    def _permissive(self, e: BadRecordError) -> List[Any]:
        return [self.to_corrupt_row(e.record)]

    def _drop(self, e: BadRecordError) -> List[Any]:
        logger.debug(f"Dropping malformed record: {e}")
        return []

    def _fail(self, e: BadRecordError) -> List[Any]:
        raise MalformedRecordError(e.record(), self.mode, e.cause) from e
