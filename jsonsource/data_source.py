"""The two JSON layouts behind one reader contract.

``TextInputJsonDataSource`` reads one JSON value per line and can read any
byte range of a file. ``MultiLineJsonDataSource`` reads each file as one JSON
document and only ever reads files whole. Pick one with
:meth:`JsonDataSource.create`.
"""
from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from contextlib import closing
from typing import Any, BinaryIO, Callable, Iterable, Iterator, List, NamedTuple, Optional, Union

from . import codec_streams, infer_schema, sampling
from .failure_safe_parser import FailureSafeParser
from .lines_reader import FileLinesReader
from .options import JSONOptions
from .partition import PartitionedFile
from .row_parser import JsonRowParser
from .streaming_parser import StreamingJSONParser
from .types import StructType

logger = logging.getLogger(__name__)

Line = Union[str, bytes]


class UnsplittableFileError(ValueError):
    """A partition covers only part of a file that must be read whole."""


class JsonDataSource(ABC):
    is_splittable: bool

    def __init__(self, options: JSONOptions):
        self.options = options
        self.tokenizer = StreamingJSONParser()

    @staticmethod
    def create(options: JSONOptions) -> "JsonDataSource":
        if options.multi_line:
            return MultiLineJsonDataSource(options)
        return TextInputJsonDataSource(options)

    def infer_schema(self, paths: Iterable) -> Optional[StructType]:
        """Schema of ``paths``, or ``None`` when there are no input files.

        A single path is read as a one-file input.
        """
        if isinstance(paths, (str, bytes, os.PathLike)):
            paths = [paths]
        paths = [os.fsdecode(p) for p in paths]
        if not paths:
            logger.info("No input files; no schema to infer")
            return None
        return self.infer(paths)

    @abstractmethod
    def infer(self, paths: List[str]) -> StructType:
        ...

    @abstractmethod
    def read_file(self, file: PartitionedFile, schema: StructType) -> Iterator[tuple]:
        """Rows of one partition, produced lazily."""

    def create_parser(self, schema: StructType) -> JsonRowParser:
        data_schema = schema.without(self.options.column_name_of_corrupt_record)
        return JsonRowParser(data_schema, self.options, self.tokenizer)

    def create_safe_parser(self, raw_parser: Callable[[Any], List[tuple]],
                           schema: StructType) -> FailureSafeParser:
        return FailureSafeParser(raw_parser, self.options.parse_mode, schema,
                                 self.options.column_name_of_corrupt_record)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.options!r})"


def _line_bytes(line: Line) -> bytes:
    return line.encode('utf-8') if isinstance(line, str) else line


def _line_text(line: Line) -> str:
    return line if isinstance(line, str) else line.decode('utf-8', errors='replace')


class TextInputJsonDataSource(JsonDataSource):
    is_splittable = True

    def infer(self, paths: List[str]) -> StructType:
        with closing(self._iter_lines(paths)) as lines:
            return self.infer_from_lines(lines)

    def infer_from_lines(self, lines: Iterable[Line]) -> StructType:
        sampled = sampling.sample(lines, self.options)
        return infer_schema.infer(sampled, self.options, _line_bytes, _line_text, self.tokenizer)

    def _iter_lines(self, paths: List[str]) -> Iterator[bytes]:
        for path in paths:
            with FileLinesReader(PartitionedFile.whole(path)) as reader:
                yield from reader

    def read_file(self, file: PartitionedFile, schema: StructType) -> Iterator[tuple]:
        logger.debug(f"Reading lines of {file.path} from offset {file.start}")
        with FileLinesReader(file) as reader:
            yield from self.parse_lines(reader, schema)

    def parse_lines(self, lines: Iterable[Line], schema: StructType) -> Iterator[tuple]:
        parser = self.create_parser(schema)
        safe_parser = self.create_safe_parser(
            lambda line: parser.parse(line, _line_bytes, _line_text), schema)
        for line in lines:
            yield from safe_parser.parse(line)


class _Document(NamedTuple):
    path: str
    stream: BinaryIO


class MultiLineJsonDataSource(JsonDataSource):
    is_splittable = False

    def infer(self, paths: List[str]) -> StructType:
        with closing(self._open_documents(sampling.sample(paths, self.options))) as documents:
            return infer_schema.infer(documents, self.options, self._document_source,
                                      self._document_text, self.tokenizer)

    def _open_documents(self, paths: Iterable[str]) -> Iterator[_Document]:
        # Each stream stays open only while its document is being parsed.
        for path in paths:
            with codec_streams.open_stream(path) as stream:
                yield _Document(path, stream)

    def _document_source(self, document: _Document) -> Union[bytes, BinaryIO]:
        if self.options.encoding == 'utf-8':
            return document.stream
        return document.stream.read().decode(self.options.encoding).encode('utf-8')

    def _document_text(self, document: _Document) -> str:
        return codec_streams.read_text(document.path, self.options.encoding)

    def read_file(self, file: PartitionedFile, schema: StructType) -> Iterator[tuple]:
        if not file.covers_whole_file():
            raise UnsplittableFileError(
                f"{file.path} must be read as a whole file, got range "
                f"[{file.start}, {file.end}) with multiLine enabled")
        return self._read_whole_file(file, schema)

    def _read_whole_file(self, file: PartitionedFile, schema: StructType) -> Iterator[tuple]:
        parser = self.create_parser(schema)
        safe_parser = self.create_safe_parser(
            lambda document: parser.parse(document, self._document_source, self._document_text),
            schema)
        logger.debug(f"Reading whole file {file.path}")
        with codec_streams.open_stream(file.path) as stream:
            rows = safe_parser.parse(_Document(file.path, stream))
        yield from rows
