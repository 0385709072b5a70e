"""JSON ingestion for a tabular engine: schema inference and row reading.

Line-delimited files and whole-file JSON documents share one reader contract
(:class:`JsonDataSource`); malformed records are handled per parse mode by
:class:`FailureSafeParser`.
"""
from .data_source import (JsonDataSource, MultiLineJsonDataSource,
                          TextInputJsonDataSource, UnsplittableFileError)
from .failure_safe_parser import BadRecordError, FailureSafeParser, MalformedRecordError
from .options import JSONOptions
from .parse_modes import ParseMode
from .partition import PartitionedFile, split_files

__all__ = [
    "BadRecordError",
    "FailureSafeParser",
    "JSONOptions",
    "JsonDataSource",
    "MalformedRecordError",
    "MultiLineJsonDataSource",
    "ParseMode",
    "PartitionedFile",
    "TextInputJsonDataSource",
    "UnsplittableFileError",
    "split_files",
]
