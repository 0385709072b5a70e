"""Convert parsed JSON documents into positional rows for a schema."""
from __future__ import annotations

import json
from typing import Any, Callable, List, Optional, TypeVar

from .failure_safe_parser import BadRecordError
from .options import JSONOptions
from .streaming_parser import JSONParseError, StreamingJSONParser
from .types import (ArrayType, BooleanType, DataType, DoubleType, LongType,
                    NullType, StringType, StructType)


R = TypeVar("R")

_NON_NUMERIC = {"NaN": float("nan"), "Infinity": float("inf"), "+Infinity": float("inf"),
                "-Infinity": float("-inf"), "+INF": float("inf"), "-INF": float("-inf"),
                "INF": float("inf")}


class ConversionError(ValueError):
    """A parsed value does not fit the column type it is read into."""


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def tokenize_record(tokenizer: StreamingJSONParser, record: R,
                    create_source: Callable[[R], Any], record_literal: Callable[[R], str],
                    convert: Callable[[Any], List[Any]]) -> List[Any]:
    """Tokenize one record and run ``convert`` on its root value.

    Tokenizer and conversion failures, including nesting too deep to
    walk, become :class:`BadRecordError`;
    ``record_literal`` renders the record as text and is only called if a
    failure policy asks for it.
    """
    try:
        results: List[Any] = []
        for document in tokenizer.parse_document(create_source(record)):
            results.extend(convert(document))
        return results
    except (JSONParseError, ConversionError, UnicodeDecodeError, RecursionError) as e:
        raise BadRecordError(lambda: record_literal(record), e) from e


def root_objects(document: Any) -> List[dict]:
    """The objects a root value stands for: itself, or the elements of a root array."""
    if isinstance(document, dict):
        return [document]
    if isinstance(document, list):
        for element in document:
            if not isinstance(element, dict):
                raise ConversionError(
                    f"Top-level array elements must be objects, got {type(element).__name__}")
        return document
    raise ConversionError(
        f"Root JSON value must be an object or an array of objects, got {type(document).__name__}")


class JsonRowParser:
    """Turns one record (a line or a whole file) into zero or more rows.

    The schema handed in here holds only data columns; the corrupt-record
    column is added back by :class:`FailureSafeParser`.
    """

    def __init__(self, schema: StructType, options: JSONOptions,
                 tokenizer: Optional[StreamingJSONParser] = None):
        self.schema = schema
        self.options = options
        self.tokenizer = tokenizer or StreamingJSONParser()

    def parse(self, record: R, create_source: Callable[[R], Any],
              record_literal: Callable[[R], str]) -> List[tuple]:
        return tokenize_record(self.tokenizer, record, create_source, record_literal,
                               self.convert_root)

    def convert_root(self, document: Any) -> List[tuple]:
        return [self.convert_struct(obj, self.schema) for obj in root_objects(document)]

    def convert_struct(self, value: dict, schema: StructType) -> tuple:
        return tuple(self.convert(value.get(f.name), f.data_type) for f in schema.fields)

    def convert(self, value: Any, data_type: DataType) -> Any:
        if value is None or isinstance(data_type, NullType):
            return None
        if isinstance(data_type, StringType):
            if isinstance(value, str):
                return value
            return json.dumps(value, separators=(',', ':'), ensure_ascii=False)
        if isinstance(data_type, LongType):
            if _is_integer(value):
                return value
        elif isinstance(data_type, DoubleType):
            if _is_integer(value) or isinstance(value, float):
                return float(value)
            if isinstance(value, str) and self.options.allow_non_numeric_numbers \
                    and value in _NON_NUMERIC:
                return _NON_NUMERIC[value]
        elif isinstance(data_type, BooleanType):
            if isinstance(value, bool):
                return value
        elif isinstance(data_type, ArrayType):
            if isinstance(value, list):
                return [self.convert(v, data_type.element_type) for v in value]
        elif isinstance(data_type, StructType):
            if isinstance(value, dict):
                return self.convert_struct(value, data_type)
        raise ConversionError(
            f"Failed to convert {type(value).__name__} value to {data_type.simple_string()}")
