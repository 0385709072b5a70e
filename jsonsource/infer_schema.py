"""Infer one struct schema from a population of JSON records."""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from .failure_safe_parser import FailureSafeParser
from .options import JSONOptions
from .row_parser import root_objects, tokenize_record
from .streaming_parser import StreamingJSONParser
from .types import (BOOLEAN, DOUBLE, LONG, NULL, STRING, ArrayType, DataType,
                    DoubleType, LongType, NullType, StructField, StructType)

logger = logging.getLogger(__name__)

R = TypeVar("R")


def infer_field(value: Any, options: JSONOptions) -> DataType:
    """Type of a single parsed JSON value."""
    if value is None:
        return NULL
    if isinstance(value, dict):
        return StructType(
            StructField(k, infer_field(v, options)) for k, v in sorted(value.items()))
    if isinstance(value, list):
        element = NULL
        for v in value:
            element = compatible_type(element, infer_field(v, options))
        return ArrayType(element)
    if options.primitives_as_string:
        return STRING
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, int):
        return LONG if -2 ** 63 <= value < 2 ** 63 else DOUBLE
    if isinstance(value, float):
        return DOUBLE
    return STRING


def compatible_type(t1: DataType, t2: DataType) -> DataType:
    """The narrowest type both ``t1`` and ``t2`` widen to."""
    if t1 == t2:
        return t1
    if isinstance(t1, NullType):
        return t2
    if isinstance(t2, NullType):
        return t1
    if isinstance(t1, (LongType, DoubleType)) and isinstance(t2, (LongType, DoubleType)):
        return DOUBLE
    if isinstance(t1, StructType) and isinstance(t2, StructType):
        merged = {f.name: f.data_type for f in t1.fields}
        for f in t2.fields:
            merged[f.name] = compatible_type(merged[f.name], f.data_type) if f.name in merged else f.data_type
        return StructType(StructField(name, merged[name]) for name in sorted(merged))
    if isinstance(t1, ArrayType) and isinstance(t2, ArrayType):
        return ArrayType(compatible_type(t1.element_type, t2.element_type),
                         t1.contains_null or t2.contains_null)
    return STRING


def canonicalize_type(data_type: DataType, options: JSONOptions) -> Optional[DataType]:
    """Replace all-null columns with strings and drop empty structs.

    Returns ``None`` when nothing of ``data_type`` survives.
    """
    if isinstance(data_type, ArrayType):
        element = canonicalize_type(data_type.element_type, options)
        return None if element is None else ArrayType(element, data_type.contains_null)
    if isinstance(data_type, StructType):
        fields = []
        for f in data_type.fields:
            canonical = canonicalize_type(f.data_type, options)
            if canonical is not None:
                fields.append(StructField(f.name, canonical, f.nullable))
        return StructType(fields) if fields else None
    if isinstance(data_type, NullType):
        return None if options.drop_field_if_all_null else STRING
    return data_type


class _InferenceSafeParser(FailureSafeParser):
    """Failure isolation for sampled records.

    Good records yield their inferred struct types; in permissive mode a
    malformed record stands for a struct holding only the corrupt-record column.
    """

    def __init__(self, raw_parser, options: JSONOptions):
        super().__init__(raw_parser, options.parse_mode, StructType())
        self.corrupt_struct = StructType().add(options.column_name_of_corrupt_record, STRING)

    def to_result_row(self, row):
        return row

    def to_corrupt_row(self, record):
        return self.corrupt_struct


def infer(records: Iterable[R], options: JSONOptions,
          create_source: Callable[[R], Any], record_literal: Callable[[R], str],
          tokenizer: Optional[StreamingJSONParser] = None) -> StructType:
    """Merge the types of every record into one struct schema.

    ``create_source`` turns a record into bytes or a binary stream for the
    tokenizer. Malformed records are handled by ``options.parse_mode``.
    """
    tokenizer = tokenizer or StreamingJSONParser()

    def infer_record(record: R) -> List[DataType]:
        return tokenize_record(
            tokenizer, record, create_source, record_literal,
            lambda document: [infer_field(obj, options) for obj in root_objects(document)])

    safe_parser = _InferenceSafeParser(infer_record, options)
    root: DataType = StructType()
    count = 0
    for record in records:
        count += 1
        for data_type in safe_parser.parse(record):
            root = compatible_type(root, data_type)

    canonical = canonicalize_type(root, options)
    schema = canonical if isinstance(canonical, StructType) else StructType()
    logger.info(f"Inferred {schema.simple_string()} from {count} sampled records")
    return schema
