#!/usr/bin/env python3
"""Tests for per-record failure isolation and parse modes."""

import logging

import pytest

from jsonsource.failure_safe_parser import BadRecordError, FailureSafeParser, MalformedRecordError
from jsonsource.parse_modes import ParseMode
from jsonsource.types import LONG, STRING, StructField, StructType

SCHEMA = StructType([StructField("a", LONG), StructField("_corrupt_record", STRING),
                     StructField("b", STRING)])


def raw_parser(record):
    """Rows of the data columns (a, b); records starting with '!' are malformed."""
    if record.startswith("!"):
        raise BadRecordError(lambda: record, ValueError("bang"))
    a, b = record.split(",")
    return [(int(a), b)]


def make(mode, schema=SCHEMA, column="_corrupt_record"):
    return FailureSafeParser(raw_parser, mode, schema, column)


class TestParseMode:

    @pytest.mark.parametrize("name,expected", [
        ("permissive", ParseMode.PERMISSIVE),
        ("DropMalformed", ParseMode.DROPMALFORMED),
        (" FAILFAST ", ParseMode.FAILFAST),
    ])
    def test_from_string_is_case_insensitive(self, name, expected):
        assert ParseMode.from_string(name) is expected

    def test_unknown_mode_falls_back_to_permissive(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert ParseMode.from_string("lenient") is ParseMode.PERMISSIVE
        assert "not a valid parse mode" in caplog.text


class TestFailureSafeParser:

    def test_good_record_gets_null_corrupt_column(self):
        assert make(ParseMode.PERMISSIVE).parse("1,x") == [(1, None, "x")]

    def test_permissive_keeps_raw_text(self):
        assert make(ParseMode.PERMISSIVE).parse("!oops") == [(None, "!oops", None)]

    def test_permissive_without_corrupt_column_is_all_nulls(self):
        schema = StructType([StructField("a", LONG), StructField("b", STRING)])
        parser = make(ParseMode.PERMISSIVE, schema)
        assert parser.parse("!oops") == [(None, None)]
        assert parser.parse("2,y") == [(2, "y")]

    def test_permissive_without_column_name(self):
        schema = StructType([StructField("a", LONG), StructField("b", STRING)])
        assert make(ParseMode.PERMISSIVE, schema, None).parse("!oops") == [(None, None)]

    def test_drop_malformed_emits_nothing(self):
        parser = make(ParseMode.DROPMALFORMED)
        assert parser.parse("!oops") == []
        assert parser.parse("3,z") == [(3, None, "z")]

    def test_dropped_record_is_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="jsonsource.failure_safe_parser"):
            make(ParseMode.DROPMALFORMED).parse("!oops")
        assert "Dropping malformed record: bang" in caplog.text

    def test_failfast_raises_with_record(self):
        with pytest.raises(MalformedRecordError) as exc_info:
            make(ParseMode.FAILFAST).parse("!oops")
        assert exc_info.value.record == "!oops"
        assert "FAILFAST" in str(exc_info.value)
        assert "'!oops'" in str(exc_info.value)

    def test_failfast_message_truncates_long_records(self):
        record = "!" + "x" * 5000
        with pytest.raises(MalformedRecordError) as exc_info:
            make(ParseMode.FAILFAST).parse(record)
        assert exc_info.value.record == record
        assert len(str(exc_info.value)) < 2000

    def test_record_text_is_only_built_when_needed(self):
        calls = []

        def lazy_bad(record):
            def literal():
                calls.append(record)
                return record
            raise BadRecordError(literal)

        schema = StructType([StructField("a", LONG)])
        FailureSafeParser(lazy_bad, ParseMode.DROPMALFORMED, schema, "_corrupt_record").parse("r")
        FailureSafeParser(lazy_bad, ParseMode.PERMISSIVE, schema, "_corrupt_record").parse("r")
        assert calls == []

    def test_structural_errors_propagate(self):
        def broken(record):
            raise OSError("disk gone")

        parser = FailureSafeParser(broken, ParseMode.PERMISSIVE, SCHEMA, "_corrupt_record")
        with pytest.raises(OSError):
            parser.parse("1,x")

    def test_corrupt_column_must_be_nullable_string(self):
        schema = StructType([StructField("a", LONG), StructField("_corrupt_record", LONG)])
        with pytest.raises(ValueError):
            make(ParseMode.PERMISSIVE, schema)
