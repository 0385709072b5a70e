#!/usr/bin/env python3
"""Streaming JSON tokenizer built on ijson."""
import io
import logging
from typing import Any, BinaryIO, List, Union

import ijson

logger = logging.getLogger(__name__)

_WHITESPACE = b" \t\r\n"


class JSONParseError(ValueError):
    """The input is not a single well-formed JSON value."""


class _PushbackStream:
    """Byte stream that serves ``head`` before the rest of ``stream``."""

    def __init__(self, head: bytes, stream: BinaryIO):
        self._head = head
        self._stream = stream

    def read(self, size: int = -1) -> bytes:
        if size == 0:
            return b''
        if self._head:
            head, self._head = self._head, b''
            if size is None or size < 0:
                return head + self._stream.read()
            return head
        return self._stream.read(size)


def _first_significant_byte(stream: BinaryIO) -> bytes:
    while True:
        ch = stream.read(1)
        if not ch or ch not in _WHITESPACE:
            return ch


class StreamingJSONParser:
    def __init__(self, use_float: bool = True):
        self.use_float = use_float

    def detect_structure(self, stream: BinaryIO) -> str:
        """Return 'array', 'object', or 'unknown' from the first significant byte."""
        ch = _first_significant_byte(stream)
        if ch == b'[':
            return 'array'
        if ch == b'{':
            return 'object'
        return 'unknown'

    def parse_document(self, source: Union[bytes, BinaryIO]) -> List[Any]:
        """Parse exactly one JSON value.

        Returns ``[]`` for blank input and ``[value]`` otherwise. Raises
        :class:`JSONParseError` when the input is malformed or has trailing
        content after the value.
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        ch = _first_significant_byte(source)
        if not ch:
            return []
        try:
            return list(ijson.items(_PushbackStream(ch, source), '', use_float=self.use_float))
        except (ijson.JSONError, UnicodeDecodeError) as e:
            logger.debug(f"parse failed: {e}")
            raise JSONParseError(str(e)) from e
