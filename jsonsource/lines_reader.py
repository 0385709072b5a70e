"""Read the lines of one file partition."""
import logging
from typing import BinaryIO, Iterator, Optional

from . import codec_streams
from .partition import PartitionedFile

logger = logging.getLogger(__name__)


def _strip_eol(line: bytes) -> bytes:
    if line.endswith(b'\n'):
        line = line[:-1]
        if line.endswith(b'\r'):
            line = line[:-1]
    return line


class FileLinesReader:
    """Raw line bytes of a partition, without their line terminators.

    A partition that does not start at offset 0 skips its first line, which
    belongs to the previous partition. Every line that starts at or before the
    partition's end offset is read, so adjacent partitions together yield each
    line exactly once. Compressed files can only be read as a whole.
    """

    def __init__(self, file: PartitionedFile):
        self.file = file
        self._stream: Optional[BinaryIO] = None
        self._closed = False
        if not codec_streams.is_splittable_codec(file.path) and not file.covers_whole_file():
            raise ValueError(f"Cannot read a byte range of compressed file {file.path}")

    def __enter__(self) -> "FileLinesReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[bytes]:
        if self._closed:
            raise ValueError(f"Reader for {self.file.path} is closed")
        if self._stream is None:
            self._stream = codec_streams.open_stream(self.file.path)
        if not codec_streams.is_splittable_codec(self.file.path):
            return (_strip_eol(line) for line in self._stream)
        return self._read_range(self._stream)

    def _read_range(self, stream: BinaryIO) -> Iterator[bytes]:
        pos = self.file.start
        end = self.file.end
        if pos != 0:
            stream.seek(pos)
            pos += len(stream.readline())
        while end is None or pos <= end:
            line = stream.readline()
            if not line:
                break
            pos += len(line)
            yield _strip_eol(line)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._stream is not None:
            logger.debug(f"closing line reader for {self.file.path}")
            self._stream.close()
