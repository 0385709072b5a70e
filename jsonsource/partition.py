"""Partition descriptors and the planning that cuts files into them."""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from . import codec_streams

logger = logging.getLogger(__name__)

DEFAULT_MAX_SPLIT_BYTES = 128 * 1024 * 1024


@dataclass(frozen=True)
class PartitionedFile:
    """A byte window ``[start, start + length)`` of one file.

    ``length=None`` reads to the end of the file.
    """

    path: str
    start: int = 0
    length: Optional[int] = None

    @classmethod
    def whole(cls, path) -> "PartitionedFile":
        return cls(str(path), 0, None)

    @property
    def end(self) -> Optional[int]:
        return None if self.length is None else self.start + self.length

    def covers_whole_file(self) -> bool:
        if self.start != 0:
            return False
        return self.length is None or self.length >= codec_streams.file_size(self.path)


def split_files(paths: Iterable, splittable: bool,
                max_split_bytes: int = DEFAULT_MAX_SPLIT_BYTES) -> List[PartitionedFile]:
    """Plan partitions for ``paths``.

    Files are cut into ``max_split_bytes`` windows only when the layout is
    splittable and the file is not compressed.
    """
    if max_split_bytes <= 0:
        raise ValueError(f"max_split_bytes should be positive, got {max_split_bytes}")
    partitions = []
    for path in paths:
        path = str(path)
        if not (splittable and codec_streams.is_splittable_codec(path)):
            partitions.append(PartitionedFile.whole(path))
            continue
        size = codec_streams.file_size(path)
        if size == 0:
            partitions.append(PartitionedFile(path, 0, 0))
            continue
        for offset in range(0, size, max_split_bytes):
            partitions.append(PartitionedFile(path, offset, min(max_split_bytes, size - offset)))
    kind = "splittable input" if splittable else "whole-file input"
    logger.info(f"Planned {len(partitions)} partitions for {kind}")
    return partitions
