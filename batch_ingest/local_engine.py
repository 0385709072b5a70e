#!/usr/bin/env python3
"""Run schema inference, then read every partition on a thread pool."""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing
from typing import Iterable, List, NamedTuple, Optional

from jsonsource import JsonDataSource, JSONOptions, PartitionedFile, split_files
from jsonsource.partition import DEFAULT_MAX_SPLIT_BYTES
from jsonsource.types import StructType

logger = logging.getLogger(__name__)


class ReadResult(NamedTuple):
    schema: Optional[StructType]
    rows: List[tuple]


class LocalJsonEngine:
    """A small host engine: one data source per query, one task per partition."""

    def __init__(self, options: JSONOptions, max_workers: Optional[int] = None,
                 max_split_bytes: int = DEFAULT_MAX_SPLIT_BYTES):
        self.options = options
        self.source = JsonDataSource.create(options)
        self.max_workers = max_workers
        self.max_split_bytes = max_split_bytes

    def infer_schema(self, paths: Iterable) -> Optional[StructType]:
        return self.source.infer_schema(paths)

    def plan(self, paths: Iterable) -> List[PartitionedFile]:
        return split_files(paths, self.source.is_splittable, self.max_split_bytes)

    def read_partition(self, file: PartitionedFile, schema: StructType) -> List[tuple]:
        with closing(self.source.read_file(file, schema)) as rows:
            return list(rows)

    def read(self, paths: Iterable, schema: Optional[StructType] = None) -> ReadResult:
        paths = [str(p) for p in paths]
        if schema is None:
            schema = self.infer_schema(paths)
        if schema is None:
            return ReadResult(None, [])

        start = time.time()
        partitions = self.plan(paths)
        rows: List[tuple] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for part_rows in executor.map(lambda f: self.read_partition(f, schema), partitions):
                rows.extend(part_rows)
        logger.info(f"Done {len(rows)} rows from {len(partitions)} partitions "
                    f"in {time.time() - start:.2f}s")
        return ReadResult(schema, rows)
