#!/usr/bin/env python3
"""Infer a schema for JSON files and print their rows as JSON lines."""

import argparse, json, logging, os, pathlib, sys
from typing import List, Optional

from jsonsource import JSONOptions, MalformedRecordError
from jsonsource.codec_streams import open_stream
from jsonsource.streaming_parser import StreamingJSONParser
from jsonsource.types import StructType, from_json_value, row_as_dict

from .local_engine import LocalJsonEngine

logger = logging.getLogger(__name__)


def detect_multi_line(path: pathlib.Path) -> bool:
    """A file whose first value is an array cannot be read line by line."""
    with open_stream(path) as stream:
        return StreamingJSONParser().detect_structure(stream) == 'array'


def load_schema(path: pathlib.Path) -> StructType:
    schema = from_json_value(json.loads(path.read_text()))
    if not isinstance(schema, StructType):
        raise ValueError(f"{path} does not hold a struct schema")
    return schema


def build_options(args) -> JSONOptions:
    if args.multi_line == 'auto':
        multi_line = bool(args.files) and detect_multi_line(args.files[0])
        logger.info(f"multiLine auto-detected as {multi_line}")
    else:
        multi_line = args.multi_line == 'true'
    params = {"multiLine": multi_line, "mode": args.mode, "samplingRatio": args.sampling_ratio}
    if args.sample_size is not None:
        params["sampleSize"] = args.sample_size
    if args.corrupt_column:
        params["columnNameOfCorruptRecord"] = args.corrupt_column
    if args.encoding:
        params["encoding"] = args.encoding
    return JSONOptions(params)


def process(files: List[pathlib.Path], options: JSONOptions, schema: Optional[StructType] = None,
            schema_only: bool = False, workers: Optional[int] = None,
            max_split_bytes: Optional[int] = None, out=None) -> int:
    out = out or sys.stdout
    kwargs = {"max_workers": workers}
    if max_split_bytes:
        kwargs["max_split_bytes"] = max_split_bytes
    engine = LocalJsonEngine(options, **kwargs)

    if schema is None:
        schema = engine.infer_schema(files)
    if schema is None:
        logger.warning("No input files given; nothing to do")
        return 0
    if schema_only:
        out.write(json.dumps(schema.json_value()) + "\n")
        return 0

    result = engine.read(files, schema)
    for i, row in enumerate(result.rows, 1):
        out.write(json.dumps(row_as_dict(schema, row)) + "\n")
        if i % 100000 == 0:
            logger.info(f"{i} rows written")
    return len(result.rows)


def cli(argv=None) -> int:
    ap = argparse.ArgumentParser(description=__doc__)
    ap.add_argument("files", nargs="*", type=pathlib.Path)
    ap.add_argument("--multi-line", choices=["true", "false", "auto"], default="false",
                    help="read each file as one JSON document")
    ap.add_argument("--mode", default="PERMISSIVE",
                    help="PERMISSIVE, DROPMALFORMED or FAILFAST")
    ap.add_argument("--sampling-ratio", type=float, default=1.0)
    ap.add_argument("--sample-size", type=int)
    ap.add_argument("--corrupt-column", help="column that captures malformed records")
    ap.add_argument("--encoding")
    ap.add_argument("--schema", type=pathlib.Path, help="JSON schema file; skips inference")
    ap.add_argument("--workers", type=int)
    ap.add_argument("--max-split-bytes", type=int)
    ap.add_argument("--schema-only", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        options = build_options(args)
        schema = load_schema(args.schema) if args.schema else None
        process(args.files, options, schema, args.schema_only, args.workers, args.max_split_bytes)
    except MalformedRecordError as e:
        logger.error(f"{e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(cli())
