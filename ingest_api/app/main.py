#!/usr/bin/env python3
from fastapi import FastAPI, UploadFile, File, HTTPException
from fastapi.responses import JSONResponse, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
import logging, tempfile, os
from pathlib import Path
from typing import Optional

from jsonsource import JSONOptions, MalformedRecordError, PartitionedFile, JsonDataSource
from jsonsource.types import row_as_dict

app = FastAPI(title="jsonsource ingest")
logger = logging.getLogger(__name__)

request_counter = Counter("json_requests_total", "Total JSON uploads", ["endpoint"])
row_counter = Counter("json_rows_total", "Rows produced from uploads")
process_duration = Histogram("json_process_seconds", "Time spent processing")

CHUNK_SIZE = 8 * 1024 * 1024  # 8 MB


async def _spool(file: UploadFile) -> Path:
    suffix = Path(file.filename or "").suffix
    tmp = tempfile.NamedTemporaryFile(delete=False, suffix=suffix)
    tmp_path = Path(tmp.name)
    try:
        with tmp:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                tmp.write(chunk)
    except Exception as e:
        logger.error(f"spooling {file.filename} failed: {e}")
        tmp_path.unlink()
        raise
    return tmp_path


def _options(multi_line: bool, mode: str, sampling_ratio: float,
             corrupt_column: Optional[str]) -> JSONOptions:
    params = {"multiLine": multi_line, "mode": mode, "samplingRatio": sampling_ratio}
    if corrupt_column:
        params["columnNameOfCorruptRecord"] = corrupt_column
    try:
        return JSONOptions(params)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health", tags=["ops"])
def health():
    return {"status": "healthy"}


@app.get("/metrics", tags=["ops"])
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.post("/infer", tags=["process"])
async def infer(file: UploadFile = File(...), multi_line: bool = False, mode: str = "PERMISSIVE",
                sampling_ratio: float = 1.0, corrupt_column: Optional[str] = None):
    request_counter.labels(endpoint="infer").inc()
    options = _options(multi_line, mode, sampling_ratio, corrupt_column)
    tmp_path = await _spool(file)
    try:
        with process_duration.time():
            schema = JsonDataSource.create(options).infer_schema([tmp_path])
        return JSONResponse({"filename": file.filename, "schema": schema.json_value()})
    except MalformedRecordError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"schema inference failed for {file.filename}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        tmp_path.unlink()


@app.post("/read", tags=["process"])
async def read(file: UploadFile = File(...), multi_line: bool = False, mode: str = "PERMISSIVE",
               sampling_ratio: float = 1.0, corrupt_column: Optional[str] = None):
    request_counter.labels(endpoint="read").inc()
    options = _options(multi_line, mode, sampling_ratio, corrupt_column)
    tmp_path = await _spool(file)
    try:
        with process_duration.time():
            source = JsonDataSource.create(options)
            schema = source.infer_schema([tmp_path])
            rows = [row_as_dict(schema, row)
                    for row in source.read_file(PartitionedFile.whole(tmp_path), schema)]
        row_counter.inc(len(rows))
        return JSONResponse({"filename": file.filename, "schema": schema.json_value(),
                             "records": len(rows), "rows": rows})
    except MalformedRecordError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"read failed for {file.filename}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        tmp_path.unlink()


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
