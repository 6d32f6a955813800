from __future__ import annotations

import threading

from fastapi import FastAPI, HTTPException

from .discovery import ScratchArea, convert_to_pdf, process_input
from .errors import ExportError, InvalidInputError, NotFoundError
from .logging_utils import get_logger
from .schemas import ConvertResult, HealthResponse, ProcessedInput, ProcessInputRequest

log = get_logger(__name__)

app = FastAPI(title="mdexport")

scratch = ScratchArea()

# One conversion at a time; /export holds it across process and convert.
_conversion_lock = threading.Lock()


def _http_error(e: ExportError) -> HTTPException:
    if isinstance(e, InvalidInputError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


@app.on_event("shutdown")
def _shutdown() -> None:
    with scratch.lock:
        scratch.clear()


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True)


@app.post("/process", response_model=ProcessedInput)
def process(req: ProcessInputRequest) -> ProcessedInput:
    try:
        with _conversion_lock:
            return process_input(req.input_paths, scratch)
    except ExportError as e:
        log.error("Input processing failed: %s", e)
        raise _http_error(e) from e


@app.post("/convert", response_model=ConvertResult)
def convert(req: ProcessedInput) -> ConvertResult:
    try:
        with _conversion_lock:
            return convert_to_pdf(req, scratch)
    except ExportError as e:
        log.exception("Conversion failed")
        raise _http_error(e) from e


@app.post("/export", response_model=ConvertResult)
def export(req: ProcessInputRequest) -> ConvertResult:
    try:
        with _conversion_lock:
            processed = process_input(req.input_paths, scratch)
            return convert_to_pdf(processed, scratch)
    except ExportError as e:
        log.exception("Export failed")
        raise _http_error(e) from e
