# readaloud/api/app.py
from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.datastructures import UploadFile

from readaloud.config import API_HOST, API_PORT, LOG_LEVEL, NO_FILE_UPLOADED, EXTRACTION_FAILED, UPLOAD_FIELD
from readaloud.errors import BadRequest, ExtractionError
from readaloud.extract import extract_document
from readaloud.api.schemas import UploadResponse, ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)

app = FastAPI(title="Read Aloud API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BadRequest)
async def _bad_request(request: Request, exc: BadRequest):
    return PlainTextResponse(str(exc), status_code=400)


@app.exception_handler(ExtractionError)
async def _extraction_failed(request: Request, exc: ExtractionError):
    logger.error("Error processing PDF: %s", exc)
    return JSONResponse(status_code=500, content=ErrorResponse(error=EXTRACTION_FAILED).model_dump())


@app.get("/health", response_model=HealthResponse)
def health():
    return {"status": "ok"}


@app.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"content": {"text/plain": {}}}, 500: {"model": ErrorResponse}},
)
async def upload(request: Request):
    # a plain text field named "file" counts as no file
    form = await request.form()
    file = form.get(UPLOAD_FIELD)
    if not isinstance(file, UploadFile) or not file.filename:
        raise BadRequest(NO_FILE_UPLOADED)

    raw = await file.read()

    # pypdf is synchronous and CPU bound
    doc = await run_in_threadpool(extract_document, raw, file.filename)

    return UploadResponse(text=doc.text)


def main():
    logging.basicConfig(level=LOG_LEVEL)
    logger.info("Server is running at http://%s:%d", API_HOST, API_PORT)
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    main()
