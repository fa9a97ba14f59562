"""
Import API Routes

Runs the question bank pipeline on an uploaded spreadsheet. Nothing is
kept between requests: every call builds its own source, sink and run.
"""

from fastapi import APIRouter, UploadFile, File, HTTPException, Depends, status
from fastapi.concurrency import run_in_threadpool
from pathlib import Path
from typing import Any, Dict
import structlog

from qcm_bank.core.config import settings
from qcm_bank.core.auth import get_current_admin
from qcm_bank.services.question_bank import (
    MemoryReportSink,
    QuestionBankPipeline,
    SchemaError,
    SourceIOError,
    UploadTableSource,
    build_question_documents,
)
from qcm_bank.services.question_bank.types import RunSummary

logger = structlog.get_logger()

router = APIRouter()


async def _read_upload(file: UploadFile) -> bytes:
    """Validate and read an uploaded table"""
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No filename provided")

    suffix = Path(file.filename).suffix.lower()
    if suffix not in settings.ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only {', '.join(settings.ALLOWED_EXTENSIONS)} files are supported"
        )

    content = await file.read()
    if len(content) == 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is empty")
    if len(content) > settings.MAX_FILE_SIZE:
        raise HTTPException(status_code=413, detail="File is too large")

    logger.info("File received", filename=file.filename, size=len(content))
    return content


async def _run_pipeline(filename: str, content: bytes) -> RunSummary:
    """Run the synchronous pipeline off the event loop, mapping fatal errors to HTTP"""
    source = UploadTableSource(content, filename, encoding=settings.CSV_ENCODING)
    sink = MemoryReportSink()
    pipeline = QuestionBankPipeline()

    try:
        return await run_in_threadpool(pipeline.run, source, sink)
    except SchemaError as e:
        logger.warning("Import rejected", filename=filename, error=str(e))
        raise HTTPException(status_code=422, detail=str(e))
    except SourceIOError as e:
        logger.warning("Unreadable upload", filename=filename, error=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/analyze")
async def analyze_upload(
    file: UploadFile = File(...),
    admin=Depends(get_current_admin)
) -> Dict[str, Any]:
    """Deduplicate an uploaded question table and return its data-quality summary"""
    content = await _read_upload(file)
    summary = await _run_pipeline(file.filename, content)

    logger.info(
        "Import analyzed",
        filename=file.filename,
        total=summary.total_rows,
        unique=summary.unique_count,
        duplicates=summary.duplicate_count,
    )
    return summary.to_dict()


@router.post("/documents")
async def build_documents(
    file: UploadFile = File(...),
    admin=Depends(get_current_admin)
) -> Dict[str, Any]:
    """Analyze an upload and return the datastore documents for its unique questions"""
    content = await _read_upload(file)
    summary = await _run_pipeline(file.filename, content)

    documents, skipped = build_question_documents(summary.records, exam_type=settings.EXAM_TYPE)
    logger.info("Documents built", filename=file.filename, documents=len(documents), skipped=skipped)

    return {
        "summary": summary.to_dict(),
        "documents": documents,
        "skipped": skipped,
    }
