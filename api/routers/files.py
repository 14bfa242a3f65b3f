"""
Router per parsing file.

Endpoint:
- POST /api/files/parse: file multipart → modello tabellare normalizzato.
"""
import asyncio
import logging

from fastapi import APIRouter, File, HTTPException, UploadFile

from core.config import get_config
from ingest.parser import parse_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


async def read_upload(file: UploadFile, max_upload_mb: int) -> bytes:
    """Legge l'upload rifiutando file oltre il limite configurato."""
    content = await file.read()
    if len(content) > max_upload_mb * 1024 * 1024:
        raise HTTPException(
            status_code=413,
            detail=f"File troppo grande: limite {max_upload_mb} MB"
        )
    return content


@router.post("/parse")
async def parse_uploaded_file(file: UploadFile = File(...)):
    """
    Normalizza un file (CSV, TSV, XLSX, XLS, PDF, DOCX, TXT, immagini).

    Errori di parsing: 415 formato non supportato, 400 file vuoto/illeggibile.
    """
    config = get_config()
    content = await read_upload(file, config.max_upload_mb)
    file_name = file.filename or ""

    logger.info(f"[FILES_API] Parse request: {file_name} ({len(content)} bytes, {file.content_type})")

    data = await asyncio.to_thread(
        parse_file,
        content,
        file_name,
        content_type=file.content_type,
        config=config
    )
    return data.to_dict()
