from fastapi import APIRouter, HTTPException, UploadFile, File
from menuforge.config import settings
from menuforge.modules.uploads.schemas import ExtractTextResponse
from menuforge.modules.uploads.text_extractor import extract_text, UnsupportedFileType
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])


async def _extract(file: Optional[UploadFile]) -> ExtractTextResponse:
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    limit = settings.max_upload_bytes
    too_large = HTTPException(
        status_code=413,
        detail=f"File too large. Maximum size is {limit // (1024 * 1024)}MB"
    )
    # size comes from the spooled multipart part; never buffer more than limit + 1 bytes
    if file.size is not None and file.size > limit:
        raise too_large
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise too_large
    try:
        text = extract_text(file.filename, file.content_type, content)
    except UnsupportedFileType:
        raise HTTPException(status_code=400, detail="Unsupported file type. Please upload PDF, DOCX, or TXT")
    except Exception as e:
        logger.exception(f"Error processing file {file.filename}: {e}")
        raise HTTPException(status_code=500, detail="Failed to process file")
    if not text:
        raise HTTPException(status_code=400, detail="Could not extract text from file")
    logger.info(f"Extracted {len(text)} characters from {file.filename}")
    return ExtractTextResponse(text=text)


@router.post("/upload", response_model=ExtractTextResponse)
async def upload_menu_file(file: Optional[UploadFile] = File(None)):
    """
    Upload a menu document and get its text back.
    Accepts PDF, DOCX and TXT up to the configured size limit. No auth required.
    """
    return await _extract(file)


@router.post("/extract-text", response_model=ExtractTextResponse)
async def extract_menu_text(file: Optional[UploadFile] = File(None)):
    """Alias for /upload"""
    return await _extract(file)
