# ============================================================================
# api/main.py
# ============================================================================
"""
FastAPI Backend for the Medicine Scan service

Provides the scan endpoint the accessibility UI posts photos to, plus the
saved-scan history.
"""

import sys
import logging
from pathlib import Path
from typing import Optional

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from medicine_scan.config import base_settings, logging_settings, vision_settings
from medicine_scan.core import HistoryStore, ScanService
from medicine_scan.core.history_store import SortField, SortOrder
from medicine_scan.sources import OpenAICompatibleSource
from medicine_scan.utils.exceptions import (
    HistoryStoreError,
    InvalidImageError,
    MedicineScanError,
    ScanTimeoutError,
)
from medicine_scan.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and data directories at startup."""
    setup_logging(logging_settings)
    base_settings.create_directories()
    if not vision_settings.is_configured:
        logger.warning("Model endpoint not configured. Set NEBIUS_API_KEY and NEBIUS_API_ENDPOINT.")
    yield


app = FastAPI(
    title="Medicine Scan API",
    description="Extracts structured medicine information from packaging photos",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_source = OpenAICompatibleSource(vision_settings)
scan_service = ScanService(vision_source=_source, summary_source=_source, settings=vision_settings)
history_store = HistoryStore(base_settings.HISTORY_PATH)


# ============================================================================
# Models
# ============================================================================

class ProcessImageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_data: str = Field(alias="imageData")
    save: bool = False


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/health")
async def health():
    """Health check for monitoring."""
    return {"status": "healthy", "model_configured": vision_settings.is_configured}


@app.post("/api/process-image")
async def process_image(request: ProcessImageRequest):
    """Scan one packaging photo and return the extracted medicine record."""
    try:
        record = await scan_service.scan(request.image_data)
    except InvalidImageError as e:
        return _error(str(e), 413 if e.too_large else 400)
    except ScanTimeoutError as e:
        logger.error(f"Scan timed out after {e.timeout}s")
        return _error(str(e), 504)
    except MedicineScanError as e:
        logger.error(f"Scan failed: {e}")
        return _error(str(e), 500)

    body = record.to_response()

    if request.save and not record.no_text:
        try:
            entry = history_store.add(record)
        except HistoryStoreError as e:
            logger.error(f"Could not save scan: {e}")
            return _error(str(e), 500)
        body["historyId"] = entry.id

    return body


@app.get("/api/history")
async def list_history(
    search: Optional[str] = None,
    sort_by: SortField = Query(default="dateScanned"),
    order: SortOrder = Query(default="desc"),
):
    """List saved scans with expiry re-evaluated against today."""
    try:
        entries = history_store.list_entries(search=search, sort_by=sort_by, order=order)
    except HistoryStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return [{**entry.to_json(), "expired": entry.is_expired()} for entry in entries]


@app.get("/api/history/{entry_id}")
async def get_history_entry(entry_id: str):
    try:
        entry = history_store.get(entry_id)
    except HistoryStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if entry is None:
        raise HTTPException(status_code=404, detail="Scan not found")

    return {**entry.to_json(), "expired": entry.is_expired()}


@app.delete("/api/history/{entry_id}")
async def delete_history_entry(entry_id: str):
    try:
        deleted = history_store.delete(entry_id)
    except HistoryStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Scan not found")

    return {"status": "deleted"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
