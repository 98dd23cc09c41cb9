"""
FastAPI Application - Amazon Link Cleaner API

Main application entry point with routes, middleware, and configuration.
"""

import os
import sys
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Add tools directory to path for imports
TOOLS_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), 'tools')
sys.path.insert(0, TOOLS_PATH)

from core.config import MAX_REDIRECTS, FETCH_TIMEOUT_SECONDS, REQUIRE_SAME_ORIGIN
from orchestrator.run_clean import run_clean

from api.models.schemas import (
    CleanResponse,
    ErrorResponse,
    HealthResponse,
)


# Load environment variables
load_dotenv()


# Initialize FastAPI app
app = FastAPI(
    title="Amazon Link Cleaner API",
    description="Expand shared Amazon links and strip affiliate / tracking parameters",
    version="1.0.0",
)

# Configure CORS
cors_origins = os.getenv('API_CORS_ORIGINS', 'http://localhost:3000,http://localhost:3001').split(',')
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _origin_of(url: str) -> Optional[str]:
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def is_same_origin_request(request: Request) -> bool:
    """
    Accept only requests issued by our own frontend.

    Checked in order: Origin header, Referer header, Sec-Fetch-Site.
    A request carrying none of them is rejected.
    """
    own_origin = f"{request.url.scheme}://{request.url.netloc}"

    origin = request.headers.get('origin')
    if origin:
        return origin == own_origin

    referer = request.headers.get('referer')
    if referer:
        return _origin_of(referer) == own_origin

    sec_fetch_site = request.headers.get('sec-fetch-site')
    if sec_fetch_site:
        return sec_fetch_site == 'same-origin'

    return False


# ===== Health Check Endpoint =====

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """
    Health check endpoint. The service is stateless, so it is healthy whenever it answers.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        max_redirects=MAX_REDIRECTS,
        fetch_timeout=FETCH_TIMEOUT_SECONDS,
    )


# ===== Root Endpoint =====

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "name": "Amazon Link Cleaner API",
        "version": "1.0.0",
        "description": "Expand shared Amazon links and strip tracking parameters",
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "clean": "/api/clean?url=<url>"
        }
    }


# ===== Clean Endpoint =====

@app.get(
    "/api/clean",
    response_model=CleanResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    tags=["Clean"],
)
def clean_link(request: Request, url: Optional[str] = Query(None, description="Link to expand and clean")):
    """
    Expand a link and return its canonical Amazon URL.

    1. Validate the input URL
    2. Follow redirects hop by hop (every hop re-checked against the host block list)
    3. Check the final host is an Amazon marketplace
    4. Extract the ASIN and strip tracking parameters

    Declared sync so the blocking HTTP calls run in the threadpool.
    """
    if REQUIRE_SAME_ORIGIN and not is_same_origin_request(request):
        print(f"[WARN] Rejected cross-origin clean request from {request.headers.get('origin') or '-'}")
        return _error(403, "Forbidden.")

    result = run_clean(url)

    if not result['success']:
        print(f"[WARN] Clean failed ({result['error_code'].value}) for {url!r}: {result['error']}")
        return _error(400, result['error'])

    data = result['data']
    print(f"[INFO] Cleaned {url} -> {data['cleaned_url']} ({data['redirect_hops']} hop(s))")
    return CleanResponse(**data)


# Run with: uvicorn api.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
