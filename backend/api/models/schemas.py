"""
Pydantic models for API request/response schemas
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field


# ===== Response Models =====

class RemovedParam(BaseModel):
    """A query parameter stripped from the link"""
    key: str
    value: str


class CleanResponse(BaseModel):
    """Result of cleaning one link"""
    input_url: str = Field(..., description="URL as submitted")
    expanded_url: str = Field(..., description="URL at the end of the redirect chain")
    cleaned_url: str = Field(..., description="Canonical, tracking-free URL")
    asin: Optional[str] = Field(None, description="Amazon product identifier, when the page has one")
    removed_params: List[RemovedParam] = Field(default_factory=list)
    redirect_hops: int = Field(..., ge=0)


class ErrorResponse(BaseModel):
    """Error payload returned with every non-200 response"""
    error: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    timestamp: datetime
    max_redirects: int
    fetch_timeout: float
