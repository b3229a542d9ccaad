"""
Schemas for the service banner and health probe.
"""

from pydantic import BaseModel, Field
from datetime import datetime


class HealthResponse(BaseModel):
    status: str = Field(..., examples=["OK"])
    database: str = Field(..., examples=["Connected"])
    timestamp: datetime


class ServiceInfoResponse(BaseModel):
    name: str = Field(..., examples=["Real Estate Listing API"])
    version: str = Field(..., examples=["1.0.0"])
    docs: str = Field(..., examples=["/docs"])
    health: str = Field(..., examples=["/api/health"])
