"""
Pydantic v2 schemas for the legacy Material price list.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MaterialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=1000)
    unit: str = Field(..., min_length=1, max_length=50)
    price: float = Field(..., ge=0)
    category: str | None = Field(default=None, max_length=200)


class MaterialUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=1000)
    unit: str | None = Field(default=None, min_length=1, max_length=50)
    price: float | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, max_length=200)


class MaterialResponse(BaseModel):
    id: int
    name: str
    description: str | None
    unit: str
    price: float
    category: str | None
    last_updated: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OutdatedMaterial(BaseModel):
    id: int
    name: str
    price: float
    last_updated: datetime
    days_old: int = Field(..., ge=0)
