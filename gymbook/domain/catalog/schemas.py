"""Catalog domain schemas"""

from datetime import date, time
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from ...models import ServiceCategory


class TrainerResponse(BaseModel):
    id: int
    full_name: str
    specialties: str
    bio: Optional[str] = None
    work_start: time
    work_end: time
    session_fee: Decimal
    experience_years: int

    class Config:
        from_attributes = True


class WindowResponse(BaseModel):
    start: str
    end: str
    note: Optional[str] = None


class AvailableTrainerResponse(BaseModel):
    id: int
    full_name: str
    specialties: str
    session_fee: Decimal
    windows: list[WindowResponse]


class AvailableTrainersResponse(BaseModel):
    date: date
    weekday: int
    total: int
    trainers: list[AvailableTrainerResponse]


class ServiceResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    duration_minutes: int
    price: Decimal
    category: ServiceCategory
    max_participants: int

    class Config:
        from_attributes = True


class SearchResult(BaseModel):
    type: str  # trainer | service
    id: int
    title: str
    description: str


class SearchResponse(BaseModel):
    query: str
    total: int
    results: list[SearchResult]
