"""Report schemas"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class ReportSummary(BaseModel):
    total: int
    completed_revenue: Decimal
    pending: int
    confirmed: int
    cancelled: int


class StatusCount(BaseModel):
    status: str
    count: int


class TrainerLine(BaseModel):
    trainer_id: int
    trainer_name: str
    booking_count: int
    revenue: Decimal


class ServiceLine(BaseModel):
    service_id: int
    service_name: str
    count: int


class DailyReportResponse(BaseModel):
    date: date
    weekday: int
    summary: ReportSummary
    by_status: list[StatusCount]
    by_trainer: list[TrainerLine]
    by_service: list[ServiceLine]
