"""Reports router - Admin-only reporting endpoints"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_roles
from ...clock import get_clock
from ...database import get_db
from ...models import Member
from .schemas import DailyReportResponse
from .service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    """Dependency injection for ReportService"""
    return ReportService(db)


@router.get("/daily", response_model=DailyReportResponse)
async def daily_report(
    report_date: Optional[date] = Query(None, alias="date"),
    current_user: Member = Depends(require_roles("admin")),
    service: ReportService = Depends(get_report_service),
    clock=Depends(get_clock),
):
    """Bookings of one day grouped by status, trainer and service (defaults to today)"""
    return service.daily_report(report_date or clock.now().date())
