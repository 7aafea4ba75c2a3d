"""
Daily booking report for the back office.
Groups one day's bookings by status, trainer and service.
"""

import logging
from collections import Counter, defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session, joinedload

from ...models import Booking, BookingStatus

logger = logging.getLogger(__name__)


class ReportService:
    """Service for back-office reports"""

    def __init__(self, db: Session):
        self.db = db

    def _bookings_on(self, report_date: date) -> list[Booking]:
        return (
            self.db.query(Booking)
            .options(joinedload(Booking.trainer), joinedload(Booking.service))
            .filter(Booking.booking_date == report_date)
            .all()
        )

    def daily_report(self, report_date: date) -> dict:
        bookings = self._bookings_on(report_date)
        statuses = Counter(BookingStatus(b.status) for b in bookings)

        per_trainer: dict[int, dict] = defaultdict(lambda: {"booking_count": 0, "revenue": Decimal("0")})
        per_service: dict[int, dict] = defaultdict(lambda: {"count": 0})
        for b in bookings:
            if b.trainer is not None:
                row = per_trainer[b.trainer_id]
                row["trainer_id"] = b.trainer_id
                row["trainer_name"] = b.trainer.full_name
                row["booking_count"] += 1
                row["revenue"] += b.price
            if b.service is not None:
                row = per_service[b.service_id]
                row["service_id"] = b.service_id
                row["service_name"] = b.service.name
                row["count"] += 1

        completed_revenue = sum(
            (b.price for b in bookings if BookingStatus(b.status) == BookingStatus.COMPLETED),
            Decimal("0"),
        )
        logger.info(f"Daily report built for {report_date}: {len(bookings)} bookings")

        return {
            "date": report_date,
            "weekday": report_date.weekday(),
            "summary": {
                "total": len(bookings),
                "completed_revenue": completed_revenue,
                "pending": statuses[BookingStatus.PENDING],
                "confirmed": statuses[BookingStatus.CONFIRMED],
                "cancelled": statuses[BookingStatus.CANCELLED],
            },
            "by_status": [
                {"status": status.value, "count": count}
                for status, count in statuses.most_common()
            ],
            "by_trainer": sorted(
                per_trainer.values(), key=lambda r: r["booking_count"], reverse=True
            ),
            "by_service": sorted(per_service.values(), key=lambda r: r["count"], reverse=True),
        }
