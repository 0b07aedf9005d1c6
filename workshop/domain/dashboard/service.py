"""Dashboard service - Counters for the staff overview"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import STAFF_ROLES, Principal, ensure_role
from ...models import Customer, Reminder, ServiceRecord, Vehicle
from ...shared.timeutils import local_day_bounds, to_local, utc_now


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def get_stats(self, principal: Principal, now: Optional[datetime] = None) -> dict:
        ensure_role(principal, *STAFF_ROLES)
        today = to_local(now or utc_now()).date().isoformat()
        start, end = local_day_bounds(today)

        return {
            "totalCustomers": self.db.query(Customer).count(),
            "totalVehicles": self.db.query(Vehicle).count(),
            "totalServices": self.db.query(ServiceRecord).count(),
            "servicesToday": self.db.query(ServiceRecord)
            .filter(
                ServiceRecord.service_date >= start,
                ServiceRecord.service_date < end,
                ServiceRecord.status == "scheduled",
            )
            .count(),
            "pendingReminders": self.db.query(Reminder).filter(Reminder.sent.is_(False)).count(),
        }
