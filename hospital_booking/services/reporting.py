from collections import Counter
from typing import Dict

from ..repositories.base import AppointmentStore
from ..schemas.appointment import AppointmentStatus
from .booking_service import utcnow
from .catalog import Catalog

def today_iso(clock=utcnow) -> str:
    """Today's date as stored on appointments (UTC, YYYY-MM-DD)."""
    return clock().date().isoformat()

def compute_stats(store: AppointmentStore, catalog: Catalog, today: str) -> Dict[str, int]:
    appointments = store.list()
    by_status = Counter(a.status for a in appointments)

    stats = {"totalAppointments": len(appointments)}
    for status in AppointmentStatus:
        stats[status.value] = by_status.get(status, 0)
    stats.update({
        "totalPatients": store.count_patients(),
        "totalDoctors": len(catalog),
        "todayAppointments": sum(1 for a in appointments if a.date == today),
    })
    return stats
