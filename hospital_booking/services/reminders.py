import asyncio
import logging
from contextlib import suppress
from datetime import timedelta
from typing import Dict, List, Optional, Set

from ..repositories.base import AppointmentStore
from ..schemas.appointment import Appointment, AppointmentStatus
from .booking_service import utcnow

logger = logging.getLogger(__name__)


class LoggingSmsNotifier:
    """Simulated SMS gateway: messages are logged and kept in ``outbox``."""

    def __init__(self, clock=utcnow):
        self.outbox: List[Dict[str, str]] = []
        self._clock = clock

    def send(self, phone: str, message: str) -> None:
        self.outbox.append({
            "phone": phone,
            "message": message,
            "timestamp": self._clock().isoformat(),
            "status": "sent",
        })
        logger.info(f"SMS sent to {phone}: {message}")


class ReminderScheduler:
    """Periodically reminds patients of pending appointments due today or tomorrow.

    Each appointment is reminded at most once while it stays due. The scan only reads
    the store; failures are logged and the loop keeps running until ``stop``.
    """

    def __init__(
        self,
        store: AppointmentStore,
        notifier: LoggingSmsNotifier,
        interval_seconds: float = 60.0,
        clock=utcnow,
    ):
        self.store = store
        self.notifier = notifier
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._reminded: Set[str] = set()
        self._task: Optional[asyncio.Task] = None

    def scan_once(self) -> List[Appointment]:
        today = self._clock().date()
        due_dates = {today.isoformat(), (today + timedelta(days=1)).isoformat()}

        due = self.store.list(
            lambda a: a.status == AppointmentStatus.PENDING and a.date in due_dates
        )
        # Forget reminded ids that are no longer due
        self._reminded &= {a.id for a in due}

        sent = []
        for appointment in due:
            if appointment.id in self._reminded:
                continue
            try:
                self.notifier.send(
                    appointment.patient_phone,
                    f"Reminder: you have an appointment with {appointment.doctor_name} "
                    f"on {appointment.date} at {appointment.time}. Please arrive early.",
                )
            except Exception:
                logger.exception(f"Failed to send reminder for {appointment.id}")
                continue
            self._reminded.add(appointment.id)
            sent.append(appointment)
        return sent

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.to_thread(self.scan_once)
            except Exception:
                logger.exception("Reminder scan failed")
            await asyncio.sleep(self.interval_seconds)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Reminder scheduler started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Reminder scheduler stopped")
