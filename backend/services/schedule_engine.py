"""
Schedule Engine
Derives reminder windows from medication plans. Pure functions only: the
caller supplies the clock reading.
"""

import re
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from schemas.elderly import MedicationPlan
from schemas.schedule import DayPeriod, ScheduledMedication, ScheduleWindow

BEFORE_MINUTES = 30
AFTER_MINUTES = 90

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def normalize_hhmm(value: str) -> Optional[str]:
    """
    Return ``value`` as zero-padded ``HH:MM`` or None when it is not a time of day.

    Accepts ``H:MM`` and ``HH:MM`` (and a trailing ``:SS``, which is dropped).
    """
    if not value:
        return None
    text = value.strip()
    if text.count(":") == 2:
        text = text.rsplit(":", 1)[0]
    match = _HHMM_RE.match(text)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def period_for_hour(hour: int) -> DayPeriod:
    if hour < 12:
        return DayPeriod.morning
    if hour < 18:
        return DayPeriod.afternoon
    return DayPeriod.evening


def label_for(hhmm: str) -> str:
    return f"{period_for_hour(int(hhmm[:2])).value} {hhmm}"


def derive_schedule(plans: Iterable[MedicationPlan]) -> List[ScheduleWindow]:
    """
    Group every plan time into one window per time of day, sorted ascending.

    Medications inside a window keep plan order; a plan listing the same time
    twice contributes once.
    """
    grouped: "OrderedDict[str, List[ScheduledMedication]]" = OrderedDict()
    for plan in plans:
        seen = set()
        for raw in plan.times:
            hhmm = normalize_hhmm(raw)
            if hhmm is None or hhmm in seen:
                continue
            seen.add(hhmm)
            grouped.setdefault(hhmm, []).append(
                ScheduledMedication(
                    name=plan.medication.name,
                    quantity=plan.medication.quantity,
                    unit=plan.medication.unit,
                    note=plan.note,
                )
            )

    # Zero-padded HH:MM sorts correctly as a string
    return [
        ScheduleWindow(time=hhmm, label=label_for(hhmm), medications=grouped[hhmm])
        for hhmm in sorted(grouped)
    ]


def window_bounds(hhmm: str, now: datetime):
    """Start and end of the reminder range for the occurrence of ``hhmm`` on ``now``'s day."""
    target = now.replace(hour=int(hhmm[:2]), minute=int(hhmm[3:5]), second=0, microsecond=0)
    return target - timedelta(minutes=BEFORE_MINUTES), target + timedelta(minutes=AFTER_MINUTES)


def active_window(schedule: List[ScheduleWindow], now: datetime) -> Optional[ScheduleWindow]:
    """
    Return the window whose range contains ``now`` (bounds inclusive).

    When ranges overlap the earliest window in sorted order wins.
    """
    for window in schedule:
        start, end = window_bounds(window.time, now)
        if start <= now <= end:
            return window
    return None
