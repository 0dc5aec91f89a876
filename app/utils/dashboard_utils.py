from datetime import date
from typing import Iterable, List, Optional, Union
from models.work_logs import WorkLog
from schemas.work_log import (DashboardRow, DashboardSummary, DaySummary,
                              HourSlot, WorkLogStatus)
from utils.status_utils import HOURS_PER_DAY, DEFAULT_STATUS, count_statuses, is_active


def build_day_slots(entries: Iterable[WorkLog]) -> List[HourSlot]:
    """
    Expand the stored entries of one employee's day into a fixed 24-slot timeline.

    :param entries: stored WorkLog entries for a single employee and date, any order
    :return: 24 HourSlots where index == hour; hours with no entry are pending with an empty note
    """
    by_hour = {entry.hour: entry for entry in entries}

    slots = []
    for hour in range(HOURS_PER_DAY):
        entry = by_hour.get(hour)
        if entry is None:
            slots.append(HourSlot(hour=hour, status=DEFAULT_STATUS, note=""))
        else:
            slots.append(HourSlot(
                hour=hour,
                status=entry.status,
                note=entry.note,
                updated_at=entry.updated_at,
                log_id=entry.id,
            ))
    return slots


async def build_dashboard(
    store,
    company_id: str,
    day: Union[str, date],
    department: Optional[str] = None,
) -> List[DashboardRow]:
    """
    One row per roster employee with their full 24-hour timeline for ``day``.

    Rows keep roster order. ``department`` narrows the rows to a single department
    (case-insensitive), the same filter the admin screen offers.
    """
    roster_with_entries = await store.query_by_organization_and_date(company_id, day)

    rows = []
    for employee, entries in roster_with_entries:
        if department and (employee.department or "").lower() != department.lower():
            continue
        rows.append(DashboardRow(employee=employee, hours=build_day_slots(entries)))
    return rows


def summarize_dashboard(rows: List[DashboardRow]) -> DashboardSummary:
    active_today = 0
    completed_hours = 0
    departments = []

    for row in rows:
        if any(is_active(slot.status) for slot in row.hours):
            active_today += 1
        completed_hours += sum(1 for slot in row.hours if slot.status == WorkLogStatus.COMPLETED)
        if row.employee.department and row.employee.department not in departments:
            departments.append(row.employee.department)

    return DashboardSummary(
        total_employees=len(rows),
        active_today=active_today,
        completed_hours=completed_hours,
        departments=departments,
    )


def summarize_day(slots: List[HourSlot]) -> DaySummary:
    counts = count_statuses(slot.status for slot in slots)
    return DaySummary(
        completed=counts[WorkLogStatus.COMPLETED],
        in_progress=counts[WorkLogStatus.IN_PROGRESS],
        pending=counts[WorkLogStatus.PENDING],
        on_break=counts[WorkLogStatus.BREAK],
    )
