from datetime import datetime
from typing import Optional
from pytz import UTC
from fastapi import APIRouter, Depends, HTTPException, Query
from schemas.work_log import (WorkLogCreate, WorkLogResponse, EmployeeDayResponse,
                              DashboardResponse)
from utils.app_utils import get_current_user, get_work_log_store
from utils.dashboard_utils import build_day_slots, build_dashboard, summarize_dashboard, summarize_day
from utils.status_utils import parse_day
from exceptions import WorkLogError, NotAuthorized, get_http_exception, get_user_exception

router = APIRouter()


def resolve_day(value: Optional[str]):
    if not value:
        return datetime.now(UTC).date()
    return parse_day(value)


@router.post("/", response_model=WorkLogResponse)
async def save_work_log(
    work_log: WorkLogCreate,
    user_and_type: tuple = Depends(get_current_user),
    store = Depends(get_work_log_store)
):
    """
    Record what the current employee worked on during one hour of a day.
    Writing the same hour again replaces the earlier status and note; the latest
    write wins. Every admin watching the employee's company is notified live.
    Args:
        work_log (WorkLogCreate): date, hour (0-23), status and an optional note.
            ``knotColor`` and ``description`` are accepted as aliases of status and note.
        user_and_type (tuple): Tuple containing user information and user type from authentication.
    Returns:
        WorkLogResponse: the entry as stored after the write.
    Raises:
        HTTPException:
            - 403 if the caller is not an employee
            - 400 if the hour, status or date is invalid
            - 422 if the request body fails validation
            - 503 if the work log store is unavailable (safe to retry)
    """
    user, user_type = user_and_type
    if user_type != "employee":
        raise HTTPException(status_code=403, detail="Only employees can log work")

    try:
        entry = await store.upsert(
            company_id=user.get("company_id"),
            employee_id=user.get("employee_id"),
            day=work_log.day,
            hour=work_log.hour,
            status=work_log.status,
            note=work_log.note,
        )
    except WorkLogError as e:
        raise get_http_exception(e)

    return entry.model_dump()


@router.get("/", response_model=EmployeeDayResponse)
async def get_work_logs(
    date: Optional[str] = Query(None, description="ISO date (YYYY-MM-DD); defaults to today (UTC)"),
    employee_id: Optional[str] = Query(None, description="Admins only: employee whose day to read"),
    user_and_type: tuple = Depends(get_current_user),
    store = Depends(get_work_log_store)
):
    """
    Returns one employee's logged hours for a date.\n
    ``entries`` holds only the hours actually written; ``hours`` is the full 24-hour
    timeline with unwritten hours shown as pending, and ``summary`` counts them by status.
    Employees read their own day, admins may pass ``employee_id`` for anyone in their company.
    """
    user, user_type = user_and_type
    company_id = user.get("company_id")

    if user_type == "admin":
        if not employee_id:
            raise HTTPException(status_code=400, detail="employee_id is required")
    else:
        if employee_id and employee_id != user.get("employee_id"):
            raise HTTPException(status_code=403, detail="Employees can only read their own work logs")
        employee_id = user.get("employee_id")

    try:
        day = resolve_day(date)
        entries = await store.query_by_employee_and_date(employee_id, day, company_id=company_id)
    except WorkLogError as e:
        raise get_http_exception(e)

    hours = build_day_slots(entries)
    return {
        "date": day.isoformat(),
        "entries": [entry.model_dump() for entry in entries],
        "hours": hours,
        "summary": summarize_day(hours),
    }


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    date: Optional[str] = Query(None, description="ISO date (YYYY-MM-DD); defaults to today (UTC)"),
    company_id: Optional[str] = Query(None, description="Must match the admin's company when given"),
    department: Optional[str] = Query(None, description="Only show employees of this department"),
    user_and_type: tuple = Depends(get_current_user),
    store = Depends(get_work_log_store)
):
    """
    Builds the admin dashboard: every employee of the admin's company with their
    24-hour timeline for the date, in roster order.
    Args:
        date (str, optional): ISO calendar date, today (UTC) when omitted.
        company_id (str, optional): company to show; admins can only see their own.
        department (str, optional): case-insensitive department filter.
        user_and_type (tuple): Tuple containing user information and user type from authentication.
    Returns:
        dict: A dictionary containing:
            - date (str): the date shown
            - rows (list): one row per employee, ``employee`` details plus 24 ``hours`` slots
            - summary (dict): total_employees, active_today, completed_hours, departments
    Raises:
        HTTPException:
            - 401 if user is not an admin
            - 403 if ``company_id`` is not the admin's company
            - 400 if the date is invalid
            - 503 if the work log store is unavailable
    """
    user, user_type = user_and_type
    if user_type != "admin":
        raise get_user_exception()

    admin_company_id = user.get("company_id")

    try:
        if company_id and company_id != admin_company_id:
            raise NotAuthorized("You are not authorized to view this company's dashboard")

        day = resolve_day(date)
        rows = await build_dashboard(store, admin_company_id, day, department=department)
    except WorkLogError as e:
        raise get_http_exception(e)

    return {
        "date": day.isoformat(),
        "rows": rows,
        "summary": summarize_dashboard(rows),
    }
