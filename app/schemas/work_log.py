from pydantic import AliasChoices, BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from enum import Enum

NOTE_MAX_LENGTH = 5000


class WorkLogStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BREAK = "break"


class WorkLogCreate(BaseModel):
    day: date = Field(..., validation_alias=AliasChoices("date", "day"), description="ISO calendar date of the hour being logged.")
    hour: int = Field(..., ge=0, le=23, description="Hour of the day, 0-23.")
    status: WorkLogStatus = Field(..., validation_alias=AliasChoices("status", "knotColor"))
    note: str = Field(
        "",
        max_length=NOTE_MAX_LENGTH,
        validation_alias=AliasChoices("note", "description"),
        description="What was worked on during this hour."
    )


class WorkLogResponse(BaseModel):
    id: Optional[str] = None
    company_id: str
    employee_id: str
    date: str
    hour: int
    status: WorkLogStatus
    note: str = ""
    updated_at: datetime


class HourSlot(BaseModel):
    hour: int
    status: WorkLogStatus = WorkLogStatus.PENDING
    note: str = ""
    updated_at: Optional[datetime] = None
    log_id: Optional[str] = None


class DaySummary(BaseModel):
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    on_break: int = 0


class EmployeeDayResponse(BaseModel):
    date: str
    entries: List[WorkLogResponse]
    hours: List[HourSlot]
    summary: DaySummary


class DashboardEmployee(BaseModel):
    employee_id: str
    name: str
    department: Optional[str] = None
    thread_color: Optional[str] = None


class DashboardRow(BaseModel):
    employee: DashboardEmployee
    hours: List[HourSlot]


class DashboardSummary(BaseModel):
    total_employees: int = 0
    active_today: int = 0
    completed_hours: int = 0
    departments: List[str] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    date: str
    rows: List[DashboardRow]
    summary: DashboardSummary


class WorkLogChangeEvent(BaseModel):
    event: str = "workLogUpdate"
    company_id: str
    employee_id: str
    date: str
    hour: int
    status: WorkLogStatus
    note: str = ""
    updated_at: datetime


class ControlMessage(BaseModel):
    event: str
    company_id: Optional[str] = Field(None, validation_alias=AliasChoices("company_id", "organizationId", "organization_id"))
