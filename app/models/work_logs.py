from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from schemas.work_log import WorkLogStatus


class WorkLog(BaseModel):
    company_id: str
    employee_id: str
    date: str  # ISO calendar date, YYYY-MM-DD
    hour: int
    status: WorkLogStatus = WorkLogStatus.PENDING
    note: str = ""
    updated_at: datetime
    id: Optional[str] = None  # stringified Mongo _id, absent before the first write
