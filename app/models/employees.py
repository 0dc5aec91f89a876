from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional

UTC = timezone.utc


class Employee(BaseModel):
    company_id: str
    employee_id: str
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    thread_color: Optional[str] = None  # colors this employee's timeline on the dashboard
    position: str = "member"
    employment_status: str = "active" # or inactive or suspended
    date_created: datetime = Field(default_factory=lambda: datetime.now(UTC))
