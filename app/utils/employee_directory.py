from typing import List
from pymongo.errors import PyMongoError
from models.employees import Employee
from schemas.work_log import DashboardEmployee
from exceptions import StoreUnavailable

# Roster order shown on the dashboard; rows are never re-sorted by activity.
ROSTER_SORT = [("first_name", 1), ("last_name", 1), ("employee_id", 1)]


def get_employee_name(employee: Employee) -> str:
    if employee.name:
        return employee.name
    name = " ".join(part for part in (employee.first_name, employee.last_name) if part)
    return name or employee.employee_id


class EmployeeDirectory:
    """Read-only view of a company's roster, backed by the employees collection."""

    def __init__(self, collection):
        self.collection = collection

    async def list_employees(self, company_id: str) -> List[DashboardEmployee]:
        # Inactive employees are excluded, matching the employee management listing
        query_filter = {
            "company_id": company_id,
            "employment_status": {"$ne": "inactive"}
        }
        try:
            documents = await self.collection.find(query_filter, sort=ROSTER_SORT).to_list(length=None)
        except PyMongoError as e:
            raise StoreUnavailable(str(e), operation="list_employees") from e

        employees = [Employee.model_validate(document) for document in documents]
        return [
            DashboardEmployee(
                employee_id=employee.employee_id,
                name=get_employee_name(employee),
                department=employee.department,
                thread_color=employee.thread_color,
            )
            for employee in employees
        ]
