import logging
from fastapi import HTTPException, Depends, Query, WebSocketException, status
from fastapi.security import OAuth2PasswordBearer
from typing import Optional
from jose import JWTError, jwt
from db import admins_collection, employees_collection, work_logs_collection
from config import settings
from utils.employee_directory import EmployeeDirectory
from utils.notifier import notifier
from utils.worklog_store import WorkLogStore

logger = logging.getLogger(__name__)

oauth2_bearer = OAuth2PasswordBearer(tokenUrl="auth/login/")

secret_key = settings.SECRET_KEY
algorithm = settings.ALGORITHM

employee_directory = EmployeeDirectory(employees_collection)
work_log_store = WorkLogStore(work_logs_collection, directory=employee_directory, notifier=notifier)


def get_work_log_store() -> WorkLogStore:
    return work_log_store


def get_notifier():
    return notifier


async def resolve_user(token: str) -> tuple:
    """
    Resolve a bearer token into ``(user, user_type)``.

    Tokens are issued by the login service with the user's email as ``data.sub``.
    Admins are looked up first, then employees.
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=algorithm)
    except JWTError as e:
        logger.info("JWT Error %s", e)
        raise HTTPException(status_code=401, detail="JWT Error - could not validate user.")

    data = payload.get("data")
    if data is None:
        raise HTTPException(status_code=401, detail="Invalid token data.")

    pk: str = data.get("sub")
    if pk is None:
        raise HTTPException(status_code=401, detail="Could not validate user.")

    user = await admins_collection.find_one({"email": pk})
    user_type = "admin"

    if not user:
        user = await employees_collection.find_one({"email": pk})
        user_type = "employee"

        if not user:
            raise HTTPException(status_code=401, detail="User not found.")

    return user, user_type


async def get_current_user(token: str = Depends(oauth2_bearer)) -> tuple:
    return await resolve_user(token)


async def get_socket_user(token: Optional[str] = Query(None)) -> tuple:
    """WebSocket variant of get_current_user; browsers cannot set headers, so the token comes as a query parameter."""
    if not token:
        raise WebSocketException(code=status.WS_1008_POLICY_VIOLATION, reason="Missing token")
    try:
        return await resolve_user(token)
    except HTTPException as e:
        raise WebSocketException(code=status.WS_1008_POLICY_VIOLATION, reason=e.detail)
