import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Callable, List, Optional, Tuple, Union
from pytz import UTC
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from models.work_logs import WorkLog
from schemas.work_log import DashboardEmployee, WorkLogChangeEvent, WorkLogStatus
from utils.status_utils import parse_day, parse_status, validate_hour, validate_note
from exceptions import InvalidInput, StoreUnavailable

logger = logging.getLogger(__name__)

# A write that keeps colliding with entries that then disappear gives up after this many rounds
WRITE_ATTEMPTS = 3


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_storage_time(value: datetime) -> datetime:
    """Naive UTC truncated to milliseconds, which is what BSON keeps."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def from_document(document: dict) -> WorkLog:
    updated_at = document["updated_at"]
    if updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=UTC)  # Mongo hands back naive UTC

    return WorkLog(
        id=str(document["_id"]) if document.get("_id") is not None else None,
        company_id=document["company_id"],
        employee_id=document["employee_id"],
        date=document["date"],
        hour=document["hour"],
        status=document.get("status", WorkLogStatus.PENDING.value),
        note=document.get("note") or "",
        updated_at=updated_at,
    )


def _require(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field} is required")
    return value


class WorkLogStore:
    """
    Durable hour-by-hour work logs keyed by (company_id, employee_id, date, hour).

    Only hours that were actually written are stored; an hour with no document is
    pending with an empty note. Concurrent writes to the same hour resolve by
    ``updated_at``: the later write wins and the note is never merged.

    Args:
        collection: Motor collection holding the work log documents.
        directory: roster source used by ``query_by_organization_and_date``.
        notifier: receives a change event after every applied write.
        clock: returns the write time; defaults to the current UTC time.
    """

    def __init__(self, collection, directory=None, notifier=None, clock: Callable[[], datetime] = utc_now):
        self.collection = collection
        self.directory = directory
        self.notifier = notifier
        self.clock = clock

    async def ensure_indexes(self):
        await self.collection.create_index(
            [("company_id", 1), ("employee_id", 1), ("date", 1), ("hour", 1)],
            unique=True,
            name="work_log_key",
        )
        await self.collection.create_index([("company_id", 1), ("date", 1)], name="company_date")

    async def upsert(
        self,
        company_id: str,
        employee_id: str,
        day: Union[str, date],
        hour: int,
        status: Union[str, WorkLogStatus],
        note: Optional[str] = "",
    ) -> WorkLog:
        """
        Insert or replace the entry for one hour and return what is stored afterwards.

        Raises:
            InvalidInput: bad hour, status, date, note or missing ids. Nothing is written.
            StoreUnavailable: the write could not be completed.
        """
        company_id = _require(company_id, "company_id")
        employee_id = _require(employee_id, "employee_id")
        day = parse_day(day)
        hour = validate_hour(hour)
        status = parse_status(status)
        note = validate_note(note)

        written_at = to_storage_time(self.clock())
        key = {"company_id": company_id, "employee_id": employee_id, "date": day.isoformat(), "hour": hour}

        document, applied = await self._write(key, status, note, written_at)
        entry = from_document(document)

        if not applied:
            logger.info(
                "Discarded stale write for %s/%s %s hour %s, stored entry is newer",
                company_id, employee_id, key["date"], hour,
            )
            return entry

        logger.info("Work log saved for %s/%s %s hour %s: %s", company_id, employee_id, key["date"], hour, entry.status.value)

        if self.notifier is not None:
            event = WorkLogChangeEvent(
                company_id=entry.company_id,
                employee_id=entry.employee_id,
                date=entry.date,
                hour=entry.hour,
                status=entry.status,
                note=entry.note,
                updated_at=entry.updated_at,
            )
            await self.notifier.publish(company_id, event)

        return entry

    async def _write(self, key: dict, status: WorkLogStatus, note: str, written_at: datetime) -> Tuple[dict, bool]:
        # Matches only when the stored entry is not newer than this write.
        query_filter = {**key, "updated_at": {"$lte": written_at}}
        update = {"$set": {"status": status.value, "note": note, "updated_at": written_at}}

        for _ in range(WRITE_ATTEMPTS):
            try:
                document = await self.collection.find_one_and_update(
                    query_filter, update, upsert=True, return_document=ReturnDocument.AFTER,
                )
                return document, True
            except DuplicateKeyError:
                # Either a newer entry is stored, or a concurrent first write won the
                # insert. Only a conditional update without insert can tell them apart.
                pass
            except PyMongoError as e:
                logger.exception("Work log upsert failed for %s", key)
                raise StoreUnavailable(str(e), operation="upsert") from e

            try:
                document = await self.collection.find_one_and_update(
                    query_filter, update, upsert=False, return_document=ReturnDocument.AFTER,
                )
                if document is not None:
                    return document, True

                document = await self.collection.find_one(key)
            except PyMongoError as e:
                logger.exception("Work log read-back failed for %s", key)
                raise StoreUnavailable(str(e), operation="upsert") from e

            if document is not None:
                return document, False

            logger.debug("Conflicting entry for %s vanished, retrying write", key)

        raise StoreUnavailable("conflicting entry kept changing during write", operation="upsert")

    async def query_by_employee_and_date(
        self,
        employee_id: str,
        day: Union[str, date],
        company_id: Optional[str] = None,
    ) -> List[WorkLog]:
        """All stored entries (0 to 24) for one employee and date, ordered by hour. Absent hours are not filled in."""
        employee_id = _require(employee_id, "employee_id")
        query = {"employee_id": employee_id, "date": parse_day(day).isoformat()}
        if company_id:
            query["company_id"] = company_id

        try:
            documents = await self.collection.find(query, sort=[("hour", 1)]).to_list(length=None)
        except PyMongoError as e:
            raise StoreUnavailable(str(e), operation="query_by_employee_and_date") from e

        return [from_document(document) for document in documents]

    async def query_by_organization_and_date(
        self,
        company_id: str,
        day: Union[str, date],
    ) -> List[Tuple[DashboardEmployee, List[WorkLog]]]:
        """
        One (employee, entries) pair per roster employee, in roster order.

        The roster comes from the employee directory, so employees without a single
        entry for the date are still listed, with an empty entry list.
        """
        if self.directory is None:
            raise RuntimeError("WorkLogStore needs an employee directory to query a whole company")

        company_id = _require(company_id, "company_id")
        day = parse_day(day)
        roster = await self.directory.list_employees(company_id)

        try:
            documents = await self.collection.find(
                {"company_id": company_id, "date": day.isoformat()},
                sort=[("hour", 1)],
            ).to_list(length=None)
        except PyMongoError as e:
            raise StoreUnavailable(str(e), operation="query_by_organization_and_date") from e

        entries_by_employee = defaultdict(list)
        for document in documents:
            entries_by_employee[document["employee_id"]].append(from_document(document))

        return [(employee, entries_by_employee.get(employee.employee_id, [])) for employee in roster]
