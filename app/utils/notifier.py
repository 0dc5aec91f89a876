"""
Company-scoped publish/subscribe for live dashboard updates.

Each company has its own channel. A work log change is fanned out only to the
sessions that joined that company, so admins never see another tenant's events.
Delivery is best effort and at most once: a session that is not connected when
an event goes out simply misses it and catches up on its next dashboard fetch.
"""
import asyncio
import logging
import uuid
from typing import Dict, List, Set, Tuple
from config import settings

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT = 5.0


class Subscriber:
    """A live session handle. Subclasses decide how an event reaches the client."""

    def __init__(self, session_id: str = None):
        self.session_id = session_id or uuid.uuid4().hex

    async def send(self, event: dict):
        raise NotImplementedError

    def __repr__(self):
        return f"<{type(self).__name__} {self.session_id}>"


class WebSocketSubscriber(Subscriber):
    def __init__(self, websocket, user: dict, user_type: str):
        super().__init__()
        self.websocket = websocket
        self.user = user
        self.user_type = user_type

    @property
    def company_id(self) -> str:
        return self.user.get("company_id")

    async def send(self, event: dict):
        await self.websocket.send_json(event)


class OrganizationNotifier:
    """
    Maps company_id -> set of subscribed sessions.

    Subscription changes never await, so on the event loop they happen atomically
    with respect to a publish. ``publish`` iterates a snapshot of the set and
    re-checks membership before each send, which means a session that leaves or
    disconnects mid fan-out gets nothing after it has gone.

    Each send is bounded by ``send_timeout`` seconds. A session that does not take
    the event in time misses it, so a stalled client never holds up the write that
    triggered the publish.
    """

    def __init__(self, send_timeout: float = DEFAULT_SEND_TIMEOUT):
        self.send_timeout = send_timeout
        self._rooms: Dict[str, Set[Subscriber]] = {}
        self._memberships: Dict[Subscriber, Set[str]] = {}

    def subscribe(self, session: Subscriber, company_id: str):
        self._rooms.setdefault(company_id, set()).add(session)
        self._memberships.setdefault(session, set()).add(company_id)
        logger.debug("%r joined company %s", session, company_id)

    def unsubscribe(self, session: Subscriber, company_id: str):
        room = self._rooms.get(company_id)
        if room is not None:
            room.discard(session)
            if not room:
                del self._rooms[company_id]

        companies = self._memberships.get(session)
        if companies is not None:
            companies.discard(company_id)
            if not companies:
                del self._memberships[session]
        logger.debug("%r left company %s", session, company_id)

    def disconnect(self, session: Subscriber):
        companies = self._memberships.pop(session, set())
        for company_id in companies:
            room = self._rooms.get(company_id)
            if room is None:
                continue
            room.discard(session)
            if not room:
                del self._rooms[company_id]
        logger.info("%r disconnected, removed from %d company channel(s)", session, len(companies))

    def is_subscribed(self, session: Subscriber, company_id: str) -> bool:
        return session in self._rooms.get(company_id, ())

    def subscribers(self, company_id: str) -> Tuple[Subscriber, ...]:
        return tuple(self._rooms.get(company_id, ()))

    def session_count(self, company_id: str) -> int:
        return len(self._rooms.get(company_id, ()))

    def organizations(self) -> List[str]:
        return list(self._rooms)

    async def publish(self, company_id: str, event) -> int:
        """Send ``event`` to every session currently in the company's channel. Returns the number delivered."""
        payload = event.model_dump(mode="json") if hasattr(event, "model_dump") else dict(event)

        recipients = self.subscribers(company_id)
        if not recipients:
            return 0

        results = await asyncio.gather(*(self._deliver(session, company_id, payload) for session in recipients))
        delivered = sum(results)
        logger.debug("Published %s to %d/%d session(s) of company %s", payload.get("event"), delivered, len(recipients), company_id)
        return delivered

    async def _deliver(self, session: Subscriber, company_id: str, payload: dict) -> bool:
        if not self.is_subscribed(session, company_id):
            return False
        try:
            await asyncio.wait_for(session.send(payload), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.debug("Dropped event for %r: no ack within %.1fs", session, self.send_timeout)
            return False
        except Exception as e:
            # A missed event only leaves the dashboard stale until its next fetch
            logger.debug("Dropped event for %r: %s", session, e)
            return False
        return True


notifier = OrganizationNotifier(send_timeout=settings.NOTIFY_SEND_TIMEOUT)
