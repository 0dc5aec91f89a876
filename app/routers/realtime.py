import logging
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from schemas.work_log import ControlMessage
from utils.app_utils import get_current_user, get_socket_user, get_notifier
from utils.notifier import WebSocketSubscriber
from exceptions import NotAuthorized, get_user_exception

logger = logging.getLogger(__name__)

router = APIRouter()

JOIN_ORGANIZATION = "joinOrganization"
LEAVE_ORGANIZATION = "leaveOrganization"


async def handle_control_message(session: WebSocketSubscriber, message: ControlMessage, notifier):
    company_id = message.company_id or session.company_id

    if message.event == JOIN_ORGANIZATION:
        if company_id != session.company_id:
            raise NotAuthorized(f"Not authorized to join company {company_id}", operation="subscribe")
        notifier.subscribe(session, company_id)
        await session.send({"event": "joinedOrganization", "company_id": company_id})

    elif message.event == LEAVE_ORGANIZATION:
        notifier.unsubscribe(session, company_id)
        await session.send({"event": "leftOrganization", "company_id": company_id})

    else:
        await session.send({"event": "error", "detail": f"Unknown event {message.event!r}"})


@router.websocket("/ws")
async def realtime_channel(
    websocket: WebSocket,
    user_and_type: tuple = Depends(get_socket_user),
    notifier = Depends(get_notifier)
):
    """
    Live work log updates for a company.

    After connecting, the client sends ``{"event": "joinOrganization", "company_id": ...}``
    and from then on receives a ``workLogUpdate`` event whenever anyone in that company
    logs an hour. ``leaveOrganization`` stops the events; closing the socket leaves
    every channel the session had joined.
    """
    user, user_type = user_and_type
    await websocket.accept()

    session = WebSocketSubscriber(websocket, user, user_type)
    logger.info("%r connected for company %s (%s)", session, session.company_id, user_type)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = ControlMessage.model_validate_json(raw)
                await handle_control_message(session, message, notifier)
            except ValidationError:
                await session.send({"event": "error", "detail": "Malformed control message"})
            except NotAuthorized as e:
                await session.send({"event": "error", "detail": e.message})
    except WebSocketDisconnect:
        pass
    finally:
        notifier.disconnect(session)


@router.get("/status")
async def realtime_status(
    user_and_type: tuple = Depends(get_current_user),
    notifier = Depends(get_notifier)
):
    """Number of live sessions currently watching the admin's company."""
    user, user_type = user_and_type
    if user_type != "admin":
        raise get_user_exception()

    company_id = user.get("company_id")
    return {"company_id": company_id, "subscribers": notifier.session_count(company_id)}
