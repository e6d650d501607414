from parley.bootstrap.deps import get_core, get_app
from parley.core.models.message import MEDIA_MESSAGE, Message
from parley.core.models.session import Session


app = get_app()


@app.request("join")
async def join(session: Session, data: dict) -> Message:
    core = get_core()
    return await core.calls.join(session, data)


@app.request(MEDIA_MESSAGE)
async def media_message(session: Session, data: dict) -> Message | None:
    core = get_core()
    return await core.calls.relay(session, data)


@app.request("leave")
async def leave(session: Session, data: dict) -> Message:
    core = get_core()
    return await core.calls.leave(session, data["request_id"])


@app.closed
async def session_closed(session: Session) -> None:
    if session.connection is not None:
        core = get_core()
        await core.calls.leave(session)
