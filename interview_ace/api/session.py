from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
from pydantic import ValidationError
import logging

from interview_ace.core.config import settings
from interview_ace.core.dependencies import (
    get_client_key,
    get_current_session,
    get_evaluation_pipeline,
    get_interview_config,
    get_session_repository,
)
from interview_ace.core.errors import InterviewAceError, MediaPermissionError, RecordingError
from interview_ace.models.intake import SessionView
from interview_ace.models.interview import InterviewSession
from interview_ace.models.session import ClientMessage, SessionMessage
from interview_ace.services.evaluation_pipeline import EvaluationPipeline
from interview_ace.services.intake_service import interviewer_for
from interview_ace.services.session_repository import SessionRepository
from interview_ace.services.session_service import InterviewSessionService, active_sessions

router = APIRouter()
logger = logging.getLogger(__name__)

BLOCKING_ERRORS = (MediaPermissionError, RecordingError)


@router.get("/session", response_model=SessionView)
async def get_session(session: InterviewSession = Depends(get_current_session)):
    answered = session.answered_indices()
    next_index = next((i for i in range(len(session.questions)) if i not in answered), None)
    current = next_index if next_index is not None else len(session.questions) - 1
    return SessionView(
        session_id=session.session_id,
        name=session.user_details.name,
        job_role=session.user_details.job_role,
        interview_type=session.user_details.interview_type.value,
        interviewer=interviewer_for(session.user_details.interview_type),
        total_questions=len(session.questions),
        answered=len(answered),
        next_question_index=next_index,
        progress=round((current + 1) / len(session.questions) * 100, 1),
    )


@router.delete("/session")
async def delete_session(
    client_key: str = Depends(get_client_key),
    repository: SessionRepository = Depends(get_session_repository),
):
    """Start a new interview: forget the stored session and anything still running for it"""
    live = active_sessions.pop(client_key, None) if client_key else None
    if live is not None:
        await live.close(discard=True)
    deleted = repository.delete(client_key) if client_key else False
    logger.info(f"🗑️ [SESSION] Session reset for {client_key} (deleted={deleted})")
    return {"deleted": deleted, "redirect": "intake"}


@router.websocket("/ws")
async def interview_websocket(
    websocket: WebSocket,
    repository: SessionRepository = Depends(get_session_repository),
    pipeline: EvaluationPipeline = Depends(get_evaluation_pipeline),
):
    """Live interview loop: the browser streams capture events, the server pushes state"""
    client_key = websocket.cookies.get(settings.SESSION_COOKIE_NAME)
    await websocket.accept()

    if not client_key:
        await websocket.send_json(SessionMessage(type="navigate", to="intake").model_dump(exclude_none=True))
        await websocket.close()
        return

    # One live interview page per client
    if client_key in active_sessions:
        logger.warning(f"🚨 [SESSION] Client {client_key} already has an active interview page")
        await websocket.send_json(SessionMessage(
            type="notification", level="error", title="Interview Already Open",
            text="You already have an active interview session.", blocking=True,
        ).model_dump(exclude_none=True))
        await websocket.close()
        return

    async def emit(message: SessionMessage):
        await websocket.send_json(message.model_dump(exclude_none=True))

    service = InterviewSessionService(
        client_key=client_key,
        repository=repository,
        pipeline=pipeline,
        emit=emit,
        config=get_interview_config(),
    )

    try:
        if not await service.open():
            await websocket.close()
            return

        active_sessions[client_key] = service
        logger.info(f"📊 [SESSIONS] Active interview pages: {len(active_sessions)}")

        while not service.closed:
            raw = await websocket.receive_text()
            try:
                message = ClientMessage.model_validate_json(raw)
            except ValidationError:
                logger.warning(f"⚠️ [WEBSOCKET] Malformed message from {client_key}: {raw[:80]!r}")
                await emit(SessionMessage(type="notification", level="error", title="Error",
                                          text="Malformed message."))
                continue

            try:
                await _handle_client_message(service, message)
            except InterviewAceError as e:
                blocking = isinstance(e, BLOCKING_ERRORS)
                title = "Recording Error" if isinstance(e, RecordingError) else "Error"
                await emit(SessionMessage(type="notification", level="error", title=title,
                                          text=e.message, blocking=blocking))

        if websocket.client_state != WebSocketState.DISCONNECTED:
            await websocket.close()

    except WebSocketDisconnect:
        logger.info(f"🔌 [WEBSOCKET] Client {client_key} disconnected")
    finally:
        await service.close()
        if active_sessions.get(client_key) is service:
            del active_sessions[client_key]
        logger.info(f"🧹 [CLEANUP] Interview page closed for {client_key}")


async def _handle_client_message(service: InterviewSessionService, message: ClientMessage) -> None:
    if message.type == "media_ready":
        await service.mark_media_ready()
    elif message.type == "media_error":
        await service.mark_media_failed(message.error)
    elif message.type == "start":
        await service.start_recording(message.mime_type)
    elif message.type == "audio_chunk":
        service.add_audio_chunk(message.data or "")
    elif message.type == "stop":
        await service.stop_recording()
    elif message.type == "end_interview":
        await service.end_interview()
    else:
        logger.warning(f"❓ [WEBSOCKET] Unknown message type: {message.type}")
