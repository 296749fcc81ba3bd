import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from interview_ace.core.config import settings
from interview_ace.core.dependencies import (
    get_client_key,
    get_intake_service,
    get_session_repository,
    new_client_key,
)
from interview_ace.models.intake import InstructionsResponse, InstructionStep
from interview_ace.services.intake_service import IntakeService, extract_resume_text, validate_intake
from interview_ace.services.session_repository import SessionRepository
from interview_ace.services.session_service import active_sessions

router = APIRouter()
logger = logging.getLogger(__name__)

INSTRUCTIONS = InstructionsResponse(
    title="Get Ready!",
    description="Follow these steps to ensure the best interview experience.",
    steps=[
        InstructionStep(
            title="Enable Camera & Microphone",
            description="Your browser will ask for permission. Please allow access so we can see and hear you.",
        ),
        InstructionStep(
            title="Find a Well-Lit Area",
            description="Make sure your face is clearly visible and not covered by shadows.",
        ),
        InstructionStep(
            title="Speak Clearly",
            description="Speak at a normal volume. The AI will transcribe your answers.",
        ),
    ],
)


@router.post("/intake", status_code=201)
async def submit_intake(
    response: Response,
    name: str = Form(""),
    job_role: str = Form(""),
    experience: str = Form(""),
    interview_type: str = Form("Technical"),
    resume: Optional[UploadFile] = File(None),
    client_key: Optional[str] = Depends(get_client_key),
    intake_service: IntakeService = Depends(get_intake_service),
    repository: SessionRepository = Depends(get_session_repository),
):
    """Validate the form, read the resume and create the interview session"""
    form = validate_intake(name, job_role, experience, interview_type, resume.filename if resume else "")
    resume_text = extract_resume_text(await resume.read())

    session = await intake_service.create_session(form, resume_text)

    client_key = client_key or new_client_key()
    live = active_sessions.pop(client_key, None)
    if live is not None:
        await live.close(discard=True)
    repository.put(client_key, session)
    response.set_cookie(settings.SESSION_COOKIE_NAME, client_key, httponly=True, samesite="lax")

    logger.info(f"✅ [INTAKE] Session {session.session_id} stored for {client_key}")
    return {
        "session_id": session.session_id,
        "total_questions": len(session.questions),
        "redirect": "instructions",
    }


@router.get("/instructions", response_model=InstructionsResponse)
async def get_instructions():
    return INSTRUCTIONS
