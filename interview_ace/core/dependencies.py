import uuid
from functools import lru_cache
from typing import Optional

from fastapi import Cookie, Depends, HTTPException

from interview_ace.core.config import settings
from interview_ace.models.interview import InterviewSession
from interview_ace.models.session import InterviewConfig, NoAudioPolicy
from interview_ace.services.answer_evaluator import AnswerEvaluator
from interview_ace.services.base.llm_client import LLMClientBase
from interview_ace.services.evaluation_pipeline import EvaluationPipeline
from interview_ace.services.intake_service import IntakeService
from interview_ace.services.question_generator import QuestionGenerator
from interview_ace.services.report_generator import ReportGenerator
from interview_ace.services.results_service import ResultsService
from interview_ace.services.session_repository import (
    InMemorySessionRepository,
    MongoSessionRepository,
    SessionRepository,
)
from interview_ace.services.speech_to_text import SpeechTranscriber


@lru_cache
def get_llm_client() -> LLMClientBase:
    from interview_ace.services.clients.gemini_client import GeminiClient
    return GeminiClient()


@lru_cache
def get_session_repository() -> SessionRepository:
    if settings.SESSION_STORE == "mongo":
        from interview_ace.core.database import create_database_connection, get_sessions_collection
        return MongoSessionRepository(get_sessions_collection(create_database_connection()))
    return InMemorySessionRepository()


def get_interview_config() -> InterviewConfig:
    return InterviewConfig(
        question_timer_seconds=settings.QUESTION_TIMER_SECONDS,
        background_evaluation=settings.BACKGROUND_EVALUATION,
        no_audio_policy=NoAudioPolicy(settings.NO_AUDIO_POLICY),
    )


def get_intake_service(client: LLMClientBase = Depends(get_llm_client)) -> IntakeService:
    return IntakeService(QuestionGenerator(client))


def get_evaluation_pipeline(client: LLMClientBase = Depends(get_llm_client)) -> EvaluationPipeline:
    return EvaluationPipeline(SpeechTranscriber(client), AnswerEvaluator(client))


def get_results_service(client: LLMClientBase = Depends(get_llm_client)) -> ResultsService:
    return ResultsService(ReportGenerator(client))


def new_client_key() -> str:
    return uuid.uuid4().hex


def get_client_key(interview_ace_client: Optional[str] = Cookie(default=None)) -> Optional[str]:
    return interview_ace_client


def get_current_session(
    client_key: Optional[str] = Depends(get_client_key),
    repository: SessionRepository = Depends(get_session_repository),
) -> InterviewSession:
    """Pages that need a session send the client back to intake when there is none"""
    session = repository.get(client_key) if client_key else None
    if session is None:
        raise HTTPException(status_code=404, detail={"error": "session_not_found", "redirect": "intake"})
    return session
