from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel


class InterviewStatus(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"
    FINISHED = "finished"


class InterviewState(BaseModel):
    """Where the interview loop is. ``question_index`` is None only once finished."""

    status: InterviewStatus
    question_index: Optional[int] = None
    time_left: Optional[int] = None

    @classmethod
    def idle(cls, question_index: int) -> "InterviewState":
        return cls(status=InterviewStatus.IDLE, question_index=question_index)

    @classmethod
    def listening(cls, question_index: int, time_left: int) -> "InterviewState":
        return cls(status=InterviewStatus.LISTENING, question_index=question_index, time_left=time_left)

    @classmethod
    def processing(cls, question_index: int) -> "InterviewState":
        return cls(status=InterviewStatus.PROCESSING, question_index=question_index)

    @classmethod
    def finished(cls) -> "InterviewState":
        return cls(status=InterviewStatus.FINISHED)


class NoAudioPolicy(str, Enum):
    RETRY = "retry"
    SKIP = "skip"


class InterviewConfig(BaseModel):
    question_timer_seconds: int = 30
    background_evaluation: bool = True
    no_audio_policy: NoAudioPolicy = NoAudioPolicy.RETRY
    audio_mime_type: str = "audio/webm;codecs=opus"


class SessionMessage(BaseModel):
    type: str  # "state", "countdown", "notification", "navigate", "result"
    status: Optional[str] = None
    question_index: Optional[int] = None
    question: Optional[str] = None
    time_left: Optional[int] = None
    can_answer: Optional[bool] = None
    label: Optional[str] = None
    level: Optional[str] = None  # "info", "warning", "error"
    title: Optional[str] = None
    text: Optional[str] = None
    blocking: Optional[bool] = None
    to: Optional[str] = None
    result: Optional[Dict[str, Any]] = None


class ClientMessage(BaseModel):
    type: str  # "media_ready", "media_error", "start", "audio_chunk", "stop", "end_interview"
    data: Optional[str] = None
    mime_type: Optional[str] = None
    error: Optional[str] = None
