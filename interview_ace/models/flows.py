"""Request/response schemas for the four model-backed flows.

Each flow gets a typed input and a typed output. Output schemas are what the
model is asked to produce; fields are optional where the model is known to drop
them so that defaults can be applied in one place instead of failing the call.
"""
import base64
import binascii
import re
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from interview_ace.models.interview import InterviewType

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[\w.+-]+=[\w.+-]+)*;base64,(?P<data>.*)$", re.DOTALL)


# --- Question generation ---

class GenerateQuestionsInput(BaseModel):
    user_name: str
    resume_text: str = Field(min_length=1)
    job_role: str
    experience: str
    interview_type: InterviewType


class GeneratedQuestion(BaseModel):
    question: str
    category: str = ""
    expected_keywords: List[str] = []


# --- Speech to text ---

class AudioDataUri(BaseModel):
    """A ``data:<mime>;base64,<payload>`` blob"""

    mime_type: str
    data: bytes

    @classmethod
    def parse(cls, uri: str) -> "AudioDataUri":
        match = DATA_URI_PATTERN.match(uri or "")
        if not match:
            raise ValueError("Audio must be a base64 data URI with a MIME type")
        try:
            payload = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Audio payload is not valid base64: {e}")
        if not payload:
            raise ValueError("Audio payload is empty")
        return cls(mime_type=match.group("mime"), data=payload)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> str:
        encoded = base64.b64encode(data).decode("utf-8")
        return f"data:{mime_type};base64,{encoded}"


class SpeechToTextOutput(BaseModel):
    transcript: Optional[str] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _never_empty(self):
        if self.transcript is None and self.error is None:
            self.error = "Speech-to-text failed."
        return self


# --- Answer evaluation ---

class EvaluateAnswerInput(BaseModel):
    question: str
    expected_keywords: str
    answer_transcript: str


class RawEvaluation(BaseModel):
    relevance_score: Optional[float] = None
    fluency_score: Optional[float] = None
    confidence_score: Optional[float] = None
    total_score: Optional[float] = None
    feedback: Optional[str] = None


# --- Performance report ---

class InterviewSummaryRow(BaseModel):
    question: str
    user_answer: str
    relevance_score: float
    fluency_score: float
    confidence_score: float
    total_score: float
    feedback: str


class PerformanceReportInput(BaseModel):
    user_name: str
    job_role: str
    experience: str
    interview_summary: List[InterviewSummaryRow]


class PerformanceReportOutput(BaseModel):
    report: Optional[str] = None
