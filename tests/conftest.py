import asyncio
import base64
import os
from io import BytesIO
from typing import Dict, List, Optional

import pytest

os.environ["GEMINI_API_KEY"] = "AIzaTestKeyForPytestOnly000"
os.environ["SESSION_STORE"] = "memory"
os.environ.pop("MONGO_URI", None)

from interview_ace.core.errors import OracleRequestError  # noqa: E402
from interview_ace.models.flows import (  # noqa: E402
    AudioDataUri,
    GeneratedQuestion,
    PerformanceReportOutput,
    RawEvaluation,
)
from interview_ace.models.interview import (  # noqa: E402
    Evaluation,
    InterviewQuestion,
    InterviewResult,
    InterviewSession,
    InterviewType,
    UserDetails,
)
from interview_ace.services.answer_evaluator import AnswerEvaluator  # noqa: E402
from interview_ace.services.base.llm_client import LLMClientBase  # noqa: E402
from interview_ace.services.evaluation_pipeline import EvaluationPipeline  # noqa: E402
from interview_ace.services.session_repository import InMemorySessionRepository  # noqa: E402
from interview_ace.services.speech_to_text import SpeechTranscriber  # noqa: E402


def generated_questions(count: int) -> List[GeneratedQuestion]:
    return [
        GeneratedQuestion(
            question=f"Technical question {i + 1}?",
            category="technical",
            expected_keywords=[f"kw{i + 1}a", f"kw{i + 1}b"],
        )
        for i in range(count)
    ]


class FakeLLMClient(LLMClientBase):
    """Scripted stand-in for the model. Audio bytes are echoed back as the transcript."""

    def __init__(
        self,
        questions: Optional[List[GeneratedQuestion]] = None,
        evaluation: Optional[RawEvaluation] = None,
        report: Optional[str] = "Mock Interview Report\n\nAverage Score: 7.0 / 10",
        transcribe_errors: Optional[Dict[str, Exception]] = None,
        structured_error: Optional[Exception] = None,
    ):
        self.questions = generated_questions(8) if questions is None else questions
        self.evaluation = evaluation or RawEvaluation(
            relevance_score=8, fluency_score=7, confidence_score=6, total_score=7, feedback="Solid answer."
        )
        self.report = report
        self.transcribe_errors = transcribe_errors or {}
        self.structured_error = structured_error
        self.gates: Dict[str, asyncio.Event] = {}
        self.prompts: List[str] = []
        self.transcribed: List[str] = []

    async def generate_structured(self, prompt, schema, temperature=None):
        self.prompts.append(prompt)
        if self.structured_error is not None:
            raise self.structured_error
        if schema == list[GeneratedQuestion]:
            return self.questions
        if schema is RawEvaluation:
            return self.evaluation
        if schema is PerformanceReportOutput:
            return None if self.report is None else PerformanceReportOutput(report=self.report)
        raise AssertionError(f"unexpected schema {schema}")

    async def transcribe(self, prompt: str, audio: AudioDataUri) -> str:
        spoken = audio.data.decode("utf-8")
        if spoken in self.gates:
            await self.gates[spoken].wait()
        if spoken in self.transcribe_errors:
            raise self.transcribe_errors[spoken]
        self.transcribed.append(spoken)
        return spoken


def audio_chunk(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("utf-8")


def make_session(question_count: int = 3, name: str = "Asha") -> InterviewSession:
    return InterviewSession(
        user_details=UserDetails(
            name=name,
            job_role="Backend Engineer",
            experience="2-5 years",
            interview_type=InterviewType.TECHNICAL,
            resume_text="Built payment APIs in Python and Go.",
        ),
        questions=[
            InterviewQuestion(question=f"Question {i + 1}?", category="technical", expected_keywords=["api", "scale"])
            for i in range(question_count)
        ],
    )


def make_result(session: InterviewSession, index: int, total: float = 7.0) -> InterviewResult:
    return InterviewResult(
        question_index=index,
        question=session.questions[index],
        user_answer=f"answer {index + 1}",
        evaluation=Evaluation(
            relevance_score=total, fluency_score=total, confidence_score=total, total_score=total, feedback="ok"
        ),
    )


def make_resume_pdf(text: str = "Asha - Backend Engineer. Python, Go, PostgreSQL, Kafka.") -> bytes:
    from reportlab.pdfgen import canvas

    buffer = BytesIO()
    pdf = canvas.Canvas(buffer)
    pdf.drawString(72, 720, text)
    pdf.save()
    return buffer.getvalue()


def rate_limit_error() -> OracleRequestError:
    return OracleRequestError("429 RESOURCE_EXHAUSTED. Quota exceeded for requests per minute.", code=429)


@pytest.fixture
def fake_client() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def pipeline(fake_client) -> EvaluationPipeline:
    return EvaluationPipeline(SpeechTranscriber(fake_client), AnswerEvaluator(fake_client))
