import logging
from io import BytesIO
from typing import Dict

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from interview_ace.core.errors import IntakeValidationError, ResumeExtractionError
from interview_ace.models.flows import GenerateQuestionsInput
from interview_ace.models.intake import IntakeForm, InterviewerPersona
from interview_ace.models.interview import InterviewSession, InterviewType, UserDetails
from interview_ace.services.question_generator import QuestionGenerator

logger = logging.getLogger(__name__)

PERSONAS = {
    InterviewType.TECHNICAL: InterviewerPersona(name="MGRaj", title="Tech Lead", avatar="/assets/Tech - Lead.png"),
    InterviewType.HR: InterviewerPersona(name="Shruthi", title="HR Lead", avatar="/assets/HR - Lead.png"),
}


def interviewer_for(interview_type: InterviewType) -> InterviewerPersona:
    return PERSONAS[interview_type]


def validate_intake(name: str, job_role: str, experience: str, interview_type: str, resume_filename: str) -> IntakeForm:
    errors: Dict[str, str] = {}
    if len((name or "").strip()) < 2:
        errors["name"] = "Name must be at least 2 characters."
    if len((job_role or "").strip()) < 2:
        errors["job_role"] = "Job role is required."
    if len((experience or "").strip()) < 1:
        errors["experience"] = "Experience level is required."
    if interview_type not in {t.value for t in InterviewType}:
        errors["interview_type"] = "Interview type must be HR or Technical."
    if not resume_filename:
        errors["resume"] = "Resume is required."
    elif not resume_filename.lower().endswith(".pdf"):
        errors["resume"] = "Resume must be a PDF file."

    if errors:
        raise IntakeValidationError("Please correct the highlighted fields.", field_errors=errors)

    return IntakeForm(
        name=name.strip(),
        job_role=job_role.strip(),
        experience=experience.strip(),
        interview_type=InterviewType(interview_type),
    )


def extract_resume_text(pdf_bytes: bytes) -> str:
    try:
        reader = PdfReader(BytesIO(pdf_bytes))
        text = " ".join((page.extract_text() or "") for page in reader.pages)
    except PdfReadError as e:
        logger.error(f"❌ [INTAKE] Could not read resume PDF: {e}")
        raise ResumeExtractionError("The resume could not be read. Please upload a valid PDF.",
                                    field_errors={"resume": "Unreadable PDF."})

    text = " ".join(text.split())
    if not text:
        raise ResumeExtractionError("No text could be extracted from the resume.",
                                    field_errors={"resume": "The PDF contains no extractable text."})
    return text


class IntakeService:
    def __init__(self, question_generator: QuestionGenerator):
        self.question_generator = question_generator

    async def create_session(self, form: IntakeForm, resume_text: str) -> InterviewSession:
        """Generate questions and build the session. Nothing is stored if generation fails."""
        questions = await self.question_generator.generate(
            GenerateQuestionsInput(
                user_name=form.name,
                resume_text=resume_text,
                job_role=form.job_role,
                experience=form.experience,
                interview_type=form.interview_type,
            )
        )
        session = InterviewSession(
            user_details=UserDetails(
                name=form.name,
                job_role=form.job_role,
                experience=form.experience,
                interview_type=form.interview_type,
                resume_text=resume_text,
            ),
            questions=questions,
        )
        logger.info(f"🆕 [INTAKE] Created session {session.session_id} with {len(questions)} questions")
        return session
