import logging
from typing import List, Optional

from interview_ace.core.config import settings
from interview_ace.core.errors import GenerationError, OracleRequestError, OracleSchemaError
from interview_ace.models.flows import GenerateQuestionsInput, GeneratedQuestion
from interview_ace.models.interview import InterviewQuestion
from interview_ace.services.base.llm_client import LLMClientBase
from interview_ace.services.builders.prompt_builder import render_prompt

logger = logging.getLogger(__name__)

INTRO_CATEGORY = "Introduction"
INTRO_KEYWORDS = ["introduction", "experience", "background", "summary"]
REQUESTED_MIN_QUESTIONS = 10


def introduction_question(user_name: str) -> InterviewQuestion:
    return InterviewQuestion(
        question=f"Good Morning, Welcome {user_name}, please introduce yourself.",
        category=INTRO_CATEGORY,
        expected_keywords=list(INTRO_KEYWORDS),
    )


class QuestionGenerator:
    def __init__(self, client: LLMClientBase, max_questions: Optional[int] = None):
        self.client = client
        self.max_questions = max_questions or settings.MAX_GENERATED_QUESTIONS

    def _build_prompt(self, request: GenerateQuestionsInput) -> str:
        return render_prompt(
            "generate_questions.j2",
            min_questions=REQUESTED_MIN_QUESTIONS,
            max_questions=self.max_questions,
            resume_text=request.resume_text,
            job_role=request.job_role,
            experience=request.experience,
            interview_type=request.interview_type.value,
        )

    async def generate(self, request: GenerateQuestionsInput) -> List[InterviewQuestion]:
        """Intro question followed by the model's questions"""
        logger.info(f"🧠 [QUESTIONS] Generating {request.interview_type.value} questions for {request.job_role}")

        try:
            generated = await self.client.generate_structured(
                self._build_prompt(request), list[GeneratedQuestion], temperature=0.7
            )
        except (OracleRequestError, OracleSchemaError) as e:
            raise GenerationError(f"The AI failed to generate interview questions. {e.message}")

        questions = [
            InterviewQuestion(
                question=item.question.strip(),
                category=item.category.strip() or "General",
                expected_keywords=[k.strip() for k in item.expected_keywords if k.strip()],
            )
            for item in (generated or [])
            if item.question and item.question.strip()
        ]

        if not questions:
            logger.error("❌ [QUESTIONS] Model returned no usable questions")
            raise GenerationError("The AI failed to generate interview questions. Please try again.")

        if len(questions) < settings.MIN_GENERATED_QUESTIONS:
            logger.warning(f"⚠️ [QUESTIONS] Only {len(questions)} questions generated")

        questions = questions[: self.max_questions]
        logger.info(f"✅ [QUESTIONS] Generated {len(questions)} questions (+1 introduction)")
        return [introduction_question(request.user_name), *questions]
