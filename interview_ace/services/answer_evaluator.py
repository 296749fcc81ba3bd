import logging
from typing import Optional

from interview_ace.core.errors import EvaluationError, OracleRequestError, OracleSchemaError
from interview_ace.models.flows import EvaluateAnswerInput, RawEvaluation
from interview_ace.models.interview import Evaluation
from interview_ace.services.base.llm_client import LLMClientBase
from interview_ace.services.builders.prompt_builder import render_prompt

logger = logging.getLogger(__name__)

DEFAULT_FEEDBACK = "No feedback provided."
MIN_SCORE = 0.0
MAX_SCORE = 10.0


def _score(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    return max(MIN_SCORE, min(MAX_SCORE, float(value)))


def normalize_evaluation(raw: Optional[RawEvaluation]) -> Evaluation:
    """Fill every gap the model left: scores default to 0, feedback to a placeholder"""
    raw = raw or RawEvaluation()
    feedback = (raw.feedback or "").strip()
    return Evaluation(
        relevance_score=_score(raw.relevance_score),
        fluency_score=_score(raw.fluency_score),
        confidence_score=_score(raw.confidence_score),
        total_score=_score(raw.total_score),
        feedback=feedback or DEFAULT_FEEDBACK,
    )


class AnswerEvaluator:
    def __init__(self, client: LLMClientBase):
        self.client = client

    async def evaluate(self, request: EvaluateAnswerInput) -> Evaluation:
        prompt = render_prompt(
            "evaluate_answer.j2",
            question=request.question,
            expected_keywords=request.expected_keywords,
            answer_transcript=request.answer_transcript,
        )
        try:
            raw = await self.client.generate_structured(prompt, RawEvaluation, temperature=0.2)
        except (OracleRequestError, OracleSchemaError) as e:
            raise EvaluationError(f"Could not evaluate the answer. {e.message}")

        evaluation = normalize_evaluation(raw)
        logger.info(f"📝 [EVAL] Scored answer: total={evaluation.total_score:.1f}")
        return evaluation
