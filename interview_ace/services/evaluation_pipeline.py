import logging
from typing import Tuple

from interview_ace.core.errors import RateLimitError, TranscriptionError
from interview_ace.models.flows import EvaluateAnswerInput
from interview_ace.models.interview import Evaluation, InterviewQuestion
from interview_ace.services.answer_evaluator import AnswerEvaluator
from interview_ace.services.speech_to_text import SpeechTranscriber, is_rate_limited

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "You have exceeded the API rate limit. Please wait a moment before trying again."


class EvaluationPipeline:
    """Transcribe, then score. Transcription always finishes before scoring starts."""

    def __init__(self, transcriber: SpeechTranscriber, evaluator: AnswerEvaluator):
        self.transcriber = transcriber
        self.evaluator = evaluator

    async def transcribe(self, audio_data_uri: str) -> str:
        stt_result = await self.transcriber.transcribe(audio_data_uri)
        if stt_result.error or not (stt_result.transcript or "").strip():
            error_message = stt_result.error or "Speech-to-text failed."
            if is_rate_limited(error_message):
                raise RateLimitError(RATE_LIMIT_MESSAGE)
            raise TranscriptionError(error_message)
        return stt_result.transcript.strip()

    async def run(self, audio_data_uri: str, question: InterviewQuestion) -> Tuple[str, Evaluation]:
        transcript = await self.transcribe(audio_data_uri)
        evaluation = await self.evaluator.evaluate(
            EvaluateAnswerInput(
                question=question.question,
                expected_keywords=", ".join(question.expected_keywords),
                answer_transcript=transcript,
            )
        )
        return transcript, evaluation
