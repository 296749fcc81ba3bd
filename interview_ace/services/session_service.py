import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, Set

from interview_ace.core.errors import (
    EvaluationError,
    InterviewAceError,
    MediaPermissionError,
    RateLimitError,
    RecordingError,
)
from interview_ace.models.interview import InterviewResult, InterviewSession
from interview_ace.models.session import (
    InterviewConfig,
    InterviewState,
    InterviewStatus,
    NoAudioPolicy,
    SessionMessage,
)
from interview_ace.services.evaluation_pipeline import EvaluationPipeline
from interview_ace.services.recorder import AudioRecorder
from interview_ace.services.session_repository import SessionRepository

logger = logging.getLogger(__name__)

Emitter = Callable[[SessionMessage], Awaitable[None]]

MEDIA_REQUIRED_MESSAGE = "Camera and microphone access is required. Please enable it in your browser settings."
NO_AUDIO_MESSAGE = "No audio was recorded for this question."
NOT_SAVED_MESSAGE = "This answer could not be saved because the interview session changed."


def _idle_message(state: InterviewState, session: InterviewSession, media_ready: bool) -> SessionMessage:
    return SessionMessage(
        type="state",
        status=state.status.value,
        question_index=state.question_index,
        question=session.questions[state.question_index].question,
        can_answer=media_ready,
        label="Answer Now",
    )


def _listening_message(state: InterviewState, session: InterviewSession, media_ready: bool) -> SessionMessage:
    return SessionMessage(
        type="state",
        status=state.status.value,
        question_index=state.question_index,
        question=session.questions[state.question_index].question,
        time_left=state.time_left,
        can_answer=False,
        label="I'm Done",
    )


def _processing_message(state: InterviewState, session: InterviewSession, media_ready: bool) -> SessionMessage:
    return SessionMessage(
        type="state",
        status=state.status.value,
        question_index=state.question_index,
        question=session.questions[state.question_index].question,
        can_answer=False,
        label="Processing...",
    )


def _finished_message(state: InterviewState, session: InterviewSession, media_ready: bool) -> SessionMessage:
    return SessionMessage(type="state", status=state.status.value, can_answer=False, label="Finishing up...")


STATE_RENDERERS = {
    InterviewStatus.IDLE: _idle_message,
    InterviewStatus.LISTENING: _listening_message,
    InterviewStatus.PROCESSING: _processing_message,
    InterviewStatus.FINISHED: _finished_message,
}

def describe_state(state: InterviewState, session: InterviewSession, media_ready: bool = True) -> SessionMessage:
    """Single place that turns a state into what the client renders"""
    return STATE_RENDERERS[state.status](state, session, media_ready)


class EvaluationHandle:
    """One in-flight transcription+evaluation for a question index"""

    def __init__(self, question_index: int, session_id: str):
        self.question_index = question_index
        self.session_id = session_id
        self.task: Optional[asyncio.Task] = None
        self.detached = False
        self.discarded = False

    def detach(self) -> None:
        """The UI is gone; the result may still be stored but nothing is emitted"""
        self.detached = True

    def discard(self) -> None:
        """The session is gone; the result is dropped entirely"""
        self.detached = True
        self.discarded = True


class InterviewSessionService:
    """Drives one connected interview page through questions, recording and evaluation"""

    def __init__(
        self,
        client_key: str,
        repository: SessionRepository,
        pipeline: EvaluationPipeline,
        emit: Emitter,
        config: Optional[InterviewConfig] = None,
        tick_seconds: float = 1.0,
    ):
        self.client_key = client_key
        self.repository = repository
        self.pipeline = pipeline
        self._emit_fn = emit
        self.config = config or InterviewConfig()
        self.tick_seconds = tick_seconds

        self.session: Optional[InterviewSession] = None
        self.state: Optional[InterviewState] = None
        self.media_ready = False
        self.recorder = AudioRecorder(self.config.audio_mime_type)
        self.in_flight: Dict[int, EvaluationHandle] = {}
        self.skipped: Set[int] = set()
        self._countdown_task: Optional[asyncio.Task] = None
        self._closed = False

    # --- lifecycle ---

    async def open(self) -> bool:
        """Load the stored session and enter the first unanswered question"""
        self.session = self.repository.get(self.client_key)
        if self.session is None:
            logger.info(f"🔀 [SESSION] No session for {self.client_key}, redirecting to intake")
            await self._emit(SessionMessage(type="navigate", to="intake"))
            return False
        if self.session.is_complete:
            logger.info(f"🔀 [SESSION] Session {self.session.session_id} already complete")
            await self._emit(SessionMessage(type="navigate", to="results"))
            return False

        logger.info(f"🎭 [SESSION] Opened session {self.session.session_id} for {self.client_key}")
        await self._advance()
        return True

    async def close(self, discard: bool = False) -> None:
        """Stop capture and let go of the UI. In-flight calls are not cancelled."""
        if self._closed:
            return
        self._closed = True
        self._cancel_countdown()
        self.recorder.stop()
        for handle in self.in_flight.values():
            if discard:
                handle.discard()
            else:
                handle.detach()
        logger.info(
            f"🧹 [SESSION] Closed {self.client_key} "
            f"({len(self.in_flight)} evaluation(s) still running, discard={discard})"
        )

    @property
    def closed(self) -> bool:
        return self._closed

    # --- client events ---

    async def mark_media_ready(self) -> None:
        self.media_ready = True
        logger.info(f"📷 [MEDIA] Capture ready for {self.client_key}")
        await self._emit_state()

    async def mark_media_failed(self, reason: Optional[str] = None) -> None:
        self.media_ready = False
        logger.warning(f"📷 [MEDIA] Capture unavailable for {self.client_key}: {reason}")
        raise MediaPermissionError(MEDIA_REQUIRED_MESSAGE)

    async def start_recording(self, mime_type: Optional[str] = None) -> bool:
        if self.state is None or self.state.status != InterviewStatus.IDLE:
            logger.info(f"⏸️ [SESSION] Ignoring start while {self.state.status.value if self.state else 'closed'}")
            return False
        if not self.media_ready:
            raise MediaPermissionError(MEDIA_REQUIRED_MESSAGE)

        index = self.state.question_index
        if index in self.in_flight:
            raise RecordingError(f"Question {index + 1} is still being evaluated.")

        self.recorder.start(mime_type)
        self.state = InterviewState.listening(index, self.config.question_timer_seconds)
        logger.info(f"🎙️ [SESSION] Listening on question {index + 1}")
        await self._emit_state()
        self._countdown_task = asyncio.create_task(self._run_countdown(index))
        return True

    def add_audio_chunk(self, chunk_b64: str) -> None:
        if self.state is not None and self.state.status == InterviewStatus.LISTENING:
            self.recorder.append(chunk_b64)

    async def stop_recording(self) -> bool:
        """Countdown expiry or the user's stop: hand the clip to evaluation"""
        if self.state is None or self.state.status != InterviewStatus.LISTENING:
            return False

        index = self.state.question_index
        self.state = InterviewState.processing(index)
        if asyncio.current_task() is not self._countdown_task:
            self._cancel_countdown()
        audio = self.recorder.stop()
        await self._emit_state()

        if audio is None:
            await self._handle_no_audio(index)
            return True

        self._dispatch(index, audio)
        if self.config.background_evaluation:
            await self._advance()
        return True

    async def end_interview(self) -> None:
        has_progress = bool(self.session and (self.session.results or self.in_flight))
        if has_progress:
            await self._emit(SessionMessage(type="navigate", to="results"))
            await self.close()
        else:
            self.repository.delete(self.client_key)
            await self._emit(SessionMessage(type="navigate", to="intake"))
            await self.close(discard=True)

    # --- internals ---

    def next_unresolved(self) -> Optional[int]:
        """Lowest question index with no result, no running evaluation and no skip"""
        taken = self.session.answered_indices() | set(self.in_flight) | self.skipped
        for index in range(len(self.session.questions)):
            if index not in taken:
                return index
        return None

    async def _advance(self) -> None:
        next_index = self.next_unresolved()
        if next_index is None:
            self.state = InterviewState.finished()
            logger.info(f"🏁 [SESSION] All questions dispatched for {self.session.session_id}")
            await self._emit_state()
            await self._emit(SessionMessage(type="navigate", to="results"))
            return
        self.state = InterviewState.idle(next_index)
        await self._emit_state()

    async def _handle_no_audio(self, index: int) -> None:
        if self.config.no_audio_policy == NoAudioPolicy.SKIP:
            await self._notify("warning", "No Audio", f"{NO_AUDIO_MESSAGE} Moving to the next question.")
            self.skipped.add(index)
            await self._advance()
        else:
            await self._notify("warning", "No Audio", f"{NO_AUDIO_MESSAGE} Please try again.")
            self.state = InterviewState.idle(index)
            await self._emit_state()

    def _dispatch(self, index: int, audio: str) -> EvaluationHandle:
        handle = EvaluationHandle(index, self.session.session_id)
        self.in_flight[index] = handle
        handle.task = asyncio.create_task(self._run_evaluation(handle, audio))
        logger.info(f"🚀 [EVAL] Dispatched evaluation for question {index + 1}")
        return handle

    async def _run_evaluation(self, handle: EvaluationHandle, audio: str) -> None:
        index = handle.question_index
        question = self.session.questions[index]
        error: Optional[InterviewAceError] = None
        try:
            transcript, evaluation = await self.pipeline.run(audio, question)
        except InterviewAceError as e:
            error = e
        except Exception as e:
            logger.exception(f"💥 [EVAL] Unexpected failure evaluating question {index + 1}")
            error = EvaluationError(f"Could not evaluate the answer. {type(e).__name__}: {e}")
        finally:
            self._release(handle)

        if error is not None:
            logger.error(f"❌ [EVAL] Evaluation failed for question {index + 1}: {error.message}")
            if handle.detached:
                return
            title = "Rate Limited" if isinstance(error, RateLimitError) else f"Evaluation Error Q{index + 1}"
            await self._notify("error", title, error.message)
            await self._return_to_retry()
            return

        if handle.discarded:
            logger.info(f"🗑️ [EVAL] Dropping result for question {index + 1}, session was torn down")
            return

        result = InterviewResult(
            question_index=index, question=question, user_answer=transcript, evaluation=evaluation
        )
        stored = self._persist(handle, result)
        if handle.detached:
            return

        if stored:
            await self._emit(SessionMessage(type="result", question_index=index, result=result.model_dump(mode="json")))
        else:
            await self._notify("warning", f"Answer Not Saved Q{index + 1}", NOT_SAVED_MESSAGE)
        if not self.config.background_evaluation and self.state.status == InterviewStatus.PROCESSING:
            await self._advance()

    def _release(self, handle: EvaluationHandle) -> None:
        if self.in_flight.get(handle.question_index) is handle:
            del self.in_flight[handle.question_index]

    def _persist(self, handle: EvaluationHandle, result: InterviewResult) -> bool:
        """Read-modify-write of the stored session, guarded by session id"""
        stored = self.repository.get(self.client_key)
        if stored is None or stored.session_id != handle.session_id:
            logger.warning(f"🗑️ [EVAL] Session {handle.session_id} no longer stored, dropping result")
            return False
        try:
            updated = stored.with_result(result)
        except ValueError as e:
            logger.warning(f"⚠️ [EVAL] Not storing result: {e}")
            return False
        self.repository.put(self.client_key, updated)
        self.session = updated
        logger.info(f"✅ [EVAL] Stored result for question {result.question_index + 1}")
        return True

    async def _return_to_retry(self) -> None:
        """After a failed evaluation, send the user back to the earliest open question"""
        status = self.state.status
        if status in (InterviewStatus.IDLE, InterviewStatus.PROCESSING):
            await self._advance()
        elif status == InterviewStatus.FINISHED:
            logger.warning("⚠️ [EVAL] Evaluation failed after the interview finished; results stay partial")
        # listening: the next _advance after this recording picks the failed question up

    async def _run_countdown(self, index: int) -> None:
        time_left = self.config.question_timer_seconds
        while time_left > 0:
            await asyncio.sleep(self.tick_seconds)
            if self.state.status != InterviewStatus.LISTENING or self.state.question_index != index:
                return
            time_left -= 1
            self.state = InterviewState.listening(index, time_left)
            await self._emit(SessionMessage(type="countdown", question_index=index, time_left=time_left))
        logger.info(f"⏰ [SESSION] Time is up on question {index + 1}")
        await self.stop_recording()

    def _cancel_countdown(self) -> None:
        if self._countdown_task and not self._countdown_task.done():
            self._countdown_task.cancel()
        self._countdown_task = None

    async def _notify(self, level: str, title: str, text: str, blocking: bool = False) -> None:
        await self._emit(SessionMessage(type="notification", level=level, title=title, text=text, blocking=blocking))

    async def _emit_state(self) -> None:
        await self._emit(describe_state(self.state, self.session, self.media_ready))

    async def _emit(self, message: SessionMessage) -> None:
        if self._closed:
            return
        try:
            await self._emit_fn(message)
        except Exception as e:
            logger.info(f"🔌 [SESSION] Could not deliver {message.type} to {self.client_key}: {e}")
            await self.close()


# Live interview pages, one per client key
active_sessions: Dict[str, InterviewSessionService] = {}
