import logging

from interview_ace.models.flows import AudioDataUri, SpeechToTextOutput
from interview_ace.services.base.llm_client import LLMClientBase
from interview_ace.services.builders.prompt_builder import render_prompt

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ("429", "RESOURCE_EXHAUSTED")


def is_rate_limited(error: str) -> bool:
    return any(marker in (error or "") for marker in RATE_LIMIT_MARKERS)


class SpeechTranscriber:
    """Audio clip to text. Never raises: failures come back in ``error``."""

    def __init__(self, client: LLMClientBase):
        self.client = client
        self.prompt = render_prompt("speech_to_text.j2").strip()

    async def transcribe(self, audio_data_uri: str) -> SpeechToTextOutput:
        try:
            audio = AudioDataUri.parse(audio_data_uri)
            logger.info(f"🎧 [STT] Transcribing {len(audio.data)} bytes of {audio.mime_type}")
            text = await self.client.transcribe(self.prompt, audio)
            return SpeechToTextOutput(transcript=text)
        except Exception as e:
            logger.error(f"❌ [STT] Speech-to-text failed: {e}")
            message = str(e) or "An unknown error occurred during transcription."
            return SpeechToTextOutput(error=message)
