import base64
import binascii
import logging
from typing import List, Optional

from interview_ace.core.errors import RecordingError
from interview_ace.models.flows import AudioDataUri

logger = logging.getLogger(__name__)


def base_mime_type(mime_type: str) -> str:
    """Drop codec parameters: 'audio/ogg; codecs=opus' becomes 'audio/ogg'"""
    return mime_type.split(";", 1)[0].strip().lower()


class AudioRecorder:
    """Collects the audio chunks streamed by the browser for one answer"""

    def __init__(self, mime_type: str = "audio/webm;codecs=opus"):
        self.mime_type = base_mime_type(mime_type)
        self.chunks: List[bytes] = []
        self.recording = False

    def start(self, mime_type: Optional[str] = None) -> None:
        if self.recording:
            raise RecordingError("A recording is already in progress.")
        if mime_type:
            base = base_mime_type(mime_type)
            if not base.startswith(("audio/", "video/")):
                raise RecordingError(f"Could not start recording. Unsupported capture format '{mime_type}'.")
            self.mime_type = base
        self.chunks = []
        self.recording = True

    def append(self, chunk_b64: str) -> None:
        if not self.recording:
            logger.warning("⚠️ [RECORDER] Dropping audio chunk received while not recording")
            return
        try:
            chunk = base64.b64decode(chunk_b64 or "", validate=True)
        except (binascii.Error, ValueError):
            raise RecordingError("Received an audio chunk that is not valid base64.")
        if chunk:
            self.chunks.append(chunk)

    def stop(self) -> Optional[str]:
        """Close the recording; the captured clip as a data URI, or None if nothing was captured"""
        self.recording = False
        chunks, self.chunks = self.chunks, []
        if not chunks:
            return None
        return AudioDataUri.from_bytes(b"".join(chunks), self.mime_type)
