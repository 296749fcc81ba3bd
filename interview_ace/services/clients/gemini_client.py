import asyncio
import logging
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors, types
from pydantic import TypeAdapter, ValidationError

from interview_ace.core.config import settings
from interview_ace.core.errors import OracleRequestError, OracleSchemaError
from interview_ace.models.flows import AudioDataUri
from interview_ace.services.base.llm_client import LLMClientBase

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a professional interviewer and interview coach running a mock interview. "
    "Stay strictly within the requested output format and never add commentary outside it."
)

# google-genai lets the httpx transport errors through unwrapped
TRANSPORT_ERRORS = (httpx.HTTPError, asyncio.TimeoutError)


class GeminiClient(LLMClientBase):
    def __init__(self, model: Optional[str] = None, temperature: float = 0.4):
        self.model = model or settings.GEMINI_MODEL
        self.temperature = temperature
        self.client = genai.Client(api_key=settings.GEMINI_API_KEY)

    async def _generate(self, call: str, contents: Any, config: types.GenerateContentConfig):
        try:
            return await self.client.aio.models.generate_content(model=self.model, contents=contents, config=config)
        except errors.APIError as e:
            logger.error(f"❌ [GEMINI] {call} call failed ({e.code}): {e}")
            raise OracleRequestError(str(e), code=e.code)
        except TRANSPORT_ERRORS as e:
            logger.error(f"🔌 [GEMINI] {call} call could not reach the API: {type(e).__name__}: {e}")
            raise OracleRequestError(f"Could not reach the AI service ({type(e).__name__}). Please try again.")

    async def generate_structured(self, prompt: str, schema: Any, temperature: Optional[float] = None) -> Any:
        response = await self._generate(
            "Structured",
            prompt,
            types.GenerateContentConfig(
                system_instruction=SYSTEM_INSTRUCTION,
                temperature=self.temperature if temperature is None else temperature,
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )

        text = (response.text or "").strip()
        if not text:
            logger.warning("⚠️ [GEMINI] Empty structured response")
            return None

        try:
            return TypeAdapter(schema).validate_json(text)
        except ValidationError as e:
            problems = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            logger.error(f"❌ [GEMINI] Response did not match schema: {problems}")
            raise OracleSchemaError("The AI returned data in an unexpected format.", problems=problems)

    async def transcribe(self, prompt: str, audio: AudioDataUri) -> str:
        response = await self._generate(
            "Transcription",
            [
                types.Part.from_text(text=prompt),
                types.Part.from_bytes(data=audio.data, mime_type=audio.mime_type),
            ],
            types.GenerateContentConfig(temperature=0.0),
        )
        return (response.text or "").strip()
