from abc import ABC, abstractmethod
from typing import Any, Optional

from interview_ace.models.flows import AudioDataUri


class LLMClientBase(ABC):
    @abstractmethod
    async def generate_structured(self, prompt: str, schema: Any, temperature: Optional[float] = None) -> Any:
        """Ask for output matching ``schema`` (a pydantic model or ``list[Model]``).

        Returns the validated value, or None when the model returned nothing.
        Raises OracleRequestError / OracleSchemaError.
        """
        pass

    @abstractmethod
    async def transcribe(self, prompt: str, audio: AudioDataUri) -> str:
        pass
