import os
import logging
from typing import Callable, Dict, List

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

SESSION_STORES = ("memory", "mongo")
NO_AUDIO_POLICIES = ("retry", "skip")

REQUIRED_VARS = {
    "GEMINI_API_KEY": "Gemini AI API key for questions, transcription, scoring and reports",
}
MONGO_VARS = {
    "MONGO_URI": "MongoDB connection string for session storage",
}

VALIDATORS: Dict[str, Callable[[str], bool]] = {
    "GEMINI_API_KEY": lambda v: v.startswith("AIza") and len(v) > 20,
    "MONGO_URI": lambda v: v.startswith(("mongodb://", "mongodb+srv://")),
    "SESSION_STORE": lambda v: v.lower() in SESSION_STORES,
    "NO_AUDIO_POLICY": lambda v: v.lower() in NO_AUDIO_POLICIES,
    "QUESTION_TIMER_SECONDS": lambda v: v.isdigit() and int(v) > 0,
    "BACKGROUND_EVALUATION": lambda v: v.lower() in ("true", "false"),
}


class Settings:
    """Environment-backed settings. Fails fast at import when something is missing or malformed."""

    def __init__(self):
        self._check_environment()
        self._load()

    def _check_environment(self):
        required = dict(REQUIRED_VARS)
        if os.getenv("SESSION_STORE", "memory").lower() == "mongo":
            required.update(MONGO_VARS)

        missing: List[str] = [
            f"  - {name}: {description}" for name, description in required.items() if not os.getenv(name)
        ]
        invalid: List[str] = [
            f"  - {name}: Invalid value '{self._masked(name)}'"
            for name, check in VALIDATORS.items()
            if os.getenv(name) and not check(os.getenv(name))
        ]

        if not missing and not invalid:
            logger.info("✅ Environment validated")
            return

        sections = ["🚨 CONFIGURATION ERROR - Interview Ace cannot start:"]
        if missing:
            sections.append("❌ Missing environment variables:\n" + "\n".join(missing))
        if invalid:
            sections.append("❌ Malformed environment variables:\n" + "\n".join(invalid))
        sections.append("💡 Set them in the environment or in a .env file next to the app.")
        error_msg = "\n\n".join(sections)

        logger.critical(error_msg)
        raise ValueError(error_msg)

    @staticmethod
    def _masked(name: str) -> str:
        value = os.getenv(name, "")
        if name == "GEMINI_API_KEY":
            return value[:4] + "..."
        return value

    def _load(self):
        # Gemini
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY")
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

        # Session storage
        self.SESSION_STORE: str = os.getenv("SESSION_STORE", "memory").lower()
        self.MONGO_URI: str = os.getenv("MONGO_URI", "")
        self.MONGO_DATABASE: str = os.getenv("MONGO_DATABASE", "interview_ace")
        self.SESSION_COOKIE_NAME: str = "interview_ace_client"

        # Interview loop
        self.QUESTION_TIMER_SECONDS: int = int(os.getenv("QUESTION_TIMER_SECONDS", "30"))
        self.BACKGROUND_EVALUATION: bool = os.getenv("BACKGROUND_EVALUATION", "true").lower() == "true"
        self.NO_AUDIO_POLICY: str = os.getenv("NO_AUDIO_POLICY", "retry").lower()

        # Generated question bounds; the introduction is added on top
        self.MIN_GENERATED_QUESTIONS: int = 8
        self.MAX_GENERATED_QUESTIONS: int = 12

        # CORS
        self.CORS_ORIGINS: list = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
            if origin.strip()
        ]


settings = Settings()
