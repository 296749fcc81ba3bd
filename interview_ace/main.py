from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from contextlib import asynccontextmanager
from interview_ace.api import intake, navigation, results, session
from interview_ace.core.config import settings
from interview_ace.core.errors import IntakeValidationError, InterviewAceError
from interview_ace.services.session_service import active_sessions

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("🚀 Starting Interview Ace...")
    logger.info(f"⚙️ Model: {settings.GEMINI_MODEL} | Session store: {settings.SESSION_STORE} | "
                f"Timer: {settings.QUESTION_TIMER_SECONDS}s | No-audio policy: {settings.NO_AUDIO_POLICY}")

    yield

    # Shutdown
    logger.info("🛑 Shutting down Interview Ace...")
    for live in list(active_sessions.values()):
        await live.close()
    active_sessions.clear()


app = FastAPI(title="Interview Ace", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InterviewAceError)
async def interview_error_handler(request: Request, exc: InterviewAceError):
    logger.warning(f"⚠️ [{exc.kind.upper()}] {request.url.path}: {exc.message}")
    content = {"error": exc.kind, "detail": exc.message}
    if isinstance(exc, IntakeValidationError):
        content["fields"] = exc.field_errors
    return JSONResponse(status_code=exc.status_code, content=content)


app.include_router(intake.router, tags=["Intake"])
app.include_router(session.router, prefix="/interview", tags=["Interview"])
app.include_router(results.router, prefix="/results", tags=["Results"])
app.include_router(navigation.router, prefix="/navigation", tags=["Navigation"])


@app.get("/")
async def root():
    return {"message": "Interview Ace API"}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "interview_ace", "active_interviews": len(active_sessions)}
