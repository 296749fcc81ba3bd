from typing import Dict, List, Optional


class InterviewAceError(Exception):
    """Base class for every user-facing failure in the interview flow"""

    kind = "interview_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class IntakeValidationError(InterviewAceError):
    kind = "validation_error"
    status_code = 422

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.field_errors = field_errors or {}


class GenerationError(InterviewAceError):
    kind = "generation_error"
    status_code = 502


class TranscriptionError(InterviewAceError):
    kind = "transcription_error"
    status_code = 502


class RateLimitError(TranscriptionError):
    kind = "rate_limit_error"
    status_code = 429


class EvaluationError(InterviewAceError):
    kind = "evaluation_error"
    status_code = 502


class ReportError(InterviewAceError):
    kind = "report_error"
    status_code = 502


class MediaPermissionError(InterviewAceError):
    kind = "media_permission_error"
    status_code = 403


class RecordingError(InterviewAceError):
    kind = "recording_error"
    status_code = 400


class ResumeExtractionError(IntakeValidationError):
    kind = "resume_error"


class OracleRequestError(InterviewAceError):
    """Transport or API failure talking to the model"""

    kind = "oracle_request_error"
    status_code = 502

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class OracleSchemaError(InterviewAceError):
    """The model answered, but not in the shape we asked for"""

    kind = "oracle_schema_error"
    status_code = 502

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        super().__init__(message)
        self.problems = problems or []
