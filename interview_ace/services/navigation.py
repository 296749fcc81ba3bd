from enum import Enum
from typing import Optional

from interview_ace.models.interview import InterviewSession


class Page(str, Enum):
    INTAKE = "intake"
    INSTRUCTIONS = "instructions"
    INTERVIEW = "interview"
    RESULTS = "results"


def resolve_page(requested: Page, session: Optional[InterviewSession]) -> Page:
    """Where a request for ``requested`` actually lands, given the stored session"""
    if requested == Page.INTAKE:
        return Page.INTAKE
    if session is None:
        return Page.INTAKE
    if requested == Page.INTERVIEW and session.is_complete:
        return Page.RESULTS
    return requested
