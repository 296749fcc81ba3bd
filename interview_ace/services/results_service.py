import logging
from typing import List, Optional
from pydantic import BaseModel

from interview_ace.core.errors import ReportError
from interview_ace.models.interview import InterviewResult, InterviewSession
from interview_ace.services.report_generator import ReportGenerator, build_report_input

logger = logging.getLogger(__name__)

NO_RESULTS_REPORT = "No interview data found to generate a report."
FAILED_REPORT = "Failed to generate report."


def score_band(score: float) -> str:
    if score >= 8:
        return "green"
    if score >= 5:
        return "yellow"
    return "red"


class ResultRow(BaseModel):
    question_index: int
    result: InterviewResult
    band: str


class ResultsView(BaseModel):
    session_id: str
    name: str
    job_role: str
    experience: str
    total_questions: int
    answered: int
    complete: bool
    average_score: float
    average_band: str
    report: str
    report_error: Optional[str] = None
    results: List[ResultRow]


class ResultsService:
    def __init__(self, report_generator: ReportGenerator):
        self.report_generator = report_generator

    async def build_report(self, session: InterviewSession) -> tuple:
        """(report text, error message or None). Never raises; the results view must always render."""
        if not session.results:
            return NO_RESULTS_REPORT, None
        try:
            return await self.report_generator.generate(build_report_input(session)), None
        except ReportError as e:
            logger.error(f"❌ [REPORT] Report generation failed for {session.session_id}: {e.message}")
            return FAILED_REPORT, "Could not generate the final report."
        except Exception:
            logger.exception(f"💥 [REPORT] Unexpected failure generating report for {session.session_id}")
            return FAILED_REPORT, "Could not generate the final report."

    async def build_view(self, session: InterviewSession) -> ResultsView:
        report, report_error = await self.build_report(session)
        average = session.average_score()
        details = session.user_details
        return ResultsView(
            session_id=session.session_id,
            name=details.name,
            job_role=details.job_role,
            experience=details.experience,
            total_questions=len(session.questions),
            answered=len(session.results),
            complete=session.is_complete,
            average_score=round(average, 1),
            average_band=score_band(average),
            report=report,
            report_error=report_error,
            results=[
                ResultRow(question_index=r.question_index, result=r, band=score_band(r.evaluation.total_score))
                for r in session.results
            ],
        )
