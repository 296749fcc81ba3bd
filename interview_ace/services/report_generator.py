import logging

from interview_ace.core.errors import OracleRequestError, OracleSchemaError, ReportError
from interview_ace.models.flows import InterviewSummaryRow, PerformanceReportInput, PerformanceReportOutput
from interview_ace.models.interview import InterviewSession
from interview_ace.services.base.llm_client import LLMClientBase
from interview_ace.services.builders.prompt_builder import render_prompt

logger = logging.getLogger(__name__)

EMPTY_REPORT_FALLBACK = "We were unable to generate a report for this session. Please try again."


def build_report_input(session: InterviewSession) -> PerformanceReportInput:
    details = session.user_details
    return PerformanceReportInput(
        user_name=details.name,
        job_role=details.job_role,
        experience=details.experience,
        interview_summary=[
            InterviewSummaryRow(
                question=r.question.question,
                user_answer=r.user_answer,
                relevance_score=r.evaluation.relevance_score,
                fluency_score=r.evaluation.fluency_score,
                confidence_score=r.evaluation.confidence_score,
                total_score=r.evaluation.total_score,
                feedback=r.evaluation.feedback,
            )
            for r in session.results
        ],
    )


class ReportGenerator:
    def __init__(self, client: LLMClientBase):
        self.client = client

    async def generate(self, request: PerformanceReportInput) -> str:
        prompt = render_prompt("performance_report.j2", **request.model_dump())
        logger.info(f"📊 [REPORT] Generating report from {len(request.interview_summary)} answers")

        try:
            output = await self.client.generate_structured(prompt, PerformanceReportOutput, temperature=0.5)
        except (OracleRequestError, OracleSchemaError) as e:
            raise ReportError(f"Could not generate the final report. {e.message}")

        if output is None or not (output.report or "").strip():
            logger.warning("⚠️ [REPORT] Model returned no report, using fallback")
            return EMPTY_REPORT_FALLBACK
        return output.report.strip()
