import logging

from fastapi import APIRouter, Depends, Response

from interview_ace.core.dependencies import get_current_session, get_results_service
from interview_ace.models.interview import InterviewSession
from interview_ace.services.results_service import ResultsService, ResultsView
from interview_ace.services.utils.create_pdf import generate_report_pdf, report_filename
from interview_ace.services.utils.export_text import generate_report_text

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=ResultsView)
async def get_results(
    session: InterviewSession = Depends(get_current_session),
    results_service: ResultsService = Depends(get_results_service),
):
    """Results and a freshly requested report. Reading never changes the stored results."""
    logger.info(f"📊 [RESULTS] Building results for {session.session_id} ({len(session.results)} answers)")
    return await results_service.build_view(session)


@router.get("/report.txt")
async def download_text_report(
    session: InterviewSession = Depends(get_current_session),
    results_service: ResultsService = Depends(get_results_service),
):
    report, _ = await results_service.build_report(session)
    return Response(
        content=generate_report_text(session, report),
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{report_filename(session, "txt")}"'},
    )


@router.get("/report.pdf")
async def download_pdf_report(
    session: InterviewSession = Depends(get_current_session),
    results_service: ResultsService = Depends(get_results_service),
):
    report, _ = await results_service.build_report(session)
    return Response(
        content=generate_report_pdf(session, report),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report_filename(session, "pdf")}"'},
    )
