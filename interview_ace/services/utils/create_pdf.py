from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import HRFlowable, KeepTogether, Paragraph, SimpleDocTemplate, Spacer

from interview_ace.models.interview import InterviewSession

base_font = "Helvetica"


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="ReportTitle", fontName=f"{base_font}-Bold", fontSize=18, leading=22, alignment=1, spaceAfter=14))
    styles.add(ParagraphStyle(name="SubHeader", fontName=f"{base_font}-Bold", fontSize=13, leading=17, textColor=colors.HexColor("#2471A3"), spaceBefore=10, spaceAfter=6))
    styles.add(ParagraphStyle(name="Body", fontName=base_font, fontSize=11, leading=15, spaceAfter=4))
    styles.add(ParagraphStyle(name="Question", fontName=f"{base_font}-Bold", fontSize=11, leading=15, spaceAfter=3))
    styles.add(ParagraphStyle(name="Answer", fontName=f"{base_font}-Oblique", fontSize=11, leading=15, textColor=colors.HexColor("#444444"), spaceAfter=4))
    styles.add(ParagraphStyle(name="Scores", fontName=base_font, fontSize=9, leading=12, textColor=colors.gray, spaceAfter=6))
    return styles


def _paragraphs(text: str, style) -> list:
    """One Paragraph per line so the report's own line breaks survive"""
    return [Paragraph(escape(line) if line.strip() else "&nbsp;", style) for line in text.splitlines()]


def generate_report_pdf(session: InterviewSession, report: str) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, rightMargin=42, leftMargin=42, topMargin=42, bottomMargin=42,
                            title="Interview Performance Report")
    styles = _styles()
    details = session.user_details

    story = [Paragraph("Interview Performance Report", styles["ReportTitle"])]
    story.append(Paragraph(f"Candidate: {escape(details.name)}", styles["Body"]))
    story.append(Paragraph(f"Job Role: {escape(details.job_role)}", styles["Body"]))
    story.append(Paragraph(f"Experience: {escape(details.experience)}", styles["Body"]))

    story.append(Paragraph("Summary Report", styles["SubHeader"]))
    story.append(HRFlowable(width="100%", thickness=0.5, color=colors.black, spaceAfter=6))
    story.extend(_paragraphs(report, styles["Body"]))

    story.append(Paragraph("Detailed Breakdown", styles["SubHeader"]))
    story.append(HRFlowable(width="100%", thickness=0.5, color=colors.black, spaceAfter=6))

    for position, result in enumerate(session.results):
        evaluation = result.evaluation
        block = [
            Paragraph(f"Question {result.question_index + 1}: {escape(result.question.question)}", styles["Question"]),
            Paragraph(f"Your Answer: \"{escape(result.user_answer)}\"", styles["Answer"]),
            Paragraph("<b>Feedback:</b>", styles["Body"]),
            Paragraph(escape(evaluation.feedback), styles["Body"]),
            Paragraph(
                f"Relevance: {evaluation.relevance_score:.1f} | Fluency: {evaluation.fluency_score:.1f} | "
                f"Confidence: {evaluation.confidence_score:.1f} | Total: {evaluation.total_score:.1f}",
                styles["Scores"],
            ),
        ]
        if position < len(session.results) - 1:
            block.append(HRFlowable(width="100%", thickness=0.2, color=colors.lightgrey, spaceAfter=8))
        story.append(KeepTogether(block))

    story.append(Spacer(1, 12))
    doc.build(story)
    return buffer.getvalue()


def report_filename(session: InterviewSession, extension: str) -> str:
    return f"Interview_Report_{session.user_details.name.strip().replace(' ', '_')}.{extension}"
