from interview_ace.models.interview import InterviewSession


def generate_report_text(session: InterviewSession, report: str) -> str:
    details = session.user_details
    lines = [
        "Interview Performance Report",
        "",
        f"Candidate: {details.name}",
        f"Job Role: {details.job_role}",
        f"Experience: {details.experience}",
        "",
        "Summary Report",
        "-" * 40,
        report,
        "",
        "Detailed Breakdown",
        "-" * 40,
    ]
    for result in session.results:
        evaluation = result.evaluation
        lines += [
            f"Question {result.question_index + 1}: {result.question.question}",
            f"Your Answer: \"{result.user_answer}\"",
            f"Feedback: {evaluation.feedback}",
            f"Relevance: {evaluation.relevance_score:.1f} | Fluency: {evaluation.fluency_score:.1f} | "
            f"Confidence: {evaluation.confidence_score:.1f} | Total: {evaluation.total_score:.1f}",
            "",
        ]
    return "\n".join(lines).rstrip() + "\n"
