import uuid
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class InterviewType(str, Enum):
    HR = "HR"
    TECHNICAL = "Technical"


class UserDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    job_role: str
    experience: str
    interview_type: InterviewType
    resume_text: str


class InterviewQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    question: str
    category: str
    expected_keywords: List[str] = []


class Evaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    relevance_score: float
    fluency_score: float
    confidence_score: float
    total_score: float
    feedback: str


class InterviewResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_index: int
    question: InterviewQuestion
    user_answer: str
    evaluation: Evaluation


class InterviewSession(BaseModel):
    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_details: UserDetails
    questions: List[InterviewQuestion]
    results: List[InterviewResult] = []

    @property
    def is_complete(self) -> bool:
        return len(self.questions) > 0 and len(self.results) == len(self.questions)

    def answered_indices(self) -> set:
        return {result.question_index for result in self.results}

    def result_for(self, question_index: int) -> Optional[InterviewResult]:
        for result in self.results:
            if result.question_index == question_index:
                return result
        return None

    def with_result(self, result: InterviewResult) -> "InterviewSession":
        """Return a copy holding ``result``, kept ordered by question index.

        Raises ValueError for an index outside the question list or one that
        already has a result.
        """
        if not 0 <= result.question_index < len(self.questions):
            raise ValueError(f"Question index {result.question_index} is out of range")
        if result.question_index in self.answered_indices():
            raise ValueError(f"Question {result.question_index} already has a result")

        results = sorted([*self.results, result], key=lambda r: r.question_index)
        return self.model_copy(update={"results": results})

    def average_score(self) -> float:
        if not self.results:
            return 0.0
        return sum(r.evaluation.total_score for r in self.results) / len(self.results)
