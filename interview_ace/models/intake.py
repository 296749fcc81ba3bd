from typing import List, Optional
from pydantic import BaseModel

from interview_ace.models.interview import InterviewType


class IntakeForm(BaseModel):
    name: str
    job_role: str
    experience: str
    interview_type: InterviewType = InterviewType.TECHNICAL


class InterviewerPersona(BaseModel):
    name: str
    title: str
    avatar: str


class InstructionStep(BaseModel):
    title: str
    description: str


class InstructionsResponse(BaseModel):
    title: str
    description: str
    steps: List[InstructionStep]


class SessionView(BaseModel):
    session_id: str
    name: str
    job_role: str
    interview_type: str
    interviewer: InterviewerPersona
    total_questions: int
    answered: int
    next_question_index: Optional[int] = None
    progress: float
