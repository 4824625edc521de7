from typing import Any, Union

from pydantic import BaseModel, Field

RespondentIdField = Union[str, int]


class RespondentIn(BaseModel):
    id: RespondentIdField
    answers: list[Any] = Field(default_factory=list)


class MatchRunRequest(BaseModel):
    respondents: list[RespondentIn] = Field(default_factory=list)
    scorer: str | None = None
    weights: list[float] | None = None
    include_report: bool = False


class ScorePairRequest(BaseModel):
    left: RespondentIn
    right: RespondentIn
    scorer: str | None = None
    weights: list[float] | None = None


class MatchAssignmentOut(BaseModel):
    left_id: RespondentIdField
    right_id: RespondentIdField
    total_diff: int
    per_question_diff: list[int]
    score: Union[int, float]


class MatchRunResponse(BaseModel):
    scorer: str
    assignments: list[MatchAssignmentOut]
    unmatched: list[RespondentIdField]
    report: dict[str, Any] | None = None


class AnswerInput(BaseModel):
    question_id: Union[int, str]
    value: Any


class VectorRequest(BaseModel):
    respondent_id: RespondentIdField
    answers: list[AnswerInput] = Field(default_factory=list)


class VectorResponse(BaseModel):
    id: RespondentIdField
    answers: list[int]
