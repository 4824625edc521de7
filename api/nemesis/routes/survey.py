from typing import Any

from fastapi import APIRouter

from ..schemas import VectorRequest, VectorResponse
from ..survey_loader import answers_to_vector, get_questionnaire, ordered_question_ids

router = APIRouter()


@router.get("/questionnaire")
def get_active_questionnaire() -> dict[str, Any]:
    survey = get_questionnaire()
    return {**survey, "question_order": ordered_question_ids(survey)}


@router.post("/questionnaire/vector", response_model=VectorResponse)
def build_answer_vector(payload: VectorRequest) -> dict[str, Any]:
    answers = [a.model_dump() for a in payload.answers]
    return {"id": payload.respondent_id, "answers": answers_to_vector(answers)}
