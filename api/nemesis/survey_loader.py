import json
from functools import lru_cache
from typing import Any, Mapping, Sequence

from .config import QUESTIONS_PATH, SCALE_MAX, SCALE_MIN
from .services.errors import InvalidInput


@lru_cache(maxsize=1)
def get_questionnaire() -> dict[str, Any]:
    with QUESTIONS_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def get_scale(questionnaire: Mapping[str, Any] | None = None) -> tuple[int, int]:
    survey = questionnaire if questionnaire is not None else get_questionnaire()
    scale = survey.get("scale") or {}
    return int(scale.get("min", SCALE_MIN)), int(scale.get("max", SCALE_MAX))


def ordered_question_ids(questionnaire: Mapping[str, Any] | None = None) -> list[Any]:
    survey = questionnaire if questionnaire is not None else get_questionnaire()
    questions = [q for q in survey.get("questions", []) if isinstance(q, dict) and "id" in q]
    questions.sort(key=lambda q: (q.get("order", 0), q["id"]))
    return [q["id"] for q in questions]


def answers_to_vector(
    answers: Sequence[Mapping[str, Any]],
    questionnaire: Mapping[str, Any] | None = None,
) -> list[int]:
    survey = questionnaire if questionnaire is not None else get_questionnaire()
    question_ids = ordered_question_ids(survey)
    scale_min, scale_max = get_scale(survey)
    known = set(question_ids)

    by_question: dict[Any, Any] = {}
    duplicates: list[Any] = []
    for ans in answers:
        qid = ans.get("question_id")
        if qid in by_question and qid not in duplicates:
            duplicates.append(qid)
        by_question[qid] = ans.get("value")

    unknown = [qid for qid in by_question if qid not in known]
    if unknown:
        raise InvalidInput("Answers reference unknown questions", unknown)
    if duplicates:
        raise InvalidInput("Questions answered more than once", duplicates)
    missing = [qid for qid in question_ids if qid not in by_question]
    if missing:
        raise InvalidInput("Every question must be answered", missing)

    bad_values = [
        qid
        for qid in question_ids
        if not isinstance(by_question[qid], int)
        or isinstance(by_question[qid], bool)
        or not scale_min <= by_question[qid] <= scale_max
    ]
    if bad_values:
        raise InvalidInput(f"Answers must be integers between {scale_min} and {scale_max}", bad_values)

    return [by_question[qid] for qid in question_ids]
