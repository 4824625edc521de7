import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, HTTPException

from ..config import MATCH_SCORER, MATCH_SCORING_WORKERS, MAX_RESPONDENTS, SCALE_MAX, SCALE_MIN, scorer_options
from ..schemas import MatchRunRequest, MatchRunResponse, RespondentIn, ScorePairRequest
from ..services.calibration import report_for_run
from ..services.matching import Respondent, run_matching, score_pair, unmatched_in_input_order, validate_respondents
from ..services.scoring import available_scorers, get_scorer

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_respondent(item: RespondentIn) -> Respondent:
    return Respondent(id=item.id, answers=tuple(item.answers))


@router.get("/matches/scorers")
def list_scorers() -> dict[str, Any]:
    return {"default": MATCH_SCORER, "scorers": available_scorers()}


@router.post("/matches/score")
def score_respondent_pair(payload: ScorePairRequest) -> dict[str, Any]:
    left = _to_respondent(payload.left)
    right = _to_respondent(payload.right)
    scale = (SCALE_MIN, SCALE_MAX)
    num_questions = validate_respondents([left, right], scale=scale)
    scorer = get_scorer(payload.scorer or MATCH_SCORER, **scorer_options(payload.weights))
    scorer.check_scale(scale)
    scorer.check_question_count(num_questions)
    pair = score_pair(left, right, scorer=scorer)
    out = asdict(pair)
    out.pop("left_index")
    out.pop("right_index")
    out["scorer"] = scorer.name
    return out


@router.post("/matches/run", response_model=MatchRunResponse)
def run_match(payload: MatchRunRequest) -> dict[str, Any]:
    if len(payload.respondents) > MAX_RESPONDENTS:
        raise HTTPException(
            status_code=413,
            detail=f"At most {MAX_RESPONDENTS} respondents can be matched in one run",
        )

    respondents = [_to_respondent(r) for r in payload.respondents]
    scorer = get_scorer(payload.scorer or MATCH_SCORER, **scorer_options(payload.weights))
    run = run_matching(
        respondents,
        scorer=scorer,
        scale=(SCALE_MIN, SCALE_MAX),
        workers=MATCH_SCORING_WORKERS,
    )
    logger.info(
        "[match] run scorer=%s respondents=%d matched_pairs=%d unmatched=%d",
        scorer.name,
        len(respondents),
        len(run.assignments),
        len(run.unmatched),
    )
    return {
        "scorer": scorer.name,
        "assignments": [asdict(a) for a in run.assignments],
        "unmatched": unmatched_in_input_order(respondents, run.unmatched),
        "report": report_for_run(run, len(respondents)) if payload.include_report else None,
    }
