from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Union

from .errors import InvalidInput
from .scoring import SimpleDifferenceScorer, absolute_differences

logger = logging.getLogger(__name__)

RespondentId = Union[str, int]

DEFAULT_SCALE = (1, 7)


@dataclass(frozen=True)
class Respondent:
    id: RespondentId
    answers: tuple[int, ...]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Respondent":
        if "id" not in data:
            raise InvalidInput("Respondent record is missing 'id'")
        answers = data.get("answers")
        if not isinstance(answers, (list, tuple)):
            raise InvalidInput("Respondent answers must be a list", [data["id"]])
        return cls(id=data["id"], answers=tuple(answers))


@dataclass(frozen=True)
class PairScore:
    left_id: RespondentId
    right_id: RespondentId
    left_index: int
    right_index: int
    per_question_diff: tuple[int, ...]
    total_diff: int
    score: float


@dataclass(frozen=True)
class MatchAssignment:
    left_id: RespondentId
    right_id: RespondentId
    total_diff: int
    per_question_diff: tuple[int, ...]
    score: float

    @classmethod
    def from_pair(cls, pair: PairScore) -> "MatchAssignment":
        return cls(
            left_id=pair.left_id,
            right_id=pair.right_id,
            total_diff=pair.total_diff,
            per_question_diff=pair.per_question_diff,
            score=pair.score,
        )


@dataclass
class MatchRun:
    pairs: list[PairScore] = field(default_factory=list)
    assignments: list[MatchAssignment] = field(default_factory=list)
    unmatched: set[RespondentId] = field(default_factory=set)
    num_questions: int = 0


def _as_respondents(respondents: Sequence[Respondent | Mapping[str, Any]]) -> list[Respondent]:
    return [r if isinstance(r, Respondent) else Respondent.from_dict(r) for r in respondents]


def _is_answer_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_respondents(respondents: Sequence[Respondent], *, scale: tuple[int, int] = DEFAULT_SCALE) -> int:
    """Check the run preconditions and return the shared question count.

    Returns 0 for an empty population.
    """
    scale_min, scale_max = scale
    if scale_min > scale_max:
        raise InvalidInput(f"Invalid answer scale {scale_min}..{scale_max}")

    bad_ids = [r.id for r in respondents if not isinstance(r.id, (str, int)) or isinstance(r.id, bool)]
    if bad_ids:
        raise InvalidInput("Respondent ids must be strings or integers", bad_ids)

    seen: set[RespondentId] = set()
    duplicates: list[RespondentId] = []
    for r in respondents:
        if r.id in seen and r.id not in duplicates:
            duplicates.append(r.id)
        seen.add(r.id)
    if duplicates:
        raise InvalidInput("Duplicate respondent ids", duplicates)

    if not respondents:
        return 0

    empty = [r.id for r in respondents if len(r.answers) == 0]
    if empty:
        raise InvalidInput("Respondents must answer at least one question", empty)

    num_questions = len(respondents[0].answers)
    mismatched = [r.id for r in respondents if len(r.answers) != num_questions]
    if mismatched:
        raise InvalidInput(
            f"All answer vectors must have length {num_questions} (taken from respondent {respondents[0].id!r})",
            mismatched,
        )

    non_int = [r.id for r in respondents if not all(_is_answer_int(v) for v in r.answers)]
    if non_int:
        raise InvalidInput("Answers must be integers", non_int)

    out_of_range = [r.id for r in respondents if any(v < scale_min or v > scale_max for v in r.answers)]
    if out_of_range:
        raise InvalidInput(f"All answers must be between {scale_min} and {scale_max}", out_of_range)

    return num_questions


def score_pair(
    left: Respondent,
    right: Respondent,
    *,
    scorer: SimpleDifferenceScorer | None = None,
    left_index: int = 0,
    right_index: int = 1,
) -> PairScore:
    if len(left.answers) != len(right.answers):
        raise InvalidInput("Respondents must have the same number of answers", [left.id, right.id])
    scorer = scorer or SimpleDifferenceScorer()
    diffs = tuple(absolute_differences(left.answers, right.answers))
    return PairScore(
        left_id=left.id,
        right_id=right.id,
        left_index=left_index,
        right_index=right_index,
        per_question_diff=diffs,
        total_diff=sum(diffs),
        score=scorer.score(left.answers, right.answers),
    )


def build_candidate_pairs(
    respondents: Sequence[Respondent],
    *,
    scorer: SimpleDifferenceScorer | None = None,
    workers: int = 1,
) -> list[PairScore]:
    scorer = scorer or SimpleDifferenceScorer()
    n = len(respondents)

    def _row(i: int) -> list[PairScore]:
        return [
            score_pair(respondents[i], respondents[j], scorer=scorer, left_index=i, right_index=j)
            for j in range(i + 1, n)
        ]

    if workers > 1 and n > 2:
        # map() yields rows in submission order, so generation order is kept.
        with ThreadPoolExecutor(max_workers=workers) as pool:
            rows = list(pool.map(_row, range(n - 1)))
    else:
        rows = [_row(i) for i in range(n - 1)]
    return [pair for row in rows for pair in row]


def rank_pairs(pairs: Sequence[PairScore]) -> list[PairScore]:
    return sorted(pairs, key=lambda p: (-p.score, p.left_index, p.right_index))


def greedy_one_to_one_match(ranked: Sequence[PairScore]) -> list[MatchAssignment]:
    """Commit pairs highest score first, skipping any pair with an endpoint already taken.

    This is a heuristic. It does not guarantee the maximum total score over
    the whole population; a maximum-weight matching solver can do better.
    """
    matched: set[RespondentId] = set()
    assignments: list[MatchAssignment] = []
    for pair in ranked:
        if pair.left_id in matched or pair.right_id in matched:
            continue
        matched.add(pair.left_id)
        matched.add(pair.right_id)
        assignments.append(MatchAssignment.from_pair(pair))
    return assignments


def run_matching(
    respondents: Sequence[Respondent | Mapping[str, Any]],
    *,
    scorer: SimpleDifferenceScorer | None = None,
    scale: tuple[int, int] = DEFAULT_SCALE,
    workers: int = 1,
) -> MatchRun:
    population = _as_respondents(respondents)
    num_questions = validate_respondents(population, scale=scale)
    scorer = scorer or SimpleDifferenceScorer()
    scorer.check_scale(scale)
    if population:
        scorer.check_question_count(num_questions)

    if len(population) < 2:
        return MatchRun(unmatched={r.id for r in population}, num_questions=num_questions)

    pairs = build_candidate_pairs(population, scorer=scorer, workers=workers)
    assignments = greedy_one_to_one_match(rank_pairs(pairs))

    matched: set[RespondentId] = set()
    for a in assignments:
        matched.add(a.left_id)
        matched.add(a.right_id)
    unmatched = {r.id for r in population if r.id not in matched}

    logger.debug(
        "[match] scorer=%s respondents=%d candidate_pairs=%d matched_pairs=%d unmatched=%d",
        scorer.name,
        len(population),
        len(pairs),
        len(assignments),
        len(unmatched),
    )
    return MatchRun(pairs=pairs, assignments=assignments, unmatched=unmatched, num_questions=num_questions)


def match_opposites(
    respondents: Sequence[Respondent | Mapping[str, Any]],
    *,
    scorer: SimpleDifferenceScorer | None = None,
    scale: tuple[int, int] = DEFAULT_SCALE,
    workers: int = 1,
) -> tuple[list[MatchAssignment], set[RespondentId]]:
    run = run_matching(respondents, scorer=scorer, scale=scale, workers=workers)
    return run.assignments, run.unmatched


def unmatched_in_input_order(
    respondents: Sequence[Respondent | Mapping[str, Any]],
    unmatched: set[RespondentId],
) -> list[RespondentId]:
    ids = [r.id if isinstance(r, Respondent) else r.get("id") for r in respondents]
    return [rid for rid in ids if rid in unmatched]
