from __future__ import annotations

from typing import Any, Sequence

from .matching import MatchAssignment, MatchRun, PairScore, RespondentId


def _percentile(values: list[float], p: float) -> float | None:
    if not values:
        return None
    vals = sorted(values)
    if len(vals) == 1:
        return round(vals[0], 6)
    pos = (len(vals) - 1) * p
    lo = int(pos)
    hi = min(lo + 1, len(vals) - 1)
    frac = pos - lo
    v = vals[lo] * (1 - frac) + vals[hi] * frac
    return round(v, 6)


def percentile_summary(values: list[float]) -> dict[str, float | None]:
    return {
        "p10": _percentile(values, 0.10),
        "p25": _percentile(values, 0.25),
        "p50": _percentile(values, 0.50),
        "p75": _percentile(values, 0.75),
        "p90": _percentile(values, 0.90),
    }


def best_score_by_respondent(pairs: Sequence[PairScore]) -> dict[RespondentId, float]:
    best: dict[RespondentId, float] = {}
    for p in pairs:
        score = float(p.score)
        best[p.left_id] = max(best.get(p.left_id, score), score)
        best[p.right_id] = max(best.get(p.right_id, score), score)
    return best


def compute_run_report(
    pairs: Sequence[PairScore],
    assignments: Sequence[MatchAssignment],
    unmatched: set[RespondentId],
    respondent_count: int,
) -> dict[str, Any]:
    pair_scores = [float(p.score) for p in pairs]
    assigned_scores = [float(a.score) for a in assignments]

    # How far below each matched respondent's best available partner the greedy pass landed.
    best = best_score_by_respondent(pairs)
    shortfalls: list[float] = []
    for a in assignments:
        for rid in (a.left_id, a.right_id):
            shortfalls.append(round(best.get(rid, float(a.score)) - float(a.score), 6))

    no_match_count = len(unmatched)
    no_match_rate = round(no_match_count / respondent_count, 6) if respondent_count else 0.0

    return {
        "respondents": respondent_count,
        "candidate_pair_count": len(pairs),
        "pair_score_distribution": {
            "count": len(pair_scores),
            "percentiles": percentile_summary(pair_scores),
        },
        "assigned_distribution": {
            "count": len(assigned_scores),
            "percentiles": percentile_summary(assigned_scores),
            "total": round(sum(assigned_scores), 6),
        },
        "best_partner_shortfall": {
            "count": len(shortfalls),
            "percentiles": percentile_summary(shortfalls),
            "respondents_with_best_partner": sum(1 for s in shortfalls if s == 0.0),
        },
        "assignment_counts": {
            "matched_pairs": len(assignments),
            "no_match_count": no_match_count,
            "no_match_rate": no_match_rate,
        },
    }


def report_for_run(run: MatchRun, respondent_count: int) -> dict[str, Any]:
    return compute_run_report(run.pairs, run.assignments, run.unmatched, respondent_count)
