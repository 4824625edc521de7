import random

import pytest

from nemesis.services.errors import InvalidInput
from nemesis.services.matching import (
    Respondent,
    build_candidate_pairs,
    greedy_one_to_one_match,
    match_opposites,
    rank_pairs,
    run_matching,
    score_pair,
    unmatched_in_input_order,
)
from nemesis.services.scoring import PolarizationScorer, WeightedScorer


def _r(rid, *answers):
    return Respondent(id=rid, answers=tuple(answers))


def _population(n: int, q: int = 5, seed: int = 7) -> list[Respondent]:
    rng = random.Random(seed)
    return [_r(f"u{i}", *[rng.randint(1, 7) for _ in range(q)]) for i in range(n)]


def test_odd_population_leaves_middle_respondent_unmatched():
    people = [_r("A", 1, 1, 1), _r("B", 7, 7, 7), _r("C", 4, 4, 4)]
    pairs = {(p.left_id, p.right_id): p.total_diff for p in build_candidate_pairs(people)}
    assert pairs == {("A", "B"): 18, ("A", "C"): 9, ("B", "C"): 9}

    assignments, unmatched = match_opposites(people)
    assert len(assignments) == 1
    assert (assignments[0].left_id, assignments[0].right_id) == ("A", "B")
    assert assignments[0].total_diff == 18
    assert assignments[0].per_question_diff == (6, 6, 6)
    assert unmatched == {"C"}


def test_two_respondents_are_paired_with_per_question_breakdown():
    assignments, unmatched = match_opposites([_r("1", 1, 2, 3), _r("2", 7, 6, 5)])
    assert len(assignments) == 1
    assert assignments[0].per_question_diff == (6, 4, 2)
    assert assignments[0].total_diff == 12
    assert unmatched == set()


def test_empty_population_is_a_noop():
    assert match_opposites([]) == ([], set())


def test_single_respondent_is_the_remainder():
    assert match_opposites([_r("solo", 3, 4, 5)]) == ([], {"solo"})


def test_duplicate_ids_rejected_with_offending_ids():
    with pytest.raises(InvalidInput) as exc:
        match_opposites([_r("A", 1, 2), _r("B", 3, 4), _r("A", 5, 6)])
    assert exc.value.offending_ids == ["A"]


def test_ties_resolved_by_input_position():
    # Every cross pair scores 6, so only the (i, j) order decides.
    people = [_r("A", 1), _r("B", 7), _r("C", 7), _r("D", 1)]
    ranked = rank_pairs(build_candidate_pairs(people))
    assert [(p.left_id, p.right_id) for p in ranked[:4]] == [("A", "B"), ("A", "C"), ("B", "D"), ("C", "D")]

    assignments, unmatched = match_opposites(people)
    assert [(a.left_id, a.right_id) for a in assignments] == [("A", "B"), ("C", "D")]
    assert unmatched == set()

    reordered, _ = match_opposites(list(reversed(people)))
    assert [(a.left_id, a.right_id) for a in reordered] == [("D", "C"), ("B", "A")]


def test_ranking_does_not_depend_on_candidate_order():
    pairs = build_candidate_pairs(_population(9, q=2, seed=3))
    shuffled = list(pairs)
    random.Random(11).shuffle(shuffled)
    assert rank_pairs(shuffled) == rank_pairs(pairs)


def test_repeated_runs_are_identical():
    people = _population(15)
    first = match_opposites(people)
    for _ in range(3):
        assert match_opposites(people) == first


@pytest.mark.parametrize("n", [2, 5, 8, 13])
def test_assignments_and_remainder_partition_the_population(n):
    people = _population(n, seed=n)
    assignments, unmatched = match_opposites(people)

    seen = []
    for a in assignments:
        seen.extend([a.left_id, a.right_id])
    assert len(seen) == len(set(seen))
    assert set(seen).isdisjoint(unmatched)
    assert set(seen) | unmatched == {p.id for p in people}
    assert len(assignments) == n // 2
    assert len(unmatched) == n % 2


def test_scoring_is_symmetric_and_bounded():
    people = _population(10, q=6, seed=5)
    for a in people:
        for b in people:
            forward = score_pair(a, b)
            backward = score_pair(b, a)
            assert forward.total_diff == backward.total_diff
            assert 0 <= forward.total_diff <= 6 * (7 - 1)
            assert all(d >= 0 for d in forward.per_question_diff)


def test_highest_scoring_pair_always_committed():
    people = _population(12, seed=19)
    top = rank_pairs(build_candidate_pairs(people))[0]
    assignments, _ = match_opposites(people)
    assert (assignments[0].left_id, assignments[0].right_id) == (top.left_id, top.right_id)
    assert assignments[0].total_diff == top.total_diff


def test_default_scores_are_exact_integers():
    for pair in build_candidate_pairs(_population(6)):
        assert isinstance(pair.total_diff, int)
        assert isinstance(pair.score, int)
        assert pair.score == pair.total_diff


def test_greedy_is_not_an_optimal_matching():
    people = [_r("A", 1, 1, 1), _r("B", 7, 7, 1), _r("C", 4, 4, 6), _r("D", 4, 4, 6)]
    assignments, _ = match_opposites(people)
    greedy_total = sum(a.total_diff for a in assignments)

    alternative = score_pair(people[0], people[2]).total_diff + score_pair(people[1], people[3]).total_diff
    assert greedy_total == 12
    assert alternative == 22


def test_skipped_pairs_are_never_reconsidered():
    ranked = rank_pairs(build_candidate_pairs([_r("A", 1), _r("B", 7), _r("C", 6)]))
    assignments = greedy_one_to_one_match(ranked)
    assert [(a.left_id, a.right_id) for a in assignments] == [("A", "B")]


def test_thread_pool_scoring_matches_serial():
    people = _population(25, seed=23)
    serial = run_matching(people, workers=1)
    threaded = run_matching(people, workers=4)
    assert threaded.pairs == serial.pairs
    assert threaded.assignments == serial.assignments
    assert threaded.unmatched == serial.unmatched


def test_accepts_plain_dicts_and_integer_ids():
    assignments, unmatched = match_opposites(
        [{"id": 1, "answers": [1, 1]}, {"id": 2, "answers": [7, 7]}, {"id": 3, "answers": [2, 2]}]
    )
    assert (assignments[0].left_id, assignments[0].right_id) == (1, 2)
    assert unmatched == {3}


def test_unmatched_in_input_order():
    people = [_r("z", 1), _r("y", 7), _r("x", 4), _r("w", 5), _r("v", 3)]
    _, unmatched = match_opposites(people)
    ordered = unmatched_in_input_order(people, unmatched)
    assert ordered == [r.id for r in people if r.id in unmatched]


class TestValidation:
    def test_mismatched_lengths_rejected(self):
        with pytest.raises(InvalidInput) as exc:
            match_opposites([_r("A", 1, 2, 3), _r("B", 1, 2), _r("C", 4, 5, 6)])
        assert exc.value.offending_ids == ["B"]

    def test_empty_answers_rejected(self):
        with pytest.raises(InvalidInput) as exc:
            match_opposites([_r("A"), _r("B")])
        assert exc.value.offending_ids == ["A", "B"]

    def test_out_of_scale_answers_rejected(self):
        with pytest.raises(InvalidInput) as exc:
            match_opposites([_r("A", 0, 4), _r("B", 4, 8), _r("C", 4, 4)])
        assert exc.value.offending_ids == ["A", "B"]

    def test_single_respondent_still_validated(self):
        with pytest.raises(InvalidInput):
            match_opposites([_r("A", 9)])

    def test_non_integer_answers_rejected(self):
        with pytest.raises(InvalidInput) as exc:
            match_opposites([_r("A", 1, 2), _r("B", 1.5, 2), _r("C", True, 3)])
        assert exc.value.offending_ids == ["B", "C"]

    def test_custom_scale(self):
        assignments, _ = match_opposites([_r("A", 0), _r("B", 10)], scale=(0, 10))
        assert assignments[0].total_diff == 10

    def test_invalid_ids_rejected(self):
        with pytest.raises(InvalidInput):
            match_opposites([_r(None, 1), _r("B", 2)])

    def test_missing_id_in_record(self):
        with pytest.raises(InvalidInput):
            match_opposites([{"answers": [1, 2]}])

    def test_weighted_scorer_must_cover_every_question(self):
        with pytest.raises(InvalidInput):
            match_opposites([_r("A", 1, 2), _r("B", 3, 4)], scorer=WeightedScorer([1.0, 2.0, 3.0]))

    def test_polarization_scorer_must_share_the_run_scale(self):
        people = [_r("A", 0), _r("B", 10)]
        with pytest.raises(InvalidInput):
            match_opposites(people, scorer=PolarizationScorer(), scale=(0, 10))
        assignments, _ = match_opposites(
            people, scorer=PolarizationScorer(scale_min=0, scale_max=10), scale=(0, 10)
        )
        assert assignments[0].score == pytest.approx(22.5)

    def test_no_partial_output_on_failure(self):
        people = _population(6) + [_r("u0", 1, 1, 1, 1, 1)]
        with pytest.raises(InvalidInput):
            run_matching(people)
