from __future__ import annotations

import math
from typing import Any, Sequence

from .errors import InvalidInput


def absolute_differences(a: Sequence[int], b: Sequence[int]) -> list[int]:
    return [abs(x - y) for x, y in zip(a, b)]


class SimpleDifferenceScorer:
    name = "simple"
    label = "Simple Difference"

    def score(self, a: Sequence[int], b: Sequence[int]) -> int:
        return sum(absolute_differences(a, b))

    def check_question_count(self, num_questions: int) -> None:
        return None

    def check_scale(self, scale: tuple[int, int]) -> None:
        return None


class EuclideanDistanceScorer(SimpleDifferenceScorer):
    """Squares each difference before summing, so one large gap outweighs several small ones."""

    name = "euclidean"
    label = "Euclidean Distance"

    def score(self, a: Sequence[int], b: Sequence[int]) -> float:
        return math.sqrt(sum(d * d for d in absolute_differences(a, b)))


class WeightedScorer(SimpleDifferenceScorer):
    name = "weighted"
    label = "Weighted"

    def __init__(self, weights: Sequence[float]) -> None:
        if not weights:
            raise InvalidInput("Weights vector cannot be empty")
        values = [float(w) for w in weights]
        if not all(w > 0.0 and math.isfinite(w) for w in values):
            raise InvalidInput("All weights must be positive and finite")
        self.weights = values

    @classmethod
    def equal_weights(cls, num_questions: int) -> "WeightedScorer":
        return cls([1.0] * num_questions)

    @property
    def num_questions(self) -> int:
        return len(self.weights)

    def check_question_count(self, num_questions: int) -> None:
        if num_questions != len(self.weights):
            raise InvalidInput(
                f"Number of answers ({num_questions}) must match number of weights ({len(self.weights)})"
            )

    def score(self, a: Sequence[int], b: Sequence[int]) -> float:
        return sum(d * w for d, w in zip(absolute_differences(a, b), self.weights))


class PolarizationScorer(SimpleDifferenceScorer):
    """Boosts differences between respondents who answered at the ends of the scale.

    Each per-question difference is multiplied by the polarization weight of
    both answers: ``extreme`` at the scale endpoints, ``lean`` one step in,
    ``moderate`` everywhere else.
    """

    name = "polarization"
    label = "Polarization"

    def __init__(
        self,
        extreme: float = 1.5,
        lean: float = 1.2,
        moderate: float = 1.0,
        scale_min: int = 1,
        scale_max: int = 7,
    ) -> None:
        self.extreme = float(extreme)
        self.lean = float(lean)
        self.moderate = float(moderate)
        self.scale_min = int(scale_min)
        self.scale_max = int(scale_max)

    def weight(self, answer: int) -> float:
        if answer in (self.scale_min, self.scale_max):
            return self.extreme
        if answer in (self.scale_min + 1, self.scale_max - 1):
            return self.lean
        return self.moderate

    def check_scale(self, scale: tuple[int, int]) -> None:
        if (self.scale_min, self.scale_max) != tuple(scale):
            raise InvalidInput(
                f"Polarization scorer is built for scale {self.scale_min}..{self.scale_max}, "
                f"run uses {scale[0]}..{scale[1]}"
            )

    def score(self, a: Sequence[int], b: Sequence[int]) -> float:
        return sum(abs(x - y) * self.weight(x) * self.weight(y) for x, y in zip(a, b))


SCORERS: dict[str, type[SimpleDifferenceScorer]] = {
    SimpleDifferenceScorer.name: SimpleDifferenceScorer,
    EuclideanDistanceScorer.name: EuclideanDistanceScorer,
    WeightedScorer.name: WeightedScorer,
    PolarizationScorer.name: PolarizationScorer,
}


def available_scorers() -> list[dict[str, str]]:
    return [{"name": name, "label": cls.label} for name, cls in SCORERS.items()]


def get_scorer(name: str | None, **options: Any) -> SimpleDifferenceScorer:
    key = (name or SimpleDifferenceScorer.name).strip().lower()
    if key not in SCORERS:
        raise InvalidInput(f"Unknown scorer {name!r}; expected one of: {', '.join(SCORERS)}")
    if key == WeightedScorer.name:
        weights = options.get("weights")
        if weights is None:
            raise InvalidInput("weighted scorer requires weights")
        return WeightedScorer(weights)
    if key == PolarizationScorer.name:
        allowed = {"extreme", "lean", "moderate", "scale_min", "scale_max"}
        return PolarizationScorer(**{k: v for k, v in options.items() if k in allowed and v is not None})
    return SCORERS[key]()
