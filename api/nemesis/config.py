import json
import os
from pathlib import Path
from typing import Any

_default_questions = Path(__file__).resolve().parent / "questions.json"
QUESTIONS_PATH = Path(os.getenv("QUESTIONS_PATH", str(_default_questions)))
SCALE_MIN = int(os.getenv("SCALE_MIN", "1"))
SCALE_MAX = int(os.getenv("SCALE_MAX", "7"))
MATCH_SCORER = os.getenv("MATCH_SCORER", "simple")
MATCH_SCORING_WORKERS = int(os.getenv("MATCH_SCORING_WORKERS", "1"))
MAX_RESPONDENTS = int(os.getenv("MAX_RESPONDENTS", "2000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DEFAULT_MATCHING_CONFIG: dict[str, Any] = {
    "POLARIZATION_EXTREME": float(os.getenv("POLARIZATION_EXTREME", "1.5")),
    "POLARIZATION_LEAN": float(os.getenv("POLARIZATION_LEAN", "1.2")),
    "POLARIZATION_MODERATE": float(os.getenv("POLARIZATION_MODERATE", "1.0")),
}

if os.getenv("MATCHING_CONFIG_JSON"):
    try:
        DEFAULT_MATCHING_CONFIG.update(json.loads(os.getenv("MATCHING_CONFIG_JSON", "{}")))
    except json.JSONDecodeError:
        pass


def scorer_options(weights: list[float] | None = None) -> dict[str, Any]:
    return {
        "weights": weights,
        "extreme": DEFAULT_MATCHING_CONFIG.get("POLARIZATION_EXTREME"),
        "lean": DEFAULT_MATCHING_CONFIG.get("POLARIZATION_LEAN"),
        "moderate": DEFAULT_MATCHING_CONFIG.get("POLARIZATION_MODERATE"),
        "scale_min": SCALE_MIN,
        "scale_max": SCALE_MAX,
    }
