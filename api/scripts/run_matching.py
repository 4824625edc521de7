import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from nemesis.config import MATCH_SCORER, MATCH_SCORING_WORKERS, SCALE_MAX, SCALE_MIN, scorer_options
from nemesis.services.calibration import report_for_run
from nemesis.services.errors import InvalidInput
from nemesis.services.matching import run_matching, unmatched_in_input_order
from nemesis.services.scoring import get_scorer


def main() -> None:
    parser = argparse.ArgumentParser(description="Pair questionnaire respondents with their most opposite partner")
    parser.add_argument("respondents", type=Path, help="JSON file with a list of {id, answers} records")
    parser.add_argument("--scorer", type=str, default=MATCH_SCORER)
    parser.add_argument("--weights", type=str, default="", help="Comma-separated weights for the weighted scorer")
    parser.add_argument("--workers", type=int, default=MATCH_SCORING_WORKERS)
    parser.add_argument("--report", action="store_true")
    args = parser.parse_args()

    with args.respondents.open("r", encoding="utf-8") as f:
        respondents = json.load(f)
    if not isinstance(respondents, list) or not all(isinstance(r, dict) for r in respondents):
        parser.error("respondents file must contain a JSON list of objects")

    weights = [float(w) for w in args.weights.split(",") if w.strip()] or None
    try:
        scorer = get_scorer(args.scorer, **scorer_options(weights))
        run = run_matching(respondents, scorer=scorer, scale=(SCALE_MIN, SCALE_MAX), workers=args.workers)
    except InvalidInput as exc:
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        sys.exit(2)

    out = {
        "scorer": scorer.name,
        "assignments": [asdict(a) for a in run.assignments],
        "unmatched": unmatched_in_input_order(respondents, run.unmatched),
    }
    if args.report:
        out["report"] = report_for_run(run, len(respondents))
    print(json.dumps(out, indent=2))


if __name__ == "__main__":
    main()
