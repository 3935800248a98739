"""Score a seed-phrase session described in a YAML or JSON file."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from topic_engine.config import settings
from topic_engine.core.exceptions import TopicEngineError
from topic_engine.core.logging import setup_logging
from topic_engine.services.scoring.engine import CandidateScores, ScoringSession
from topic_engine.services.scoring.scoring_config import get_scoring_config, load_scoring_config

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("session_path", help="YAML/JSON file with seed_phrase, candidates, anchors")
    parser.add_argument(
        "--config",
        default=None,
        help="YAML scoring config overrides (default: TOPIC_ENGINE_SCORING_CONFIG_PATH)",
    )
    parser.add_argument(
        "--scorer",
        action="append",
        dest="scorers",
        help="Scorer(s) to run (default: all)",
    )
    parser.add_argument(
        "--sort-by",
        default=None,
        help="Sort results descending by SCORER.FIELD, e.g. popularity_v2.popularity_v2",
    )
    parser.add_argument("--limit", type=int, default=None, help="Only print the first N results")
    parser.add_argument("--output", default=None, help="Write the JSON report to this path")
    parser.add_argument("--verbose", action="store_true", help="Emit engine logs to stdout")
    return parser.parse_args(argv)


def load_session_file(path: Path) -> dict[str, Any]:
    """Load a session payload. JSON is read through the YAML parser."""
    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("session file must be a mapping")
    if "seed_phrase" not in payload:
        raise ValueError("session file must include 'seed_phrase'")
    return payload


def signal_map(signals: Any) -> Any:
    """Turn JSON string keys such as "3" into candidate indexes."""
    if not isinstance(signals, dict):
        return signals
    return {
        int(key) if isinstance(key, str) and key.strip().isdigit() else key: value
        for key, value in signals.items()
    }


def sort_results(results: list[CandidateScores], sort_by: str) -> list[CandidateScores]:
    """Order by one numeric score, highest first; unscored candidates last."""
    scorer_name, _, field = sort_by.partition(".")
    field = field or scorer_name

    def key(candidate: CandidateScores) -> tuple[int, float, int]:
        result = candidate.result(scorer_name)
        value = result.scores.get(field) if result is not None else None
        if not isinstance(value, (int, float)):
            return (1, 0.0, candidate.index)
        return (0, -float(value), candidate.index)

    return sorted(results, key=key)


def build_report(payload: dict[str, Any], args: argparse.Namespace) -> dict[str, Any]:
    """Run the session and assemble the JSON report."""
    config_path = args.config or settings.scoring_config_path
    config = load_scoring_config(config_path) if config_path else get_scoring_config()

    session = ScoringSession(
        payload["seed_phrase"],
        payload.get("candidates") or [],
        payload.get("anchors") or [],
        config=config,
    )
    scored = session.score_all(signal_map(payload.get("signals")), args.scorers)
    if args.sort_by:
        scored = sort_results(scored, args.sort_by)
    if args.limit is not None:
        scored = scored[:max(args.limit, 0)]

    return {
        "seed_phrase": session.seed,
        "config_version": config.version,
        "scorers": args.scorers or session.scorer_names,
        "summary": {
            **session.frequency_index.summary(),
            "anchor_set": session.anchor_set.summary(),
        },
        "results": [candidate.to_dict() for candidate in scored],
    }


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    if args.verbose:
        setup_logging(settings.log_level)

    session_path = Path(args.session_path)
    try:
        payload = load_session_file(session_path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Failed to load session file: {exc}", file=sys.stderr)
        return 1

    try:
        report = build_report(payload, args)
    except TopicEngineError as exc:
        print(f"Scoring failed: {exc.message}", file=sys.stderr)
        return 1

    rendered = json.dumps(report, indent=2, ensure_ascii=False, default=str)
    if args.output:
        Path(args.output).write_text(rendered + "\n", encoding="utf-8")
        print(f"Report written: path={args.output} candidates={len(report['results'])}")
    else:
        print(rendered)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
