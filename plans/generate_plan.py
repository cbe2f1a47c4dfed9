#!/usr/bin/env python3
"""
Plan Generator - Builds cycle-aware plans from onboarding answers

Usage:
    python generate_plan.py fitness answers.json --date 2024-03-04
    python generate_plan.py race answers.json
    python generate_plan.py phases answers.json --date 2024-03-04 --days 28

The answers file holds "cycle", "fitness" and "race" sections in the shape
the onboarding flow collects them, e.g.:

    {
      "cycle": {"last_period_start": "2024-03-01", "cycle_length_days": "28 days"},
      "fitness": {"experience_level": "Beginner (just starting out)",
                  "desired_weekly_frequency": "3 days",
                  "preferred_rest_days": "Sunday"},
      "race": {"race_type": "10K", "race_date": "2024-06-01", ...}
    }

Output is JSON on stdout, or written to --output.
"""

import sys
import json
import logging
import argparse
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import settings
from core.exceptions import EngineError
from core.logging import setup_logging
from services.cycle_framework import (
    ConfigService,
    CyclePhaseCalculator,
    FitnessPlanGenerator,
    PredictionConfidenceModel,
    RaceTrainingPeriodizer,
    StaticContentCatalog,
)
from services.cycle_framework.schemas import (
    CycleProfileIn,
    FitnessPreferencesIn,
    RaceParametersIn,
    parse_answers,
)

logger = logging.getLogger(__name__)


def load_answers(path: str) -> dict:
    """Load onboarding answers JSON file"""
    answers_path = Path(path)
    if not answers_path.exists():
        raise FileNotFoundError(f"Answers file not found: {answers_path}")

    with open(answers_path, "r", encoding="utf-8") as f:
        return json.load(f)


def build_fitness(answers: dict, reference_date: date, horizon_days: int) -> dict:
    config = ConfigService.from_settings(settings)
    calculator = CyclePhaseCalculator()
    generator = FitnessPlanGenerator.from_settings(settings, config=config, calculator=calculator)
    catalog = StaticContentCatalog.from_config(config)

    profile = parse_answers(CycleProfileIn, answers.get("cycle", {})).to_domain()
    preferences = parse_answers(FitnessPreferencesIn, answers.get("fitness", {})).to_domain()

    entries = generator.generate_for_preferences(
        profile, preferences, reference_date, catalog, horizon_days=horizon_days
    )
    return {
        "reference_date": reference_date.isoformat(),
        "entries": [e.to_dict() for e in entries],
    }


def build_race(answers: dict) -> dict:
    config = ConfigService.from_settings(settings)
    periodizer = RaceTrainingPeriodizer(config=config)

    params = parse_answers(RaceParametersIn, answers.get("race", {})).to_domain()
    profile = None
    if answers.get("cycle"):
        profile = parse_answers(CycleProfileIn, answers["cycle"]).to_domain()

    plan = periodizer.generate_from_parameters(params, profile=profile)
    if plan is None:
        return {"configured": False, "plan": None}
    return {"configured": True, "plan": plan.to_dict()}


def build_phases(answers: dict, reference_date: date, days: int) -> dict:
    calculator = CyclePhaseCalculator()
    model = PredictionConfidenceModel.from_settings(settings, calculator=calculator)

    profile = parse_answers(CycleProfileIn, answers.get("cycle", {})).to_domain()
    history = [date.fromisoformat(d) for d in answers.get("period_history", [])]
    regularity = model.classify(profile, history)
    possible = model.widening_window_days(profile, regularity)

    timeline = []
    for day, result in calculator.phase_timeline(reference_date, days, profile):
        timeline.append({
            "date": day.isoformat(),
            "phase": result.phase.value if result.phase else None,
            "cycle_day": result.cycle_day,
            "has_data": result.has_data,
            "possible_period": day in possible,
        })
    return {"regularity": regularity.value, "timeline": timeline}


def main():
    parser = argparse.ArgumentParser(description="Generate cycle-aware plans from onboarding answers")
    parser.add_argument("kind", choices=["fitness", "race", "phases"], help="What to generate")
    parser.add_argument("answers", help="Path to answers JSON")
    parser.add_argument("--date", help="Reference date (YYYY-MM-DD), defaults to today")
    parser.add_argument("--days", type=int, default=settings.DEFAULT_HORIZON_DAYS, help="Horizon in days")
    parser.add_argument("--output", help="Write JSON here instead of stdout")

    args = parser.parse_args()
    setup_logging(settings)

    reference_date = date.fromisoformat(args.date) if args.date else date.today()

    try:
        answers = load_answers(args.answers)
        if args.kind == "fitness":
            result = build_fitness(answers, reference_date, args.days)
        elif args.kind == "race":
            result = build_race(answers)
        else:
            result = build_phases(answers, reference_date, args.days)
    except EngineError as e:
        logger.error(f"{e.error_code}: {e.detail}")
        return 2

    output = json.dumps(result, indent=2)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        logger.info(f"Saved to: {args.output}")
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
