"""
Configuration Service

Loads plan rules and the sample workout library from YAML files.
Allows changing scoring weights and periodization rules without code changes.

Usage:
    config = ConfigService()

    # Get selection weights
    weights = config.get("plan_rules.fitness.scoring")

    # Point at another rules directory
    config = ConfigService(config_dir="/etc/cycle-plans")
    config.reload()
"""

import yaml
import logging
from typing import Any, Optional, Dict, List
from pathlib import Path
from functools import reduce

from core.exceptions import CatalogError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).parent / "config"


class ConfigService:
    """
    Load and cache configuration from YAML files.

    One instance per caller; nothing is shared at class level.
    """

    CONFIG_FILES = [
        "plan_rules.yaml",
        "workout_library.yaml",
    ]

    def __init__(self, config_dir: Optional[str] = None):
        self._config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
        self._config: Optional[Dict[str, Any]] = None

    @classmethod
    def from_settings(cls, settings) -> "ConfigService":
        return cls(config_dir=settings.PLAN_CONFIG_DIR)

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    def get(self, key: str = None, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Dot-separated key (e.g., "plan_rules.race.down_week.frequency")
            default: Default value if key not found

        Returns:
            Configuration value or entire config if no key provided
        """
        if self._config is None:
            self._load()

        if key is None:
            return self._config

        try:
            keys = key.split(".")
            value = reduce(lambda d, k: d[k], keys, self._config)
            return value
        except (KeyError, TypeError):
            return default

    def reload(self):
        """Reload configuration from files."""
        self._config = None
        self._load()
        logger.info("Configuration reloaded")

    def set(self, key: str, value: Any):
        """
        Set a configuration value (in memory only).
        Useful for testing.
        """
        if self._config is None:
            self._load()

        keys = key.split(".")
        d = self._config
        for k in keys[:-1]:
            if k not in d:
                d[k] = {}
            d = d[k]
        d[keys[-1]] = value

    # ========== Typed accessors ==========

    def get_scoring_weights(self) -> Dict[str, int]:
        from .constants import FITNESS_SCORING
        weights = dict(FITNESS_SCORING)
        weights.update(self.get("plan_rules.fitness.scoring", {}) or {})
        return weights

    def get_phase_intensities(self) -> Dict[str, List[str]]:
        return self.get("plan_rules.fitness.phase_intensities", {}) or {}

    def get_injury_restrictions(self) -> Dict[str, List[str]]:
        return self.get("plan_rules.fitness.injury_restrictions", {}) or {}

    def get_down_week_rules(self) -> Dict[str, Any]:
        return self.get("plan_rules.race.down_week", {
            "frequency": 4,
            "reduction": 0.8,
        })

    def get_taper_rules(self) -> Dict[str, Any]:
        return self.get("plan_rules.race.taper", {
            "short_weeks": 1,
            "long_weeks": 2,
            "long_threshold_weeks": 8,
        })

    def get_phase_shares(self) -> Dict[str, float]:
        return self.get("plan_rules.race.shares", {
            "speed_strength": 0.25,
            "interval_workouts": 0.35,
        })

    def get_workout_templates(self) -> List[Dict[str, Any]]:
        """Raw workout dicts from workout_library.yaml, in file order."""
        return self.get("workout_library.workouts", []) or []

    # ========== Internal Methods ==========

    def _load(self):
        """Load all configuration files."""
        self._config = {}

        for filename in self.CONFIG_FILES:
            filepath = self._config_dir / filename
            if filepath.exists():
                try:
                    with open(filepath, 'r', encoding='utf-8') as f:
                        data = yaml.safe_load(f)
                except (OSError, yaml.YAMLError) as e:
                    logger.error(f"Error loading {filename}: {e}")
                    raise CatalogError(f"Could not read {filepath}: {e}") from e
                if data:
                    # Namespace by filename (without extension)
                    namespace = filename.rsplit('.', 1)[0]
                    self._config[namespace] = data
                    logger.debug(f"Loaded config: {filename}")
            else:
                logger.debug(f"Config file not found: {filepath}")

        # Also load defaults from constants if no config found
        if not self._config:
            self._load_defaults()

    def _load_defaults(self):
        """Load default configuration from constants."""
        from .constants import (
            FITNESS_SCORING,
            PHASE_PREFERRED_INTENSITIES,
            INJURY_RESTRICTIONS,
            DOWN_WEEK_FREQUENCY,
            DOWN_WEEK_REDUCTION,
            TAPER_WEEKS_SHORT,
            TAPER_WEEKS_LONG,
            TAPER_LONG_THRESHOLD_WEEKS,
            PERIODIZATION_SHARES,
        )

        self._config = {
            "plan_rules": {
                "fitness": {
                    "scoring": dict(FITNESS_SCORING),
                    "phase_intensities": {
                        k.value: [i.value for i in v]
                        for k, v in PHASE_PREFERRED_INTENSITIES.items()
                    },
                    "injury_restrictions": {
                        k: [t.value for t in v]
                        for k, v in INJURY_RESTRICTIONS.items()
                    },
                },
                "race": {
                    "down_week": {
                        "frequency": DOWN_WEEK_FREQUENCY,
                        "reduction": DOWN_WEEK_REDUCTION,
                    },
                    "taper": {
                        "short_weeks": TAPER_WEEKS_SHORT,
                        "long_weeks": TAPER_WEEKS_LONG,
                        "long_threshold_weeks": TAPER_LONG_THRESHOLD_WEEKS,
                    },
                    "shares": dict(PERIODIZATION_SHARES),
                },
            },
            "workout_library": {"workouts": []},
        }

        logger.info("Loaded default configuration from constants")
