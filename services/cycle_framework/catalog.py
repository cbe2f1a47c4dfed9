"""
Content Catalog

Lookup interface the planners use to find workout templates, plus a
static, in-memory implementation built from the workout library YAML
or from plain dicts.

Usage:
    catalog = StaticContentCatalog.from_config(ConfigService())
    templates = catalog.candidates_for_phase(CyclePhase.LUTEAL)
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from core.exceptions import CatalogError

from .constants import CyclePhase, Intensity, WorkoutType, WORKOUT_TYPE_ALIASES
from .models import WorkoutTemplate

logger = logging.getLogger(__name__)

ALL_PHASES_TAG = "all"


def parse_workout_type(value: str) -> Optional[WorkoutType]:
    """Resolve a free-text workout type; None when unknown."""
    if isinstance(value, WorkoutType):
        return value
    key = str(value).strip().lower()
    try:
        return WorkoutType(key)
    except ValueError:
        return WORKOUT_TYPE_ALIASES.get(key)


class ContentCatalog(ABC):
    """Read-only workout lookup. Engines never modify a catalog."""

    @abstractmethod
    def candidates_for_phase(self, phase: CyclePhase) -> List[WorkoutTemplate]:
        """
        Templates suitable for a phase, in stable catalog order.

        Implementations fall back to all-phase templates when nothing is
        tagged for the phase itself.
        """
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[WorkoutTemplate]:
        pass


class StaticContentCatalog(ContentCatalog):
    """Catalog held in memory in declaration order."""

    def __init__(self, templates: Iterable[WorkoutTemplate] = ()):
        self._templates: List[WorkoutTemplate] = list(templates)
        self._by_key: Dict[str, WorkoutTemplate] = {}
        for template in self._templates:
            if template.key in self._by_key:
                raise CatalogError(f"Duplicate workout key: {template.key}")
            self._by_key[template.key] = template

    @classmethod
    def from_dicts(cls, items: Iterable[Dict[str, Any]]) -> "StaticContentCatalog":
        return cls(cls._parse_template(item, index) for index, item in enumerate(items))

    @classmethod
    def from_config(cls, config) -> "StaticContentCatalog":
        """Build from ``workout_library.workouts`` of a ConfigService."""
        catalog = cls.from_dicts(config.get_workout_templates())
        logger.debug(f"Loaded {len(catalog)} workout templates from {config.config_dir}")
        return catalog

    def candidates_for_phase(self, phase: CyclePhase) -> List[WorkoutTemplate]:
        specific = [t for t in self._templates if t.applies_to(phase)]
        if specific:
            return specific
        return [t for t in self._templates if t.is_all_phases]

    def get(self, key: str) -> Optional[WorkoutTemplate]:
        return self._by_key.get(key)

    @property
    def templates(self) -> List[WorkoutTemplate]:
        return list(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    # ========== Parsing ==========

    @staticmethod
    def _parse_template(item: Dict[str, Any], index: int) -> WorkoutTemplate:
        if not isinstance(item, dict):
            raise CatalogError(f"Workout #{index} is not a mapping")

        missing = [k for k in ("key", "title", "duration_minutes", "workout_type", "phases") if k not in item]
        if missing:
            raise CatalogError(f"Workout #{index} missing fields: {', '.join(missing)}")

        workout_type = parse_workout_type(item["workout_type"])
        if workout_type is None or workout_type == WorkoutType.REST:
            raise CatalogError(f"Workout {item['key']!r} has unknown type {item['workout_type']!r}")

        raw_phases = item["phases"]
        if isinstance(raw_phases, str):
            raw_phases = [raw_phases]
        phases = []
        for raw in raw_phases:
            label = str(raw).strip().lower()
            if label == ALL_PHASES_TAG:
                phases.append(ALL_PHASES_TAG)
                continue
            phase = CyclePhase.from_label(label)
            if phase is None:
                raise CatalogError(f"Workout {item['key']!r} has unknown phase {raw!r}")
            phases.append(phase.value)

        try:
            intensity = Intensity(str(item.get("intensity", Intensity.MID.value)).lower())
            duration = int(item["duration_minutes"])
        except ValueError as e:
            raise CatalogError(f"Workout {item['key']!r} is malformed: {e}") from e

        return WorkoutTemplate(
            key=str(item["key"]),
            title=str(item["title"]),
            description=str(item.get("description", "")),
            duration_minutes=duration,
            workout_type=workout_type,
            phases=tuple(phases),
            intensity=intensity,
            equipment=tuple(item.get("equipment") or ()),
            benefits=tuple(item.get("benefits") or ()),
            media_ref=item.get("media_ref"),
            instructor=item.get("instructor"),
            contraindications=tuple(str(c).lower() for c in item.get("contraindications") or ()),
        )
