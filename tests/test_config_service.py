"""
Tests for the YAML-backed configuration service.
"""

import pytest

from core.config import Settings
from core.exceptions import CatalogError
from services.cycle_framework import ConfigService


class TestPackagedConfig:
    """Rules shipped with the package."""

    def test_dot_key_lookup(self, config_service):
        assert config_service.get("plan_rules.race.down_week.frequency") == 4
        assert config_service.get("plan_rules.fitness.phase_intensities.menstrual") == ["low"]

    def test_missing_key_default(self, config_service):
        assert config_service.get("plan_rules.nope.nothing", "fallback") == "fallback"

    def test_whole_config(self, config_service):
        config = config_service.get()
        assert set(config) == {"plan_rules", "workout_library"}

    def test_set_is_in_memory(self, config_service):
        config_service.set("plan_rules.race.taper.long_weeks", 3)
        assert config_service.get_taper_rules()["long_weeks"] == 3
        assert ConfigService().get_taper_rules()["long_weeks"] == 2

    def test_reload_discards_overrides(self, config_service):
        config_service.set("plan_rules.race.shares.speed_strength", 0.5)
        config_service.reload()
        assert config_service.get_phase_shares()["speed_strength"] == 0.25


class TestConfigDirectory:
    """Alternate directories and defaults."""

    def test_empty_dir_uses_defaults(self, tmp_path):
        config = ConfigService(config_dir=str(tmp_path))
        assert config.get_down_week_rules() == {"frequency": 4, "reduction": 0.8}
        assert config.get_scoring_weights()["favorite_bonus"] == 3
        assert config.get_workout_templates() == []

    def test_custom_rules_file(self, tmp_path):
        (tmp_path / "plan_rules.yaml").write_text(
            "race:\n  down_week:\n    frequency: 5\n    reduction: 0.7\n",
            encoding="utf-8",
        )
        config = ConfigService(config_dir=str(tmp_path))
        assert config.get_down_week_rules() == {"frequency": 5, "reduction": 0.7}
        # Missing sections fall back to accessor defaults
        assert config.get_taper_rules()["long_weeks"] == 2

    def test_malformed_yaml(self, tmp_path):
        (tmp_path / "workout_library.yaml").write_text("workouts: [unclosed\n", encoding="utf-8")
        with pytest.raises(CatalogError):
            ConfigService(config_dir=str(tmp_path)).get()

    def test_from_settings(self, tmp_path):
        config = ConfigService.from_settings(Settings(PLAN_CONFIG_DIR=str(tmp_path)))
        assert config.config_dir == tmp_path
