"""Unit tests for configuration."""

from datetime import date
from pathlib import Path

import pytest

from todo_search.config import Config, load_config, save_config
from todo_search.exceptions import ConfigParseError, ConfigValidationError


def test_default_config() -> None:
    """Test that default config has sensible values."""
    config = Config()
    assert config.colored_output is True
    assert config.tasks_file is None
    assert config.week_starts_on == "monday"
    assert config.strict is False


def test_load_missing_config(temp_dir: Path) -> None:
    """Test loading when config file doesn't exist."""
    config_path = temp_dir / "nonexistent.toml"
    config, warnings = load_config(config_path)

    assert config is not None
    assert len(warnings) > 0  # Should warn about missing file


def test_load_valid_config(sample_config: Path) -> None:
    """Test loading a valid config file."""
    config, warnings = load_config(sample_config)

    assert config.tasks_file is not None
    assert config.tasks_file.name == "todo-search-tasks.json"
    assert config.week_starts_on == "sunday"
    assert config.keywords == {"active": ["STARTED"]}
    assert config.priority == {"high": ["urgent"]}
    assert config.config_path == sample_config.resolve()


def test_missing_tasks_file_warns(sample_config: Path) -> None:
    _, warnings = load_config(sample_config)
    assert any("Tasks file not found" in w for w in warnings)


def test_invalid_toml(temp_dir: Path) -> None:
    config_path = temp_dir / "bad.toml"
    config_path.write_text("[search\ncase_sensitive = ")
    with pytest.raises(ConfigParseError):
        load_config(config_path)


def test_wrong_type(temp_dir: Path) -> None:
    config_path = temp_dir / "config.toml"
    config_path.write_text('[search]\ncase_sensitive = "yes"\n')
    with pytest.raises(ConfigValidationError) as exc_info:
        load_config(config_path)
    assert exc_info.value.key == "search.case_sensitive"


def test_bad_week_start(temp_dir: Path) -> None:
    config_path = temp_dir / "config.toml"
    config_path.write_text('[search]\nweek_starts_on = "friday"\n')
    with pytest.raises(ConfigValidationError):
        load_config(config_path)


def test_unknown_keyword_group(temp_dir: Path) -> None:
    config_path = temp_dir / "config.toml"
    config_path.write_text('[keywords]\nsomeday = ["MAYBE"]\n')
    with pytest.raises(ConfigValidationError):
        load_config(config_path)


def test_builtin_keyword_in_other_group_warns(temp_dir: Path) -> None:
    config_path = temp_dir / "config.toml"
    config_path.write_text('[keywords]\nactive = ["TODO"]\n')
    _, warnings = load_config(config_path)
    assert any("builtin inactive keyword" in w for w in warnings)


def test_to_settings(sample_config: Path) -> None:
    config, _ = load_config(sample_config)
    settings = config.to_settings(reference_date=date(2024, 1, 17))

    assert settings.week_starts_on == "sunday"
    assert settings.today() == date(2024, 1, 17)
    assert settings.keywords.group_of("STARTED") == "active"
    assert "urgent" in settings.priority_synonyms["high"]


def test_save_and_reload(temp_dir: Path) -> None:
    config = Config(
        tasks_file=Path("/tmp/tasks.json"),
        week_starts_on="sunday",
        strict=True,
        keywords={"waiting": ["BLOCKED"], "active": []},
    )
    config_path = temp_dir / "nested" / "config.toml"
    save_config(config, config_path)

    loaded, _ = load_config(config_path)
    assert loaded.week_starts_on == "sunday"
    assert loaded.strict is True
    assert loaded.keywords == {"waiting": ["BLOCKED"]}
    assert loaded.tasks_file == Path("/tmp/tasks.json").resolve()
