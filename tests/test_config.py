"""Tests for configuration."""

from pathlib import Path
from textwrap import dedent

from recipe_filter_engine.config import DETECTED_EXIT_CODE, FilterConfig


class TestFilterConfig:
    """Tests for FilterConfig."""

    def test_default_values(self) -> None:
        config = FilterConfig()

        assert config.detected_exit_code == DETECTED_EXIT_CODE == 132
        assert config.shell == "/bin/bash"
        assert config.validation_timeout_seconds is None
        assert config.concurrent is False
        assert config.max_concurrent == 5
        assert config.skip_recipes == []
        assert config.extra_env == {}

    def test_from_dict(self) -> None:
        config = FilterConfig.from_dict(
            {
                "detected_exit_code": 3,
                "validation_timeout_seconds": 60,
                "concurrent": True,
                "skip_recipes": ["infra-agent-installer"],
                "extra_env": {"NEW_RELIC_REGION": "EU", "PORT": 8080},
            }
        )

        assert config.detected_exit_code == 3
        assert config.validation_timeout_seconds == 60.0
        assert config.concurrent is True
        assert config.is_skipped("infra-agent-installer")
        assert not config.is_skipped("logs-integration")
        assert config.extra_env == {"NEW_RELIC_REGION": "EU", "PORT": "8080"}

    def test_roundtrip(self) -> None:
        config = FilterConfig(concurrent=True, max_concurrent=2, skip_recipes=["a"])
        assert FilterConfig.from_dict(config.to_dict()) == config

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "filter.yml"
        path.write_text(
            dedent("""
            shell: /bin/sh
            max_concurrent: 2
            """)
        )

        config = FilterConfig.from_yaml(path)

        assert config.shell == "/bin/sh"
        assert config.max_concurrent == 2

    def test_from_empty_yaml_string(self) -> None:
        assert FilterConfig.from_yaml_string("") == FilterConfig()

    def test_from_env(self) -> None:
        config = FilterConfig.from_env(
            {
                "RFE_DETECTED_EXIT_CODE": "99",
                "RFE_CONCURRENT": "yes",
                "RFE_MAX_CONCURRENT": "8",
                "RFE_SKIP_RECIPES": "a, b,,c",
                "RFE_VALIDATION_TIMEOUT": "2.5",
                "UNRELATED": "x",
            }
        )

        assert config.detected_exit_code == 99
        assert config.concurrent is True
        assert config.max_concurrent == 8
        assert config.skip_recipes == ["a", "b", "c"]
        assert config.validation_timeout_seconds == 2.5

    def test_from_env_defaults(self) -> None:
        assert FilterConfig.from_env({}) == FilterConfig()

    def test_from_dotenv_file(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("RFE_SHELL", raising=False)
        dotenv = tmp_path / ".env"
        dotenv.write_text("RFE_SHELL=/bin/sh\n")

        config = FilterConfig.from_env(dotenv_path=dotenv)

        assert config.shell == "/bin/sh"
