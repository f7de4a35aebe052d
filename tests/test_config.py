"""
Tests for environment-driven configuration.
"""
import pytest

import config as config_module
from config import Config, ContainerConfig, Environment, get_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "ARMATURE_ENVIRONMENT",
        "ARMATURE_ALLOW_OVERRIDING",
        "ARMATURE_REPORT_EARLY_COMPONENTS",
        "ARMATURE_PREINSTANTIATE",
        "ARMATURE_TRACING_ENABLED",
        "ARMATURE_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestContainerConfig:

    def test_defaults(self, clean_env):
        container = ContainerConfig()

        assert container.allow_descriptor_overriding
        assert container.report_early_components
        assert container.preinstantiate_singletons

    @pytest.mark.parametrize(
        "variable,attribute",
        [
            ("ARMATURE_ALLOW_OVERRIDING", "allow_descriptor_overriding"),
            ("ARMATURE_REPORT_EARLY_COMPONENTS", "report_early_components"),
            ("ARMATURE_PREINSTANTIATE", "preinstantiate_singletons"),
        ],
    )
    def test_flags_from_env(self, clean_env, variable, attribute):
        clean_env.setenv(variable, "false")

        assert getattr(ContainerConfig(), attribute) is False


class TestConfig:

    def test_environment_from_env(self, clean_env):
        clean_env.setenv("ARMATURE_ENVIRONMENT", "production")

        cfg = Config()

        assert cfg.env is Environment.PRODUCTION
        assert cfg.is_production

    def test_invalid_environment(self, clean_env):
        clean_env.setenv("ARMATURE_ENVIRONMENT", "moon")

        with pytest.raises(ValueError):
            Config()

    def test_to_dict(self, clean_env):
        data = Config().to_dict()

        assert data["env"] == "development"
        assert data["container"]["allow_descriptor_overriding"] is True
        assert data["tracing"]["enabled"] is False
        assert data["logging"]["json_format"] is False

    def test_get_config_is_cached(self, clean_env):
        clean_env.setattr(config_module, "_config", None)

        first = get_config()

        assert get_config() is first
