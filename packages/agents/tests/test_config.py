"""Tests for the configuration system."""

import pytest
import structlog

from fiplan_agents.config import ChannelConfig, FIPlanConfig, load_config
from fiplan_core.assumptions import OptimizerSettings
from fiplan_core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run every test away from any real .env file and FIPLAN_ variables."""
    monkeypatch.chdir(tmp_path)
    for name in [
        "FIPLAN_ENV",
        "FIPLAN_LOG_LEVEL",
        "FIPLAN_CHANNEL_REQUEST_TIMEOUT_MS",
        "FIPLAN_CHANNEL_WORKER_THREAD_NAME",
    ]:
        monkeypatch.delenv(name, raising=False)


class TestChannelConfig:
    """Test suite for ChannelConfig."""

    def test_default_values(self):
        """ChannelConfig should have sensible defaults."""
        config = ChannelConfig()

        assert config.request_timeout_ms == 30000
        assert config.request_timeout_seconds == 30.0
        assert config.worker_thread_name == "fiplan-optimizer"

    def test_timeout_validation(self):
        """Timeout must be positive and bounded."""
        ChannelConfig(request_timeout_ms=1)
        ChannelConfig(request_timeout_ms=600_000)

        with pytest.raises(ValueError):
            ChannelConfig(request_timeout_ms=0)

        with pytest.raises(ValueError):
            ChannelConfig(request_timeout_ms=600_001)

    def test_thread_name_validation(self):
        with pytest.raises(ValueError):
            ChannelConfig(worker_thread_name="   ")

        assert ChannelConfig(worker_thread_name="  calc  ").worker_thread_name == "calc"

    def test_from_environment(self, monkeypatch):
        """ChannelConfig should load from environment variables."""
        monkeypatch.setenv("FIPLAN_CHANNEL_REQUEST_TIMEOUT_MS", "5000")
        monkeypatch.setenv("FIPLAN_CHANNEL_WORKER_THREAD_NAME", "calc-thread")

        config = ChannelConfig()

        assert config.request_timeout_ms == 5000
        assert config.request_timeout_seconds == 5.0
        assert config.worker_thread_name == "calc-thread"

    def test_from_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("FIPLAN_CHANNEL_REQUEST_TIMEOUT_MS=1234\n")

        assert ChannelConfig().request_timeout_ms == 1234


class TestFIPlanConfig:
    """Test suite for the root FIPlanConfig."""

    def test_default_values(self):
        config = FIPlanConfig()

        assert config.env == "development"
        assert config.log_level == "INFO"
        assert config.assumptions.inflation_rate == 7.0
        assert config.optimizer.max_solutions == 5
        assert config.channel.request_timeout_ms == 30000
        assert config.is_production is False
        assert config.is_debug is False

    def test_environment_validation(self):
        """Environment names are normalized and restricted."""
        assert FIPlanConfig(env="  PRODUCTION ").env == "production"
        assert FIPlanConfig(env="test").env == "test"

        with pytest.raises(ValueError):
            FIPlanConfig(env="local")

    def test_log_level_validation(self):
        assert FIPlanConfig(log_level="debug").log_level == "DEBUG"
        assert FIPlanConfig(log_level="debug").is_debug is True

        with pytest.raises(ValueError):
            FIPlanConfig(log_level="verbose")

    def test_nested_overrides(self):
        config = FIPlanConfig(
            channel=ChannelConfig(request_timeout_ms=100),
            optimizer=OptimizerSettings(max_solutions=3),
        )

        assert config.channel.request_timeout_ms == 100
        assert config.optimizer.max_solutions == 3

    def test_nested_from_environment(self, monkeypatch):
        """Nested assumption values use a double-underscore delimiter."""
        monkeypatch.setenv("FIPLAN_ENV", "staging")
        monkeypatch.setenv("FIPLAN_ASSUMPTIONS__INFLATION_RATE", "6.0")
        monkeypatch.setenv("FIPLAN_OPTIMIZER__MAX_SOLUTIONS", "3")

        config = FIPlanConfig()

        assert config.env == "staging"
        assert config.assumptions.inflation_rate == 6.0
        assert config.optimizer.max_solutions == 3

    def test_configure_logging(self):
        FIPlanConfig(log_level="WARNING").configure_logging()
        try:
            logger = structlog.get_logger()
            # Filtered levels are no-ops; neither call may raise.
            logger.info("suppressed_event")
            logger.warning("emitted_event")
        finally:
            structlog.reset_defaults()


class TestLoadConfig:
    """Test suite for load_config."""

    def test_valid(self):
        assert load_config(env="test").env == "test"

    def test_invalid_raises_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(log_level="loud")

        error = exc_info.value
        assert error.config_key == "log_level"
        assert error.recoverable is False
