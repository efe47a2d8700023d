"""Configuration and logging setup tests."""

import io
import json
import logging
import sys

from roadserver_core.utils.config import AppConfig, env_values, load_config
from roadserver_core.utils.logging import ROOT_LOGGER, JSONFormatter, configure_logging


class TestAppConfig:
    """Test AppConfig."""

    def test_defaults(self):
        """Test default values."""
        config = AppConfig()
        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.max_request_size == 10 * 1024 * 1024
        assert config.cookie_secret == ""

    def test_from_dict_ignores_unknown_keys(self, caplog):
        """Test unknown keys are dropped with a warning."""
        with caplog.at_level("WARNING"):
            config = AppConfig.from_dict({"port": 8080, "flux": True})

        assert config.port == 8080
        assert "flux" in caplog.text

    def test_string_fields_coerced(self):
        """Test numeric values for string fields."""
        config = AppConfig.from_dict({"cookie_secret": 1234})
        assert config.cookie_secret == "1234"

    def test_merge(self):
        """Test merge gives overrides precedence."""
        config = AppConfig(port=8000, log_level="DEBUG")
        merged = config.merge({"port": 9000})

        assert merged.port == 9000
        assert merged.log_level == "DEBUG"
        assert config.port == 8000

    def test_from_json(self, tmp_path):
        """Test JSON files."""
        path = tmp_path / "server.json"
        path.write_text(json.dumps({"port": 4000, "access_log": True}))

        config = AppConfig.from_json(str(path))

        assert config.port == 4000
        assert config.access_log is True

    def test_from_yaml(self, tmp_path):
        """Test YAML files."""
        path = tmp_path / "server.yaml"
        path.write_text("host: 127.0.0.1\nport: 5000\nlog_format: json\n")

        config = AppConfig.from_yaml(str(path))

        assert config.host == "127.0.0.1"
        assert config.port == 5000
        assert config.log_format == "json"

    def test_from_env(self, monkeypatch):
        """Test environment variables are typed."""
        monkeypatch.setenv("ROADSERVER_PORT", "7000")
        monkeypatch.setenv("ROADSERVER_ACCESS_LOG", "true")
        monkeypatch.setenv("ROADSERVER_TIMEOUT", "2.5")

        config = AppConfig.from_env()

        assert config.port == 7000
        assert config.access_log is True
        assert config.timeout == 2.5


class TestLoadConfig:
    """Test layered loading."""

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test priority: env over file over defaults."""
        path = tmp_path / "server.yml"
        path.write_text("port: 5000\nlog_level: DEBUG\n")
        monkeypatch.setenv("ROADSERVER_PORT", "6000")

        config = load_config(str(path))

        assert config.port == 6000
        assert config.log_level == "DEBUG"
        assert config.host == "0.0.0.0"

    def test_missing_file(self, tmp_path, caplog):
        """Test a missing file falls back to defaults."""
        with caplog.at_level("WARNING"):
            config = load_config(str(tmp_path / "absent.yaml"))

        assert config.port == 3000
        assert "not found" in caplog.text

    def test_custom_prefix(self, monkeypatch):
        """Test a custom environment prefix."""
        monkeypatch.setenv("CATS_PORT", "1234")
        assert env_values("CATS_") == {"port": 1234}
        assert load_config(env_prefix="CATS_").port == 1234


class TestConfigureLogging:
    """Test logging setup."""

    def teardown_method(self):
        logger = logging.getLogger(ROOT_LOGGER)
        for handler in list(logger.handlers):
            if getattr(handler, "_roadserver", False):
                logger.removeHandler(handler)

    def test_text_format(self):
        """Test the text formatter."""
        stream = io.StringIO()
        configure_logging("INFO", "text", stream=stream)

        logging.getLogger(f"{ROOT_LOGGER}.test").info("hello")

        assert "[INFO]" in stream.getvalue()
        assert "hello" in stream.getvalue()

    def test_json_format(self):
        """Test the JSON formatter."""
        stream = io.StringIO()
        configure_logging("DEBUG", "json", stream=stream)

        logging.getLogger(f"{ROOT_LOGGER}.test").debug("hello")

        record = json.loads(stream.getvalue().strip())
        assert record["level"] == "DEBUG"
        assert record["message"] == "hello"
        assert record["logger"] == f"{ROOT_LOGGER}.test"

    def test_reconfigure_replaces_handler(self):
        """Test repeated calls do not stack handlers."""
        configure_logging("INFO", stream=io.StringIO())
        logger = configure_logging("INFO", stream=io.StringIO())

        owned = [h for h in logger.handlers if getattr(h, "_roadserver", False)]
        assert len(owned) == 1

    def test_json_exception(self):
        """Test exceptions are included in JSON output."""
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.getLogger("x").makeRecord(
                "x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        data = json.loads(JSONFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad"
