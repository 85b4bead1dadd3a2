"""Tests for application initialization."""

from unittest.mock import patch

import pytest
from sqlalchemy import inspect as sa_inspect

from entityservice.exceptions import ConfigurationError
from entityservice.ormdb.database import get_session_factory
from entityservice.utils.config import initialize_application


@pytest.fixture
def quiet_bootstrap():
    """Skip .env loading and global logging changes."""
    with patch("entityservice.utils.config.load_dotenv") as mock_load_dotenv:
        with patch("entityservice.utils.config.setup_logging") as mock_setup_logging:
            yield {"load_dotenv": mock_load_dotenv, "setup_logging": mock_setup_logging}


class TestInitializeApplication:
    def test_configures_default_unit(self, quiet_bootstrap, monkeypatch):
        monkeypatch.setenv("DEFAULT_PERSISTENCE_UNIT", "app")

        factory = initialize_application()

        assert factory.unit_name == "app"
        assert get_session_factory() is factory
        assert "widgets" in sa_inspect(factory.engine).get_table_names()
        quiet_bootstrap["load_dotenv"].assert_called_once()
        quiet_bootstrap["setup_logging"].assert_called_once_with(
            level="INFO",
            format_type="structured",
            file_enabled=False,
            file_path="data/entityservice.log",
            max_file_size="10MB",
            backup_count=5,
        )

    def test_explicit_unit(self, quiet_bootstrap):
        assert initialize_application("reports").unit_name == "reports"

    def test_second_initialization_is_rejected(self, quiet_bootstrap):
        initialize_application("reports")

        with pytest.raises(ConfigurationError):
            initialize_application("reports")
