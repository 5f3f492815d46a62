import logging

from aqio.core.logging.builder import make_dict_config, setup_logging


# A minimal Settings-like object
class DummySettings:
    LOG_FORMAT = "json"
    LOG_LEVEL = "INFO"
    LOG_TO_STDOUT = False
    LOG_DIR = None  # set per test
    LOG_MAX_BYTES = 1000
    LOG_BACKUP_COUNT = 1
    ENV = "development"
    ENABLE_SQL_LOGGING = False


def test_make_dict_config_contains_handlers(tmp_path):
    settings = DummySettings()
    settings.LOG_DIR = tmp_path
    cfg = make_dict_config(settings)
    assert "console" in cfg["handlers"]
    # Writing to files: rotating app log plus the JSON error log
    assert cfg["handlers"]["file"]["filename"].endswith("aqio.log")
    assert cfg["handlers"]["error_file"]["formatter"] == "json"
    assert "json" in cfg["formatters"]
    assert cfg["formatters"]["json"]["service"] == "aqio"


def test_stdout_mode_has_no_file_handlers(tmp_path):
    settings = DummySettings()
    settings.LOG_DIR = tmp_path
    settings.LOG_TO_STDOUT = True
    cfg = make_dict_config(settings)
    assert "file" not in cfg["handlers"]
    assert "error_console" in cfg["handlers"]


def test_sql_logging_toggle(tmp_path):
    settings = DummySettings()
    settings.LOG_DIR = tmp_path
    assert make_dict_config(settings)["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
    settings.ENABLE_SQL_LOGGING = True
    assert make_dict_config(settings)["loggers"]["sqlalchemy.engine"]["level"] == "INFO"


def test_setup_logging_creates_log_dir(tmp_path):
    settings = DummySettings()
    settings.LOG_DIR = tmp_path / "logs"
    assert not settings.LOG_DIR.exists()
    setup_logging(settings)
    assert settings.LOG_DIR.exists()
    assert logging.getLogger().handlers
