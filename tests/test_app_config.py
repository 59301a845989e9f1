import json

from utils import app_config


def test_missing_file_gives_defaults():
    assert app_config.load_config() == app_config.DEFAULTS
    assert app_config.get_db_path() == "finance.db"
    assert app_config.get_log_level() == "INFO"


def test_corrupt_file_gives_defaults():
    app_config.config_path().write_text("{not json", encoding="utf-8")
    assert app_config.load_config() == app_config.DEFAULTS


def test_set_db_path_round_trip(tmp_path):
    app_config.set_db_path(str(tmp_path / "ledger.db"))
    assert app_config.get_db_path() == str(tmp_path / "ledger.db")
    assert not app_config.config_path().with_suffix(".tmp").exists()

    app_config.set_db_path(None)
    assert app_config.get_db_path() == "finance.db"


def test_stored_values_override_defaults():
    app_config.config_path().write_text(json.dumps({"log_level": "debug"}), encoding="utf-8")
    config = app_config.load_config()
    assert config["db_path"] == "finance.db"
    assert app_config.get_log_level() == "DEBUG"
