from mt_dashboard import config


def test_polling_settings_present():
    assert config.HISTORY_WINDOW_DAYS == 7
    assert config.DEFAULT_REFRESH_RATE > 0
    assert config.REQUEST_TIMEOUT_SECONDS > 0


def test_session_record_key():
    assert config.SESSION_STORAGE_KEY == "mtAuth"
    assert config.SESSION_FILE.name.endswith(".json")


def test_known_servers_listed():
    assert "MetaQuotes-Demo" in config.KNOWN_SERVERS


def test_light_theme_colors():
    assert config.COLORS["background"] == "#f7f7f5"
