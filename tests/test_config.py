import pytest

from backend.core.config import DEFAULT_MAX_BODY, Settings, parse_args


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ROBOT_SERVER_HOST", "ROBOT_SERVER_PORT", "PORT", "ROBOT_SERVER_MAX_BODY"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()
    assert settings.host == "0.0.0.0"
    assert settings.port == 3000
    assert settings.max_body_bytes == DEFAULT_MAX_BODY


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("ROBOT_SERVER_PORT", "8080")
    monkeypatch.setenv("ROBOT_SERVER_HOST", "127.0.0.1")
    settings = Settings.from_env()
    assert settings.port == 8080
    assert settings.host == "127.0.0.1"


def test_generic_port_variable(monkeypatch):
    monkeypatch.setenv("PORT", "5000")
    assert Settings.from_env().port == 5000


def test_specific_port_variable_wins(monkeypatch):
    monkeypatch.setenv("PORT", "5000")
    monkeypatch.setenv("ROBOT_SERVER_PORT", "6000")
    assert Settings.from_env().port == 6000


def test_bad_env_value(monkeypatch):
    monkeypatch.setenv("ROBOT_SERVER_PORT", "three-thousand")
    with pytest.raises(ValueError, match="ROBOT_SERVER_PORT"):
        Settings.from_env()


def test_port_out_of_range():
    with pytest.raises(ValueError):
        Settings(port=70000)


def test_cli_overrides_env(monkeypatch):
    monkeypatch.setenv("ROBOT_SERVER_PORT", "8080")
    settings = parse_args(["--port", "9000", "--max-body", "512"])
    assert settings.port == 9000
    assert settings.max_body_bytes == 512


def test_cli_defaults_come_from_env(monkeypatch):
    monkeypatch.setenv("ROBOT_SERVER_PORT", "8080")
    assert parse_args([]).port == 8080


def test_settings_are_immutable():
    settings = Settings()
    with pytest.raises(ValueError):
        settings.port = 1


def test_uptime_grows():
    settings = Settings()
    first = settings.uptime()
    assert first >= 0
    assert settings.uptime() >= first
