import sys, pytest
from pydantic import ValidationError

from core.config import DEFAULT_PORT, AppSettings, get_user_config_dir, write_user_env_vars


def test_defaults(monkeypatch):
    for key in ("DICTCLIENT_HOST", "DICTCLIENT_PORT", "DICTCLIENT_TIMEOUT_SECONDS"):
        monkeypatch.delenv(key, raising=False)
    settings = AppSettings(_env_file=None)
    assert settings.host == "dict.org"
    assert settings.port == DEFAULT_PORT == 2628
    assert settings.timeout_seconds is None
    assert settings.default_database == "*"
    assert settings.default_strategy == "."


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DICTCLIENT_HOST", "dict.example.org")
    monkeypatch.setenv("DICTCLIENT_PORT", "2629")
    monkeypatch.setenv("DICTCLIENT_SUGGEST_ON_MISS", "false")
    settings = AppSettings(_env_file=None)
    assert settings.host == "dict.example.org"
    assert settings.port == 2629
    assert settings.suggest_on_miss is False


@pytest.mark.parametrize("field,value", [("port", 0), ("port", 70000), ("timeout_seconds", 0), ("host", "")])
def test_invalid_values(field, value):
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, **{field: value})


@pytest.mark.skipif(sys.platform.startswith("win") or sys.platform == "darwin", reason="XDG layout")
def test_user_config_dir_follows_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert get_user_config_dir() == tmp_path / "dict-client"


def test_write_user_env_vars_merges_and_sorts(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    write_user_env_vars({"DICTCLIENT_PORT": "2628", "DICTCLIENT_HOST": "a.example"}, env_path)
    write_user_env_vars({"DICTCLIENT_HOST": "b.example", "DICTCLIENT_TIMEOUT_SECONDS": None}, env_path)
    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("#")
    assert lines[1:] == ["DICTCLIENT_HOST=b.example", "DICTCLIENT_PORT=2628"]


def test_env_file_is_read(tmp_path, monkeypatch):
    monkeypatch.delenv("DICTCLIENT_HOST", raising=False)
    env_path = write_user_env_vars({"DICTCLIENT_HOST": "from-file.example"}, tmp_path / ".env")
    assert AppSettings(_env_file=env_path).host == "from-file.example"
