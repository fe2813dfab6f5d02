from __future__ import annotations

import importlib.util
import json
import logging
import sys
from pathlib import Path

import pytest

# Garante que o pacote users_api seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from users_api.core import config as core_config  # noqa: E402
from users_api.core.logging import configure_logging, get_logger  # noqa: E402
from users_api.services.user_service import MissingFieldsError  # noqa: E402


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ("APP_ENV", "USERS_FILE", "USERS_STRICT_READS", "HOST", "PORT", "LOG_LEVEL", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    core_config.get_settings.cache_clear()
    yield monkeypatch
    core_config.get_settings.cache_clear()


def _load_add_user_script():
    spec = importlib.util.spec_from_file_location("add_user_script", ROOT / "scripts" / "add_user.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_settings_defaults(clean_env):
    settings = core_config.get_settings()
    assert settings.app_env == "dev"
    assert settings.users_file == Path("users.json")
    assert settings.strict_reads is False
    assert settings.port == 3000
    assert settings.log_level == "INFO"
    assert "http://localhost:3000" in settings.cors_origins


def test_settings_from_env(clean_env):
    clean_env.setenv("APP_ENV", "PROD")
    clean_env.setenv("USERS_FILE", "/data/users.json")
    clean_env.setenv("USERS_STRICT_READS", "true")
    clean_env.setenv("PORT", "not-a-number")
    clean_env.setenv("LOG_LEVEL", "debug")
    clean_env.setenv("CORS_ORIGINS", "https://a.example/, https://b.example")
    settings = core_config.get_settings()
    assert settings.app_env == "prod"
    assert settings.users_file == Path("/data/users.json")
    assert settings.strict_reads is True
    assert settings.port == 3000
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ("https://a.example", "https://b.example")


def test_configure_logging_is_idempotent():
    logger = configure_logging("DEBUG")
    handlers = list(logger.handlers)
    assert configure_logging("WARNING") is logger
    assert logger.handlers == handlers
    assert logger.level == logging.WARNING
    assert get_logger("services").name == "users_api.services"
    assert get_logger("users_api.app").parent is logger
    configure_logging("INFO")


def test_add_user_script_creates_user(clean_env, tmp_path, capsys):
    users_file = tmp_path / "users.json"
    users_file.write_text(json.dumps([{"id": 4, "name": "A", "age": 30, "email": "a@x.com"}]), encoding="utf-8")
    script = _load_add_user_script()

    assert script.main(["--name", "Ana", "--age", "31", "--email", "ana@x.com", "--file", str(users_file)]) == 0

    users = json.loads(users_file.read_text(encoding="utf-8"))
    assert users[-1] == {"id": 5, "name": "Ana", "age": 31, "email": "ana@x.com"}
    assert "ID: 5" in capsys.readouterr().out


def test_add_user_script_rejects_zero_age(clean_env, tmp_path):
    script = _load_add_user_script()
    with pytest.raises(MissingFieldsError):
        script.main(["--name", "Ana", "--age", "0", "--email", "ana@x.com", "--file", str(tmp_path / "u.json")])
    assert not (tmp_path / "u.json").exists()
