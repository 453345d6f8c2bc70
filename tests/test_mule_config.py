import logging

import pytest

from mule.mule_config import Settings, configure_logging, load_settings
from mule.mule_scanner import DEFAULT_KEYWORDS, Scanner, TokenKind


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = load_settings(environ={})
    assert settings == Settings()
    assert settings.keywords == DEFAULT_KEYWORDS


def test_default_file_in_working_directory(tmp_path, monkeypatch):
    (tmp_path / "mule.yaml").write_text("cache-dir: /tmp/mule\ncache-ttl: 60\nlog-level: debug\n")
    monkeypatch.chdir(tmp_path)
    settings = load_settings(environ={})
    assert settings.cache_dir == "/tmp/mule"
    assert settings.cache_ttl == 60.0
    assert settings.log_level == "DEBUG"
    assert settings.cache_bucket == "data"


def test_explicit_file_and_keywords(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("keywords: [fetch, send]\ncache-bucket: responses\n")
    settings = load_settings(str(path), environ={})
    assert settings.keywords == ("fetch", "send")
    assert settings.cache_bucket == "responses"
    toks = list(Scanner("fetch get", settings.keywords))
    assert [t.type for t in toks] == [TokenKind.KEYWORD, TokenKind.IDENTIFIER, TokenKind.END_OF_INPUT]


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "mule.yaml"
    path.write_text("cache-dir: from-file\ncache-ttl: 60\n")
    env = {"MULE_CACHE_DIR": "from-env", "MULE_CACHE_TTL": "5", "MULE_LOG_LEVEL": "error"}
    settings = load_settings(str(path), environ=env)
    assert settings.cache_dir == "from-env"
    assert settings.cache_ttl == 5.0
    assert settings.log_level == "ERROR"


def test_missing_explicit_file_is_an_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "nope.yaml"), environ={})


@pytest.mark.parametrize("content", [
    "unknown-key: 1\n",
    "log-level: loud\n",
    "keywords: get\n",
    "- just\n- a list\n",
])
def test_invalid_settings(tmp_path, content):
    path = tmp_path / "mule.yaml"
    path.write_text(content)
    with pytest.raises(ValueError):
        load_settings(str(path), environ={})


def test_configure_logging(monkeypatch):
    seen = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: seen.update(kw))
    configure_logging(Settings(log_level="INFO"))
    assert seen == {"level": logging.INFO}
