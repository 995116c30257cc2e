import pytest

from mediabot import config as config_module
from mediabot.config import load_config

ENV_VARS = [
    "DISCORD_TOKEN", "CLIENT_ID", "APPLICATION_ID", "GUILD_ID", "GUILD_IDS",
    "RADARR_URL", "RADARR_API_KEY", "RADARR_QUALITY_PROFILE_ID", "RADARR_ROOT_FOLDER",
    "SONARR_URL", "SONARR_API_KEY", "SONARR_QUALITY_PROFILE_ID", "SONARR_LANGUAGE_PROFILE_ID", "SONARR_ROOT_FOLDER",
    "READARR_URL", "READARR_API_KEY", "READARR_BOOK_QUALITY_PROFILE_ID", "READARR_BOOK_PATH",
    "SESSION_TTL_SECONDS", "ARR_TIMEOUT_SECONDS", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, mocker):
    mocker.patch.object(config_module, "load_dotenv")
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    cfg = load_config()
    assert cfg.discord_token == ""
    assert cfg.application_id is None
    assert cfg.guild_ids == []
    assert cfg.book_quality_profile_id == 1
    assert cfg.book_root_folder == "/books"
    assert cfg.movie_root_folder == "/movies"
    assert cfg.tv_root_folder == "/tv"
    assert cfg.session_ttl_seconds == 86400
    assert cfg.log_level == "INFO"


@pytest.mark.parametrize("raw, expected", [("7", 7), ("abc", 1), ("", 1), ("0", 1), ("-2", 1)])
def test_book_quality_profile_falls_back(clean_env, raw, expected):
    clean_env.setenv("READARR_BOOK_QUALITY_PROFILE_ID", raw)
    assert load_config().book_quality_profile_id == expected


def test_env_values(clean_env):
    clean_env.setenv("CLIENT_ID", "42")
    clean_env.setenv("GUILD_IDS", "1, 2,x")
    clean_env.setenv("RADARR_URL", "http://radarr:7878/api/v3/")
    clean_env.setenv("READARR_BOOK_PATH", "/data/books")
    clean_env.setenv("LOG_LEVEL", "debug")
    cfg = load_config()
    assert cfg.application_id == 42
    assert cfg.guild_ids == [1, 2]
    assert cfg.radarr_url == "http://radarr:7878/api/v3"
    assert cfg.book_root_folder == "/data/books"
    assert cfg.log_level == "DEBUG"


def test_single_guild_id(clean_env):
    clean_env.setenv("GUILD_ID", "99")
    assert load_config().guild_ids == [99]


def test_stray_runtime_json_file_is_not_read(clean_env, tmp_path):
    (tmp_path / "runtime_config.json").write_text('{"radarr_url": "http://elsewhere"}', encoding="utf-8")
    clean_env.chdir(tmp_path)
    cfg = load_config()
    assert cfg.radarr_url == ""
    assert not hasattr(cfg, "runtime_config_path")
