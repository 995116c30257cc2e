import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv


@dataclass
class Config:
    discord_token: str
    application_id: Optional[int]
    guild_ids: List[int]

    # Radarr (movies)
    radarr_url: str
    radarr_api_key: str
    movie_quality_profile_id: int
    movie_root_folder: str

    # Sonarr (TV)
    sonarr_url: str
    sonarr_api_key: str
    tv_quality_profile_id: int
    tv_language_profile_id: int
    tv_root_folder: str

    # Readarr (books)
    readarr_url: str
    readarr_api_key: str
    book_quality_profile_id: int
    book_root_folder: str

    # Behavior
    session_ttl_seconds: int
    arr_timeout_seconds: int
    log_level: str


def getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        return default


def getenv_int_optional(name: str) -> Optional[int]:
    v = os.getenv(name)
    if v is None or v == "":
        return None
    try:
        return int(v)
    except ValueError:
        return None


def getenv_int_list(name: str) -> List[int]:
    v = os.getenv(name)
    if not v:
        return []
    out: List[int] = []
    for part in v.split(','):
        part = part.strip()
        if not part:
            continue
        try:
            out.append(int(part))
        except ValueError:
            continue
    return out


def getenv_profile_id(name: str, default: int = 1) -> int:
    # Unset, non-numeric and non-positive values all mean "use the default"
    v = getenv_int(name, default)
    return v if v > 0 else default


def load_config() -> Config:
    # Load .env if present
    load_dotenv()

    application_id = getenv_int_optional("CLIENT_ID")
    if application_id is None:
        application_id = getenv_int_optional("APPLICATION_ID")

    cfg = Config(
        discord_token=os.getenv("DISCORD_TOKEN", ""),
        application_id=application_id,
        guild_ids=(lambda single, multi: (multi if multi else ([single] if single is not None else [])))(
            getenv_int_optional("GUILD_ID"), getenv_int_list("GUILD_IDS")
        ),
        radarr_url=os.getenv("RADARR_URL", "").rstrip("/"),
        radarr_api_key=os.getenv("RADARR_API_KEY", ""),
        movie_quality_profile_id=getenv_profile_id("RADARR_QUALITY_PROFILE_ID"),
        movie_root_folder=os.getenv("RADARR_ROOT_FOLDER", "/movies"),
        sonarr_url=os.getenv("SONARR_URL", "").rstrip("/"),
        sonarr_api_key=os.getenv("SONARR_API_KEY", ""),
        tv_quality_profile_id=getenv_profile_id("SONARR_QUALITY_PROFILE_ID"),
        tv_language_profile_id=getenv_profile_id("SONARR_LANGUAGE_PROFILE_ID"),
        tv_root_folder=os.getenv("SONARR_ROOT_FOLDER", "/tv"),
        readarr_url=os.getenv("READARR_URL", "").rstrip("/"),
        readarr_api_key=os.getenv("READARR_API_KEY", ""),
        book_quality_profile_id=getenv_profile_id("READARR_BOOK_QUALITY_PROFILE_ID"),
        book_root_folder=os.getenv("READARR_BOOK_PATH") or "/books",
        session_ttl_seconds=max(0, getenv_int("SESSION_TTL_SECONDS", 86400)),
        arr_timeout_seconds=max(0, getenv_int("ARR_TIMEOUT_SECONDS", 0)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
    return cfg
