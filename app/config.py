"""Configuration from environment."""

from deps import Optional, Path, load_dotenv, os

load_dotenv()


def get_host() -> str:
    return os.environ.get("HOST", "0.0.0.0").strip()


def get_port() -> int:
    try:
        return int(os.environ.get("PORT", "8000"))
    except ValueError:
        return 8000


def get_log_level() -> str:
    """Root log level name. Default: INFO."""
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def _optional_path(name: str) -> Optional[Path]:
    value = os.environ.get(name, "").strip()
    return Path(value) if value else None


def get_rules_path() -> Optional[Path]:
    """Override for the bundled compatibility_rules.json, if set."""
    return _optional_path("BASIC_PORTER_RULES_PATH")


def get_keywords_path() -> Optional[Path]:
    """Override for the bundled keywords.json, if set."""
    return _optional_path("BASIC_PORTER_KEYWORDS_PATH")
