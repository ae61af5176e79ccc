"""Startup validation and configuration checks."""

from deps import logging

from .config import get_keywords_path, get_rules_path

logger = logging.getLogger(__name__)


def validate_config() -> None:
    """Warn about table override paths that do not exist.

    The loaders raise ConfigurationError for them anyway; the warning names
    the environment variable responsible.
    """
    for variable, path in (
        ("BASIC_PORTER_RULES_PATH", get_rules_path()),
        ("BASIC_PORTER_KEYWORDS_PATH", get_keywords_path()),
    ):
        if path is None:
            continue
        if not path.exists():
            logger.warning("%s points to a missing file: %s", variable, path)
        else:
            logger.info("Using %s=%s", variable, path)
