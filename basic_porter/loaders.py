"""
One-time loaders for the bundled rule and keyword tables.

Any failure (missing file, bad JSON, wrong shape, invalid regex) is reported
as ConfigurationError, the only fatal error in the toolkit.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import ConfigurationError
from .issue import RuleExample, Severity
from .tables import (
    RESERVED_CATEGORIES,
    RULE_SCOPES,
    SCOPE_CODE,
    DeprecatedMetacommand,
    DialectProfile,
    KeywordTables,
    PatternRule,
    RuleSet,
)

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_RULES_PATH = DATA_DIR / "compatibility_rules.json"
DEFAULT_KEYWORDS_PATH = DATA_DIR / "keywords.json"

PathLike = Union[str, Path]


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError("table file not found", path=str(path))
    except OSError as e:
        raise ConfigurationError(f"could not read table file: {e}", path=str(path))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"invalid JSON: {e}", path=str(path))
    if not isinstance(data, dict):
        raise ConfigurationError("top-level JSON value must be an object", path=str(path))
    return data


def _build_rule(entry: Dict[str, Any]) -> PatternRule:
    scope = entry.get("scope", SCOPE_CODE)
    if scope not in RULE_SCOPES:
        raise ValueError(f"unknown scope {scope!r}")
    examples = None
    if entry.get("examples"):
        examples = RuleExample(
            incorrect=entry["examples"]["incorrect"],
            correct=entry["examples"]["correct"],
        )
    return PatternRule(
        name=entry["name"],
        pattern=re.compile(entry["regex"], re.IGNORECASE),
        severity=Severity(entry["severity"]),
        category=entry["category"],
        message=entry["message"],
        suggestion=entry["suggestion"],
        examples=examples,
        scope=scope,
    )


def load_rules(path: Optional[PathLike] = None) -> RuleSet:
    """Load the ordered compatibility rule set."""
    path = Path(path) if path else DEFAULT_RULES_PATH
    data = _read_json(path)
    rules = []
    for index, entry in enumerate(data.get("rules", [])):
        try:
            rules.append(_build_rule(entry))
        except re.error as e:
            raise ConfigurationError(f"rule {index}: invalid regex: {e}", path=str(path))
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"rule {index}: malformed entry: {e}", path=str(path))
    if not rules:
        raise ConfigurationError("rule set is empty", path=str(path))
    best_practices = tuple(str(p) for p in data.get("best_practices", []))
    logger.debug("Loaded %d compatibility rules from %s", len(rules), path)
    return RuleSet(rules=tuple(rules), best_practices=best_practices)


def _build_keyword_tables(data: Dict[str, Any]) -> KeywordTables:
    raw_categories = data["categories"]
    canonical: Dict[str, str] = {}
    categories = {}
    for name, words in raw_categories.items():
        categories[name] = frozenset(w.upper() for w in words)
        if name == "compound":
            continue
        for word in words:
            canonical.setdefault(word.upper(), word)

    reserved = frozenset().union(
        *(categories[name] for name in RESERVED_CATEGORIES if name in categories)
    )
    all_keywords = frozenset().union(*categories.values())

    # Bare spellings enabled by $NOPREFIX, except where the bare word is
    # already a classic keyword (WIDTH, OFF, ...).
    prefixless: Dict[str, str] = {}
    for upper, spelling in canonical.items():
        if upper.startswith("_") and len(upper) > 1:
            bare = upper[1:]
            if bare not in canonical:
                prefixless[bare] = spelling

    deprecated = tuple(
        DeprecatedMetacommand(
            directive=entry["directive"].upper(),
            reason=entry["reason"],
            restores_prefixes=bool(entry.get("restores_prefixes", False)),
        )
        for entry in data.get("deprecated_metacommands", [])
    )

    dialects = {}
    for name, entry in data.get("dialects", {}).items():
        dialects[name] = DialectProfile(
            name=name,
            display_name=entry["display_name"],
            keyword_casing=entry.get("keyword_casing", "upper"),
            line_numbers=bool(entry.get("line_numbers", False)),
            spaced_fn_calls=bool(entry.get("spaced_fn_calls", False)),
            sigilless_string_functions=bool(entry.get("sigilless_string_functions", False)),
            rules=tuple(entry.get("rules", [])),
        )

    return KeywordTables(
        canonical=canonical,
        categories=categories,
        reserved_words=reserved,
        all_keywords=all_keywords,
        prefixless=prefixless,
        graphics_keywords=frozenset(w.upper() for w in data.get("graphics_keywords", [])),
        deprecated_metacommands=deprecated,
        dialects=dialects,
    )


def load_keyword_tables(path: Optional[PathLike] = None) -> KeywordTables:
    """Load keyword categories, canonical spellings and dialect profiles."""
    path = Path(path) if path else DEFAULT_KEYWORDS_PATH
    data = _read_json(path)
    try:
        tables = _build_keyword_tables(data)
    except (KeyError, TypeError, AttributeError) as e:
        raise ConfigurationError(f"malformed keyword table: {e}", path=str(path))
    if not tables.reserved_words:
        raise ConfigurationError("keyword table defines no reserved words", path=str(path))
    logger.debug(
        "Loaded %d reserved words, %d dialects from %s",
        len(tables.reserved_words), len(tables.dialects), path,
    )
    return tables
