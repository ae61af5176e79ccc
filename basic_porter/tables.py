"""
Keyword, dialect and rule tables.

The tables are built once by the loaders and shared read-only by every
analyzer and porting run.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Pattern, Tuple

from .issue import RuleExample, Severity

SIGILS = "%&!#$~"

RESERVED_CATEGORIES = ("statements", "functions", "operators", "types", "constants")

# Rule scopes: what the pattern is matched against.
SCOPE_CODE = "code"
SCOPE_STRINGS = "strings"
SCOPE_LINE = "line"
RULE_SCOPES = (SCOPE_CODE, SCOPE_STRINGS, SCOPE_LINE)


def strip_sigil(name: str) -> str:
    return name.rstrip(SIGILS)


@dataclass(frozen=True)
class DialectProfile:
    """What distinguishes one source dialect during porting.

    Only ``sigilless_string_functions`` changes what the passes do, and
    ``rules`` is the conversion checklist. ``keyword_casing``, ``line_numbers``
    and ``spaced_fn_calls`` are informational: keyword casing, line numbers
    and spaced FN calls are handled the same way for every dialect.
    """
    name: str
    display_name: str
    keyword_casing: str
    line_numbers: bool
    spaced_fn_calls: bool
    sigilless_string_functions: bool
    rules: Tuple[str, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "keyword_casing": self.keyword_casing,
            "line_numbers": self.line_numbers,
            "spaced_fn_calls": self.spaced_fn_calls,
            "sigilless_string_functions": self.sigilless_string_functions,
            "rules": list(self.rules),
        }


@dataclass(frozen=True)
class DeprecatedMetacommand:
    directive: str
    reason: str
    restores_prefixes: bool


@dataclass(frozen=True)
class KeywordTables:
    """QB64-PE keyword knowledge: reserved words, canonical spellings, dialects."""
    canonical: Mapping[str, str]
    categories: Mapping[str, FrozenSet[str]]
    reserved_words: FrozenSet[str]
    all_keywords: FrozenSet[str]
    prefixless: Mapping[str, str]
    graphics_keywords: FrozenSet[str]
    deprecated_metacommands: Tuple[DeprecatedMetacommand, ...]
    dialects: Mapping[str, DialectProfile] = field(default_factory=dict)

    def is_reserved_word(self, word: str) -> bool:
        """True if word, as written or with its type sigil removed, is reserved."""
        upper = word.strip().upper()
        return upper in self.reserved_words or strip_sigil(upper) in self.reserved_words

    def is_qb64_keyword(self, word: str) -> bool:
        upper = word.strip().upper()
        return upper in self.all_keywords

    def canonical_case(self, word: str) -> Optional[str]:
        """Canonical spelling of a keyword, or None if word is not one."""
        return self.canonical.get(word.upper())

    def keyword_category(self, word: str) -> Optional[str]:
        upper = word.strip().upper()
        for name, members in self.categories.items():
            if upper in members:
                return name
        return None

    def reserved_word_alternatives(self, word: str) -> List[str]:
        """Rename candidates for an identifier that collides with a reserved word."""
        base = strip_sigil(word.strip()).lower()
        candidates = [
            f"{base}_var",
            f"{base}_value",
            f"my_{base}",
            f"{base}1",
            f"user_{base}",
        ]
        return [c for c in candidates if not self.is_reserved_word(c)]

    def dialect(self, name: str) -> Optional[DialectProfile]:
        return self.dialects.get(name.lower())

    @property
    def dialect_names(self) -> List[str]:
        return list(self.dialects)


@dataclass(frozen=True)
class PatternRule:
    """A located-diagnostic rule: compiled case-insensitive pattern plus advice."""
    name: str
    pattern: Pattern
    severity: Severity
    category: str
    message: str
    suggestion: str
    examples: Optional[RuleExample] = None
    scope: str = SCOPE_CODE

    def matches_query(self, query: str) -> bool:
        q = query.lower()
        return any(
            q in text.lower()
            for text in (self.name, self.category, self.message, self.suggestion)
        )


@dataclass(frozen=True)
class RuleSet:
    """Ordered pattern rules; table order breaks ties between equal positions."""
    rules: Tuple[PatternRule, ...]
    best_practices: Tuple[str, ...] = ()

    def __len__(self):
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def search(self, query: str) -> List[PatternRule]:
        """Rules whose name, category, message or suggestion mention query."""
        if not query.strip():
            return list(self.rules)
        return [r for r in self.rules if r.matches_query(query.strip())]
