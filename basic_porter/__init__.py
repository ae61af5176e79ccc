"""
Legacy BASIC to QB64-PE porting toolkit.

``port``, ``analyze`` and ``check_keyboard_safety`` load the bundled tables on
each call. Build a ``PortingPipeline`` or a ``CompatibilityAnalyzer`` once and
reuse it to avoid reloading, or to work with other tables.
"""

from .errors import ConfigurationError, PorterError
from .issue import (
    CompatibilityIssue,
    CompatibilityLevel,
    KeyboardBufferIssue,
    KeyboardBufferSafetyResult,
    KeyUsage,
    PortingResult,
    RiskLevel,
    Severity,
    TransformationRecord,
)
from .loaders import load_keyword_tables, load_rules
from .main_checker import CompatibilityAnalyzer
from .options import DialectOptions, SourceDialect
from .porting import PASS_ORDER, PortingPipeline
from .source import SourceDocument
from .tables import DialectProfile, KeywordTables, PatternRule, RuleSet


def port(source_text, options=None):
    return PortingPipeline(load_keyword_tables()).port(source_text, options)


def analyze(source_text):
    return CompatibilityAnalyzer(load_rules(), load_keyword_tables()).analyze(source_text)


def check_keyboard_safety(source_text):
    return CompatibilityAnalyzer(load_rules(), load_keyword_tables()).check_keyboard_safety(source_text)


__all__ = [
    'port',
    'analyze',
    'check_keyboard_safety',
    'load_rules',
    'load_keyword_tables',
    'PortingPipeline',
    'CompatibilityAnalyzer',
    'PASS_ORDER',
    'DialectOptions',
    'SourceDialect',
    'SourceDocument',
    'KeywordTables',
    'DialectProfile',
    'PatternRule',
    'RuleSet',
    'CompatibilityIssue',
    'CompatibilityLevel',
    'KeyboardBufferIssue',
    'KeyboardBufferSafetyResult',
    'KeyUsage',
    'PortingResult',
    'RiskLevel',
    'Severity',
    'TransformationRecord',
    'ConfigurationError',
    'PorterError',
]
