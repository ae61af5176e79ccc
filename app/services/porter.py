"""Porter service: wraps basic_porter and maps results to API models."""

from deps import List, Optional, Path, logging

from basic_porter import (
    CompatibilityAnalyzer,
    DialectOptions,
    PortingPipeline,
    load_keyword_tables,
    load_rules,
)
from basic_porter.issue import CompatibilityIssue, KeyboardBufferSafetyResult, PortingResult
from basic_porter.reporter import ReportGenerator

from ..schemas import (
    CheckResponse,
    DialectOut,
    IssueOut,
    KeyboardSafetyResponse,
    KeywordOut,
    PortOptionsIn,
    PortResponse,
)

logger = logging.getLogger(__name__)


def _issue_to_out(i: CompatibilityIssue) -> IssueOut:
    return IssueOut(**i.to_dict())


class PorterService:
    """Loads the tables once and serves porting and analysis to the routes."""

    def __init__(self, rules_path: Optional[Path] = None, keywords_path: Optional[Path] = None):
        self.tables = load_keyword_tables(keywords_path)
        self.rules = load_rules(rules_path)
        self.pipeline = PortingPipeline(self.tables)
        self.analyzer = CompatibilityAnalyzer(self.rules, self.tables)
        logger.info(
            "Loaded %d rules and %d keywords (%d dialects)",
            len(self.rules), len(self.tables.all_keywords), len(self.tables.dialects),
        )

    def port(self, code: str, options: PortOptionsIn) -> PortingResult:
        """Raises ValueError for an unknown dialect."""
        return self.pipeline.port(code, DialectOptions.from_mapping(options.model_dump()))

    def port_response(self, result: PortingResult) -> PortResponse:
        return PortResponse(**result.to_dict())

    def check(self, code: str) -> CheckResponse:
        issues = self.analyzer.analyze(code)
        return CheckResponse(
            issues=[_issue_to_out(i) for i in issues],
            summary=ReportGenerator.generate_summary(issues),
        )

    def keyboard_safety(self, code: str) -> KeyboardSafetyResponse:
        result: KeyboardBufferSafetyResult = self.analyzer.check_keyboard_safety(code)
        return KeyboardSafetyResponse(**result.to_dict())

    def dialects(self) -> List[DialectOut]:
        return [DialectOut(**p.to_dict()) for p in self.pipeline.supported_dialects()]

    def dialect(self, name: str) -> Optional[DialectOut]:
        profile = self.tables.dialect(name)
        return DialectOut(**profile.to_dict()) if profile else None

    def keyword(self, word: str) -> KeywordOut:
        reserved = self.tables.is_reserved_word(word)
        return KeywordOut(
            word=word,
            is_keyword=self.tables.is_qb64_keyword(word),
            is_reserved=reserved,
            category=self.tables.keyword_category(word),
            canonical=self.tables.canonical_case(word),
            alternatives=self.tables.reserved_word_alternatives(word) if reserved else [],
        )

