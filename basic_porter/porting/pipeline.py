"""
Ordered multi-pass porting pipeline.
"""

import logging
from typing import List, Optional

from ..issue import PortingResult
from ..options import DialectOptions
from ..source import SourceDocument
from ..tables import DialectProfile, KeywordTables
from .casing import KeywordCasingPass
from .declarations import DimSigilPass, ForwardDeclarationPass, TypeDeclarationPass
from .def_fn import DefFnPass
from .gosub import GosubPass
from .graphics import GraphicsPass
from .log import PortingLog
from .metacommands import MetacommandPass
from .review import CompatibilityReviewPass
from .substitutions import (
    ArraySyntaxPass,
    ExitStatementPass,
    MathConstantPass,
    StringFunctionPass,
    TimingPass,
)

logger = logging.getLogger(__name__)

# DEF FN conversion must run before the DIM sigil fix, and every rewrite
# before the review.
PASS_CLASSES = (
    MetacommandPass,
    ForwardDeclarationPass,
    KeywordCasingPass,
    DefFnPass,
    DimSigilPass,
    GosubPass,
    TypeDeclarationPass,
    ArraySyntaxPass,
    StringFunctionPass,
    MathConstantPass,
    ExitStatementPass,
    TimingPass,
    GraphicsPass,
    CompatibilityReviewPass,
)
PASS_ORDER = tuple(cls.name for cls in PASS_CLASSES)


class PortingPipeline:
    """Runs the porting passes in order over one shared log.

    Holds nothing but the keyword tables, so one instance may serve
    concurrent callers.
    """

    def __init__(self, tables: KeywordTables):
        self.tables = tables
        self.passes = [cls(tables) for cls in PASS_CLASSES]

    def port(self, source_text: str, options: Optional[DialectOptions] = None) -> PortingResult:
        options = options or DialectOptions()
        log = PortingLog()
        document = SourceDocument(source_text)

        for porting_pass in self.passes:
            logger.debug("Running %s pass", porting_pass.name)
            try:
                document = porting_pass.run(document, log, options)
            except Exception as e:
                logger.exception("Porting pass %s failed", porting_pass.name)
                log.error(f"{porting_pass.name} pass failed: {e}")

        return PortingResult(
            original_code=source_text,
            ported_code=document.render(),
            transformations=list(log.transformations),
            warnings=list(log.warnings),
            errors=list(log.errors),
            compatibility_level=log.compatibility_level(),
            summary=log.summary(),
        )

    def supported_dialects(self) -> List[DialectProfile]:
        return [self.tables.dialects[name] for name in self.tables.dialect_names]

    def dialect_rules(self, dialect: str) -> List[str]:
        """Conversion checklist for a source dialect."""
        profile = self.tables.dialect(dialect)
        if profile is None:
            raise ValueError(f"Unknown source dialect: {dialect}")
        return list(profile.rules)
