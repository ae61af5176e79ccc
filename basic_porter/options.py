"""
Porting options.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping


class SourceDialect(Enum):
    """Legacy BASIC dialects accepted as porting input."""
    QBASIC = "qbasic"
    GWBASIC = "gwbasic"
    QUICKBASIC = "quickbasic"
    VB_DOS = "vb-dos"
    APPLESOFT = "applesoft"
    COMMODORE = "commodore"
    AMIGA = "amiga"
    ATARI = "atari"
    VB6 = "vb6"
    VBNET = "vbnet"
    VBSCRIPT = "vbscript"
    FREEBASIC = "freebasic"


@dataclass(frozen=True)
class DialectOptions:
    """Options for one pipeline run; fixed for the duration of the run."""
    source_dialect: SourceDialect = SourceDialect.QBASIC
    add_modern_features: bool = True
    preserve_comments: bool = True
    convert_graphics: bool = True
    optimize_performance: bool = True

    def __post_init__(self):
        if isinstance(self.source_dialect, str):
            object.__setattr__(self, "source_dialect", SourceDialect(self.source_dialect.lower()))
        for f in fields(self):
            if f.name != "source_dialect" and not isinstance(getattr(self, f.name), bool):
                raise ValueError(f"{f.name} must be a bool")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DialectOptions":
        """Build options from a loose mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown porting option(s): {', '.join(unknown)}")
        return cls(**dict(data))
