"""
Shared accumulator threaded through one pipeline run.
"""

import logging
from typing import List

from ..issue import CompatibilityLevel, TransformationRecord

logger = logging.getLogger(__name__)

# More warnings than this downgrades the level to medium; any error means low.
MEDIUM_WARNING_THRESHOLD = 3


class PortingLog:
    """Transformations, warnings and errors of a single porting run."""

    def __init__(self):
        self.transformations: List[TransformationRecord] = []
        self.warnings: List[str] = []
        self.errors: List[str] = []

    def record(self, pass_name: str, description: str):
        logger.debug("[%s] %s", pass_name, description)
        self.transformations.append(TransformationRecord(pass_name, description))

    def warn(self, message: str):
        if message not in self.warnings:
            self.warnings.append(message)

    def error(self, message: str):
        if message not in self.errors:
            self.errors.append(message)

    def compatibility_level(self) -> CompatibilityLevel:
        if self.errors:
            return CompatibilityLevel.LOW
        if len(self.warnings) > MEDIUM_WARNING_THRESHOLD:
            return CompatibilityLevel.MEDIUM
        return CompatibilityLevel.HIGH

    def summary(self) -> str:
        return (
            f"Porting completed with {len(self.transformations)} transformation(s), "
            f"{len(self.warnings)} warning(s), and {len(self.errors)} error(s). "
            f"Compatibility level: {self.compatibility_level().value}."
        )
