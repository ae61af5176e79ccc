"""Services for porting and analysis."""

from .porter import PorterService

__all__ = ["PorterService"]
