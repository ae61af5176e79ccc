"""Route handlers."""

from .check import router as check_router
from .dialects import router as dialects_router
from .health import router as health_router
from .keyboard import router as keyboard_router
from .port import router as port_router
from .root import router as root_router

__all__ = [
    "root_router",
    "health_router",
    "port_router",
    "check_router",
    "keyboard_router",
    "dialects_router",
]
