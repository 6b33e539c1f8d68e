"""ASGI building blocks for Concept Linker FastAPI applications."""

from .ASGICoreApplication import ASGICoreApplication
from .ASGICoreModule import ASGICoreModule
from .ASGITypes import ASGIConfig, CORSConfig, MiddlewareConfig

__all__ = [
    "ASGICoreApplication",
    "ASGICoreModule",
    "ASGIConfig",
    "CORSConfig",
    "MiddlewareConfig",
]
