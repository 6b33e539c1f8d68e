"""
ASGI Core Module - Base class for modular ASGI components
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from fastapi import APIRouter, FastAPI
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class ASGICoreModule(BaseModel, ABC):
    """Base class for ASGI modules that can be mounted to ASGICoreApplication."""

    prefix: str = Field(default="", description="URL prefix for this module (e.g., '/api')")
    title: Optional[str] = Field(default=None, description="Module title")
    description: Optional[str] = Field(default=None, description="Module description")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    _app: Optional[FastAPI] = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        """Default the title to the class name and derive the description."""
        if self.title is None:
            self.title = self.__class__.__name__

        if self.description is None:
            self.description = f"{self.title} Module"

    @abstractmethod
    def setup_routes(self, router: APIRouter) -> None:
        """Set up module-specific routes.

        This method must be implemented by subclasses to define their routes.
        The router provided will already have the module prefix applied.

        Args:
            router: The APIRouter instance to add routes to
        """
        pass

    @property
    def app(self) -> FastAPI:
        """Create a FastAPI app instance with this module's routes.

        This is primarily for testing purposes. In production, the module
        should be mounted to an ASGICoreApplication.

        Returns:
            FastAPI app with module routes configured
        """
        if self._app is None:
            app = FastAPI(title=self.title or self.__class__.__name__)
            router = APIRouter()
            self.setup_routes(router)
            app.include_router(router, prefix=self.prefix)
            self._app = app
        return self._app
