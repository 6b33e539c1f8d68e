"""
ASGI Core Application - Root application that hosts mounted modules
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, cast

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from .ASGICoreModule import ASGICoreModule
from .ASGITypes import ASGIConfig, MiddlewareConfig

logger = logging.getLogger(__name__)


class ASGICoreApplication:
    """Root ASGI application that manages mounted modules."""

    def __init__(self, config: Optional[ASGIConfig] = None) -> None:
        """Initialize the root ASGI application.

        Args:
            config: Optional ASGI configuration.
        """
        self.config = config or ASGIConfig()
        self.app: FastAPI = self._create_application()
        self._modules: Dict[str, ASGICoreModule] = {}

        self._configure_middleware()
        self._configure_health_route()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(f"Starting {self.config.title} application...")
        yield
        logger.info(f"Shutting down {self.config.title} application...")

    def _prefixed(self, url: Optional[str]) -> Optional[str]:
        if not url:
            return None
        return f"{self.config.prefix}{url}" if self.config.prefix else url

    def _create_application(self) -> FastAPI:
        return FastAPI(
            title=self.config.title,
            description=self.config.description,
            version=self.config.version,
            debug=self.config.debug,
            docs_url=self._prefixed(self.config.docs_url),
            redoc_url=self._prefixed(self.config.redoc_url),
            openapi_url=self._prefixed(self.config.openapi_url),
            lifespan=self._lifespan,
        )

    def _configure_middleware(self) -> None:
        """Configure global middleware for the application."""
        if self.config.gzip_enabled:
            self.app.add_middleware(GZipMiddleware, minimum_size=self.config.gzip_minimum_size)

        if self.config.cors_config:
            self.app.add_middleware(
                CORSMiddleware,
                allow_origins=self.config.cors_config.allow_origins,
                allow_credentials=self.config.cors_config.allow_credentials,
                allow_methods=self.config.cors_config.allow_methods,
                allow_headers=self.config.cors_config.allow_headers,
                max_age=self.config.cors_config.max_age,
                expose_headers=self.config.cors_config.expose_headers,
            )

        for middleware in self.config.middleware:
            self.add_middleware(middleware)

    def _configure_health_route(self) -> None:
        health_url = self._prefixed("/health") or "/health"

        @self.app.get(health_url)
        async def health() -> Dict[str, Any]:
            return {"status": "ok", "version": self.config.version, "modules": self.module_names}

    @property
    def module_names(self) -> List[str]:
        return list(self._modules)

    def mount_module(self, module: ASGICoreModule, prefix: Optional[str] = None) -> None:
        """Mount an ASGICoreModule to this application.

        Args:
            module: The ASGICoreModule instance to mount
            prefix: Optional prefix override (uses module's prefix if not provided)
        """
        module_prefix = prefix or module.prefix
        full_prefix = f"{self.config.prefix}{module_prefix}" if self.config.prefix else module_prefix

        router = APIRouter(prefix=full_prefix)
        module.setup_routes(router)
        self.app.include_router(router)

        module_name = module.__class__.__name__
        self._modules[module_name] = module
        logger.info(f"Mounted {module_name} at '{full_prefix or '/'}'")

    def add_middleware(self, middleware_config: MiddlewareConfig) -> None:
        """Add middleware to the application.

        Args:
            middleware_config: Middleware configuration to add.
        """
        self.app.add_middleware(
            cast(Any, middleware_config.middleware_class),
            **middleware_config.options,
        )

    def run(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        reload: Optional[bool] = None,
        **kwargs: Any,
    ) -> None:
        """Run the application using uvicorn.

        Args:
            host: Host to bind to (uses config if not provided)
            port: Port to bind to (uses config if not provided)
            reload: Enable auto-reload (uses config if not provided)
            **kwargs: Additional uvicorn parameters
        """
        uvicorn.run(
            self.app,
            host=host or self.config.host,
            port=port or self.config.port,
            reload=reload if reload is not None else self.config.reload,
            **kwargs,
        )
