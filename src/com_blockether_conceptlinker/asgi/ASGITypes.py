from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, Field


class CORSConfig(BaseModel):
    """CORS middleware configuration."""

    allow_origins: List[str] = Field(default=["*"])
    allow_credentials: bool = Field(default=True)
    allow_methods: List[str] = Field(default=["*"])
    allow_headers: List[str] = Field(default=["*"])
    max_age: int = Field(default=3600)
    expose_headers: List[str] = Field(default=["Content-Disposition"])


class MiddlewareConfig(BaseModel):
    """Middleware configuration."""

    model_config = {"arbitrary_types_allowed": True}

    middleware_class: Type[Any]
    options: Dict[str, Any] = Field(default_factory=dict)


class ASGIConfig(BaseModel):
    """ASGI application configuration."""

    model_config = {"arbitrary_types_allowed": True}

    # Core Settings
    title: str = Field(default="Concept Linker API")
    description: str = Field(default="Turns notes into an interlinked knowledge base")
    version: str = Field(default="0.1.0")

    # URL Configuration
    prefix: str = Field(default="")  # Root application prefix (e.g., "/v1")

    # Documentation
    docs_url: Optional[str] = Field(default="/docs")
    redoc_url: Optional[str] = Field(default=None)
    openapi_url: Optional[str] = Field(default="/openapi.json")

    # Middleware
    cors_config: Optional[CORSConfig] = Field(default=None)
    gzip_enabled: bool = Field(default=True)
    gzip_minimum_size: int = Field(default=1000)
    middleware: List[MiddlewareConfig] = Field(default_factory=list)

    # Server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)
    reload: bool = Field(default=False)
    debug: bool = Field(default=False)
