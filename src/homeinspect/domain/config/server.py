"""HTTP server configuration model."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Configuration for the HTTP server.

    Attributes:
        host: Interface to bind
        port: Port to listen on
        cors_origins: Allowed CORS origins
        max_body_bytes: Request body size ceiling
        static_dir: Directory served at "/" (None = no static files)
    """

    host: str = "0.0.0.0"
    port: int = Field(5000, gt=0, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    max_body_bytes: int = Field(50 * 1024 * 1024, gt=0)
    static_dir: Optional[str] = None
