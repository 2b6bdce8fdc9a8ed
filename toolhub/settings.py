"""Settings module.

This module provides configuration management for the tool server and its
tools, with support for reading from environment variables and a ``.env``
file. Every variable uses the ``TOOLHUB_`` prefix, e.g. ``TOOLHUB_FS_ROOT``.
"""

from typing import Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolhubSettings(BaseSettings):
    """Global settings for the tool server.

    Tool factories receive the values they need from here; the registry
    itself never reads configuration.
    """

    # Server settings
    server_name: str = Field("toolhub", description="Name advertised to MCP clients")
    log_level: str = Field("INFO", description="Logging level name")
    log_dir: Optional[str] = Field(None, description="Directory for rotating log files")

    # Filesystem tools
    fs_root: Optional[str] = Field(None, description="Restrict file tools to this directory")
    max_read_bytes: int = Field(1_000_000, gt=0, description="Maximum bytes returned by read_file")

    # HTTP and search tools
    http_timeout: float = Field(15.0, gt=0, description="HTTP request timeout in seconds")
    http_max_bytes: int = Field(100_000, gt=0, description="Maximum response bytes returned by http_fetch")
    http_max_retries: int = Field(3, ge=1, description="Attempts for transient HTTP connection errors")
    search_api_url: str = Field(
        "https://api.duckduckgo.com/",
        description="DuckDuckGo Instant Answer compatible endpoint",
    )
    search_timeout: float = Field(10.0, gt=0, description="Web search timeout in seconds")

    # Database tool
    databases: Dict[str, str] = Field(
        default_factory=lambda: {"default": ":memory:"},
        description="Database names mapped to SQLite paths",
    )
    database_read_only: bool = Field(False, description="Open file databases read-only")

    # Network tools
    ping_timeout: float = Field(20.0, gt=0, description="Overall timeout for the ping command")
    max_scan_ports: int = Field(1024, gt=0, description="Maximum ports per port_scan call")
    scan_concurrency: int = Field(100, gt=0, description="Concurrent connection attempts in port_scan")

    model_config = SettingsConfigDict(
        env_prefix="TOOLHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def log_level_known(cls, v: str) -> str:
        """Validate that the log level is a standard logging level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("databases")
    @classmethod
    def databases_not_empty(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Validate that at least one database is configured."""
        if not v:
            raise ValueError("At least one database must be configured")
        if any(not name.strip() for name in v):
            raise ValueError("Database names cannot be empty")
        return v
