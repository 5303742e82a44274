"""Configuration for the Kubernetes API discovery MCP server."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TransportMode(str, Enum):
    """MCP transport the server runs with."""

    STDIO = "stdio"
    SSE = "sse"
    STREAMABLE_HTTP = "streamable-http"


class LogLevel(str, Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class DeclarationSourceMode(str, Enum):
    """Where type declarations are read from."""

    KUBERNETES = "kubernetes"
    DIRECTORY = "directory"


class KubeDiscoveryConfig(BaseSettings):
    """Configuration for the discovery server.

    Loaded from environment variables with the KUBE_DISCOVERY_ prefix
    or from a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="KUBE_DISCOVERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Transport settings
    transport: TransportMode = Field(
        default=TransportMode.STDIO,
        description="MCP transport mode",
    )
    host: str = Field(
        default="127.0.0.1",
        description="Host to bind HTTP transports to",
    )
    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port to bind HTTP transports to",
    )
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )

    # Search settings
    default_search_limit: int = Field(
        default=10,
        ge=1,
        description="Page size used when a search does not give one",
    )
    max_search_limit: int = Field(
        default=50,
        ge=1,
        description="Largest page size a search may request",
    )
    overfetch_factor: int = Field(
        default=5,
        ge=1,
        description="Multiplier applied to the page size when fetching ranked candidates",
    )
    min_search_window: int = Field(
        default=50,
        ge=1,
        description="Smallest number of ranked candidates fetched before filtering",
    )
    search_tolerance: int = Field(
        default=1,
        ge=0,
        le=2,
        description="Maximum edit distance for typo-tolerant matching",
    )
    prewarm_index: bool = Field(
        default=True,
        description="Build the method catalog and search index at server startup",
    )
    registry_path: Path | None = Field(
        default=None,
        description="YAML file listing API groupings; introspects the kubernetes client when unset",
    )
    scripts_dir: Path = Field(
        default=Path.home() / ".kube-discovery-mcp" / "scripts",
        description="Directory agents save reusable client scripts to",
    )

    # Type lookup settings
    declaration_source: DeclarationSourceMode = Field(
        default=DeclarationSourceMode.KUBERNETES,
        description="Where type declarations are read from",
    )
    declarations_path: Path | None = Field(
        default=None,
        description="Directory of <TypeName>.d.ts declaration files (directory mode)",
    )
    max_type_properties: int = Field(
        default=20,
        ge=1,
        description="Fields shown per type before the remainder is summarized",
    )
    max_expansion_depth: int = Field(
        default=3,
        ge=1,
        description="Deepest nesting level rendered by inline type expansion",
    )
    cache_types_across_requests: bool = Field(
        default=True,
        description="Reuse parsed type declarations across lookup requests",
    )

    @property
    def search_window(self) -> int:
        """Number of ranked candidates fetched before filtering."""
        return max(self.max_search_limit * self.overfetch_factor, self.min_search_window)

    def validate_declaration_config(self) -> list[str]:
        """Validate type lookup and registry settings.

        Returns:
            List of warnings for settings that work but look unintended.

        Raises:
            ValueError: If the settings cannot work.
        """
        warnings: list[str] = []

        if self.declaration_source == DeclarationSourceMode.DIRECTORY:
            if self.declarations_path is None:
                raise ValueError("declarations_path is required when declaration_source is 'directory'")
            if not self.declarations_path.is_dir():
                raise ValueError(f"Declarations directory not found: {self.declarations_path}")
        elif self.declarations_path is not None:
            warnings.append(
                "declarations_path is set but ignored because declaration_source is 'kubernetes'"
            )

        if self.registry_path is not None and not self.registry_path.is_file():
            raise ValueError(f"Registry file not found: {self.registry_path}")

        if self.default_search_limit > self.max_search_limit:
            warnings.append(
                f"default_search_limit ({self.default_search_limit}) exceeds "
                f"max_search_limit ({self.max_search_limit}); searches will be capped"
            )

        return warnings


_config: KubeDiscoveryConfig | None = None


def get_config() -> KubeDiscoveryConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = KubeDiscoveryConfig()
    return _config
