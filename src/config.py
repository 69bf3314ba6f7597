"""Centralized configuration for the SIGIL template engine."""

import os
from dataclasses import dataclass, field
from pathlib import Path


TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in TRUE_VALUES


@dataclass(frozen=True)
class EngineConfig:
    """Construction-time options for SigilEngine."""
    max_depth: int = 10  # nested value re-parses before values are left unresolved
    debug: bool = False
    seed: str | None = None


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the web server."""
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(frozen=True)
class PathConfig:
    """Centralized path configuration for the application."""

    @property
    def root_dir(self) -> Path:
        """Project root directory."""
        return Path(__file__).parent.parent

    @property
    def data_dir(self) -> Path:
        """Default directory scanned for *.yaml list data."""
        return self.root_dir / "data"


# Singleton path configuration instance
paths = PathConfig()


@dataclass
class Settings:
    """Application settings, can be overridden via environment variables."""
    engine: EngineConfig = field(default_factory=EngineConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    data_files: tuple[Path, ...] = ()

    def resolve_data_files(self) -> list[Path]:
        """Configured data files, or every YAML file in paths.data_dir."""
        if self.data_files:
            return list(self.data_files)
        if not paths.data_dir.is_dir():
            return []
        return sorted(paths.data_dir.glob("*.yaml")) + sorted(paths.data_dir.glob("*.yml"))

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables with SIGIL_ prefix."""
        engine = EngineConfig(
            max_depth=int(os.environ.get("SIGIL_MAX_DEPTH", EngineConfig.max_depth)),
            debug=_env_flag("SIGIL_DEBUG", EngineConfig.debug),
            seed=os.environ.get("SIGIL_SEED") or None,
        )
        server = ServerConfig(
            host=os.environ.get("SIGIL_HOST", ServerConfig.host),
            port=int(os.environ.get("SIGIL_PORT", ServerConfig.port)),
        )
        raw_files = os.environ.get("SIGIL_DATA_FILES", "")
        data_files = tuple(Path(p) for p in raw_files.split(os.pathsep) if p.strip())
        return cls(engine=engine, server=server, data_files=data_files)


# Global settings instance - use from_env() for environment-aware settings
settings = Settings.from_env()
