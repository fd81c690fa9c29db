"""Configuration management for MirrorSafe using Pydantic."""

from pathlib import Path
from typing import Literal, Optional

import tomli
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mirrorsafe.core.exceptions import ConfigurationError


class MirrorConfig(BaseModel):
    """Configuration for decal detection and mirroring."""

    model_config = ConfigDict(frozen=True)

    threshold: int = Field(
        3, ge=0, description="Components with at most this many triangles stay unmirrored"
    )
    epsilon: float = Field(
        1e-6, gt=0, description="Grid size for vertex coincidence (model units)"
    )
    default_axis: Literal["X", "Y", "Z"] = Field(
        "X", description="Axis used by the CLI when none is given"
    )


class LoadConfig(BaseModel):
    """Configuration for reading STL files."""

    model_config = ConfigDict(frozen=True)

    max_file_size: int = Field(
        1_000_000_000, gt=0, description="Maximum STL file size in bytes"
    )


class ExportConfig(BaseModel):
    """Configuration for STL export."""

    model_config = ConfigDict(frozen=True)

    format: Literal["binary", "ascii"] = Field(
        "binary", description="STL flavour written on export"
    )
    header: str = Field(
        "mirrorsafe", max_length=80, description="Binary STL header text"
    )
    solid_name: str = Field("mirrorsafe", description="Solid name for ASCII export")

    @field_validator("header")
    @classmethod
    def validate_header(cls, v: str) -> str:
        """Binary headers starting with 'solid' are mistaken for ASCII by readers."""
        if v.lstrip().lower().startswith("solid"):
            raise ValueError("binary STL header must not start with 'solid'")
        if not v.isascii():
            raise ValueError("binary STL header must be ASCII")
        return v

    @field_validator("solid_name")
    @classmethod
    def validate_solid_name(cls, v: str) -> str:
        """Keep the name on the solid line."""
        if "\n" in v or "\r" in v:
            raise ValueError("solid name must be a single line")
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING", description="Logging level"
    )
    format: Literal["json", "console", "plain"] = Field(
        "console", description="Log format"
    )
    log_file: Optional[Path] = Field(None, description="Optional JSON log file")
    colorize: bool = Field(True, description="Colorize console output on a TTY")
    add_caller_info: bool = Field(
        False, description="Add filename, line and function to events"
    )
    timestamp_format: str = Field("iso", description="structlog TimeStamper format")


class Config(BaseModel):
    """Main configuration for MirrorSafe."""

    model_config = ConfigDict(frozen=True)

    mirror: MirrorConfig = Field(
        default_factory=MirrorConfig, description="Mirroring configuration"
    )
    load: LoadConfig = Field(
        default_factory=LoadConfig, description="Loading configuration"
    )
    export: ExportConfig = Field(
        default_factory=ExportConfig, description="Export configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @classmethod
    def from_toml(cls, path: Path | str) -> "Config":
        """Load configuration from TOML file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the TOML or its values are invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "rb") as f:
            try:
                data = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(
                    f"Invalid TOML in '{path}': {e}", {"path": str(path)}
                ) from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Config instance

        Raises:
            ConfigurationError: If a value fails validation
        """
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e.error_count()} error(s)",
                {"errors": e.errors(include_url=False)},
            ) from e

    def to_dict(self) -> dict:
        """Convert configuration to a TOML-friendly dictionary.

        Returns:
            Configuration as dictionary
        """
        return self.model_dump(mode="json", exclude_none=True)

    def save_toml(self, path: Path | str) -> None:
        """Save configuration to TOML file.

        Args:
            path: Path to save TOML file
        """
        import tomli_w

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "wb") as f:
            tomli_w.dump(self.to_dict(), f)


def get_default_config() -> Config:
    """Get default configuration.

    Returns:
        Default Config instance
    """
    return Config()


def load_config(path: Optional[Path | str] = None) -> Config:
    """Load configuration from file or return defaults.

    Args:
        path: Optional path to configuration file

    Returns:
        Config instance
    """
    if path:
        return Config.from_toml(path)
    return get_default_config()
