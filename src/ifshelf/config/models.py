"""Configuration models describing ifshelf settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IfShelfBaseModel(BaseModel):
    """Shared configuration for ifshelf Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class StorageSettings(IfShelfBaseModel):
    """Location and I/O options for the game library.

    Attributes:
        root: Storage root holding the games, games-meta, savegames and gamedata
            directories.
        copy_chunk_size: Number of bytes read per chunk when importing a game.
    """

    root: Path = Path("~/TextFiction")
    copy_chunk_size: int = Field(default=64 * 1024, gt=0)

    @field_validator("root")
    @classmethod
    def _expand_root(cls, value: Path) -> Path:
        return value.expanduser()


class InputSettings(IfShelfBaseModel):
    """Command composition options.

    Attributes:
        terminator: Text appended to every command sent to the engine.
    """

    terminator: str = "\n"


class LoggingSettings(IfShelfBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(IfShelfBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class IfShelfConfig(IfShelfBaseModel):
    """Top-level configuration struct for ifshelf.

    Attributes:
        storage: Library storage settings.
        input: Command composition settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    storage: StorageSettings = Field(default_factory=StorageSettings)
    input: InputSettings = Field(default_factory=InputSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "IfShelfBaseModel",
    "StorageSettings",
    "InputSettings",
    "LoggingSettings",
    "CLIOptions",
    "IfShelfConfig",
]
