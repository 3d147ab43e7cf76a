"""Defines the settings model and the loader for the `[tool.fluentmap]` table."""

import logging
import sys
from pathlib import Path
from typing import Any, ClassVar

import tomli
from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

logger = logging.getLogger(__name__)


class FluentMapSettings(BaseSettings):
    """
    Settings for declaring mappings.

    Values are taken, in order of priority, from constructor arguments,
    ``FLUENTMAP_*`` environment variables and the ``[tool.fluentmap]`` table
    of the project's ``pyproject.toml``.
    """

    model_config = SettingsConfigDict(env_prefix="FLUENTMAP_", extra="ignore")

    log_level: str = "WARNING"
    """Level for the `fluentmap` logger when `setup_logging` is called without one."""

    case_sensitive_columns: bool = True
    """Whether new property mappings compare column names case-sensitively."""

    # Populated on the runtime subclass built by `load_settings`.
    tool_table: ClassVar[dict[str, Any]] = {}

    @field_validator("log_level")
    @classmethod
    def ensure_known_log_level(cls, value: str) -> str:
        """Fall back to WARNING, with a warning on stderr, for unknown level names."""
        level_name = value.upper()
        if not isinstance(logging.getLevelName(level_name), int):
            print(  # noqa: T201
                f"Warning: Invalid log_level setting '{value}'. Defaulting to WARNING.",
                file=sys.stderr,
            )
            return "WARNING"
        return level_name

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Read the pyproject table with the lowest priority."""
        return (init_settings, env_settings, InitSettingsSource(settings_cls, init_kwargs=dict(cls.tool_table)))


class FluentMapToml:
    """A helper class to find and parse the `[tool.fluentmap]` table of `pyproject.toml`."""

    def __init__(self, start_dir: Path | None = None, filename: str = "pyproject.toml"):
        """Initialize the FluentMapToml helper."""
        self.start_dir = start_dir or Path.cwd()
        self.filename = filename

    def find(self) -> Path | None:
        """
        Find the project file by searching up from the start directory.

        Returns:
            The path to the found file, or None if not found.

        """
        search_dir = self.start_dir.resolve()
        while True:
            p = search_dir / self.filename
            if p.is_file():
                return p
            if search_dir == search_dir.parent:
                return None
            search_dir = search_dir.parent

    def get_tool_table(self) -> dict[str, Any]:
        """Return the `[tool.fluentmap]` table, or an empty dict when there is none."""
        path = self.find()
        if not path:
            return {}

        with path.open("rb") as f:
            data = tomli.load(f)

        table = data.get("tool", {}).get("fluentmap", {})
        if not isinstance(table, dict):
            raise ValueError(f"`[tool.fluentmap]` in {path} must be a table.")
        logger.debug("Loaded [tool.fluentmap] from %s", path)
        return table


def load_settings(start_dir: Path | None = None, **overrides: Any) -> FluentMapSettings:
    """
    Build settings from `pyproject.toml`, the environment and ``overrides``.

    Args:
        start_dir: Directory to start the `pyproject.toml` search from.
            Defaults to the current working directory.
        **overrides: Explicit values that take precedence over every source.

    Raises:
        pydantic.ValidationError: If any source holds an invalid value. Unknown
            log level names fall back to WARNING instead.

    """
    tool_table = FluentMapToml(start_dir).get_tool_table()
    runtime_settings = type(
        "FluentMapRuntimeSettings",
        (FluentMapSettings,),
        {"tool_table": tool_table},
    )
    return runtime_settings(**overrides)


_settings: FluentMapSettings | None = None


def get_settings() -> FluentMapSettings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the next `get_settings` call reloads them."""
    global _settings
    _settings = None
