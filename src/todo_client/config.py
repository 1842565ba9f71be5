"""Configuration for the todo client.

Provides the TodoSettings class plus global and context-scoped access.

Settings Management:
    1. Global singleton (simple cases):
        set_settings(my_settings)
        settings = get_settings()

    2. Context-based (isolated contexts, tests):
        with SettingsContext(my_settings):
            settings = get_settings()  # Returns my_settings

Settings Loading Priority (highest to lowest):
    1. Constructor arguments
    2. Environment variables (TODO_CLIENT_* prefix)
    3. Project config (./.todo_client/settings.json)
    4. User config (~/.todo_client/settings.json)
    5. .env file
    6. Default values
"""

from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Generator, Literal, Tuple, Type

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings as PydanticBaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from todo_client.errors import ConfigurationError
from todo_client.logging import Loggers

__all__ = [
    "TodoSettings",
    "SettingsContext",
    "get_settings",
    "set_settings",
    "reload_settings",
    "validate_settings",
]

DEFAULT_APP_NAME = "todo_client"


def _get_json_config_source(
    settings_cls: Type[PydanticBaseSettings],
    json_file: Path,
) -> PydanticBaseSettingsSource | None:
    """Create a JSON config source if the file exists."""
    if not json_file.exists():
        return None
    return JsonConfigSettingsSource(settings_cls, json_file=json_file)


class TodoSettings(PydanticBaseSettings):
    """Settings for the todo client.

    The API host is the only value the client strictly needs; it is read
    once at startup and handed to the remote client.
    """

    model_config = SettingsConfigDict(
        env_prefix="TODO_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote service
    api_host: str = Field(
        default="http://localhost:5000",
        title="API Host",
        description="Base URL of the remote task service",
    )
    request_timeout: float = Field(
        default=10.0,
        title="Request Timeout",
        description="Per-request timeout in seconds",
    )

    # Application identity and disk layout
    app_name: str = Field(
        default=DEFAULT_APP_NAME,
        title="App Name",
        description="Application name, used for config directories",
    )
    workspace_dir: Path = Field(
        default_factory=lambda: Path.home() / f".{DEFAULT_APP_NAME}",
        title="Workspace Directory",
        description="Directory holding the persisted credential",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        title="Log Level",
        description="Logging verbosity level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        title="Log Format",
        description="Log output format (console for dev, json for production)",
    )

    # Synchronization behaviour
    notify_on_failure: bool = Field(
        default=False,
        title="Notify On Failure",
        description="Show an error notice when a remote mutation fails",
    )
    serialize_mutations: bool = Field(
        default=True,
        title="Serialize Mutations",
        description="Run overlapping mutations of the same task one at a time",
    )

    @field_validator("api_host", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("workspace_dir", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Expand ~ in paths."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @property
    def credentials_path(self) -> Path:
        """File holding the persisted auth token."""
        return self.workspace_dir / "credentials.json"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Layer JSON config files between the environment and .env.

        JSON sources are only included if the files exist.
        """
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
        ]

        app_name = DEFAULT_APP_NAME
        field_info = cls.model_fields.get("app_name")
        if field_info is not None and field_info.default:
            app_name = field_info.default

        project_json = _get_json_config_source(
            settings_cls,
            Path.cwd() / f".{app_name}" / "settings.json",
        )
        if project_json:
            sources.append(project_json)

        user_json = _get_json_config_source(
            settings_cls,
            Path.home() / f".{app_name}" / "settings.json",
        )
        if user_json:
            sources.append(user_json)

        sources.append(dotenv_settings)

        return tuple(sources)


# Context variable for settings (takes precedence over global singleton)
_settings_context: ContextVar[TodoSettings | None] = ContextVar(
    "settings_context", default=None
)

# Global settings instance holder (fallback when no context)
_settings_instance: TodoSettings | None = None


def get_settings() -> TodoSettings:
    """Get the current settings instance.

    Resolution order:
    1. Context variable (set via SettingsContext)
    2. Global singleton (set via set_settings)
    3. Fresh TodoSettings instance (created on first access)
    """
    context_settings = _settings_context.get()
    if context_settings is not None:
        return context_settings

    global _settings_instance
    if _settings_instance is None:
        _settings_instance = TodoSettings()
    return _settings_instance


def set_settings(settings: TodoSettings) -> None:
    """Set the global settings instance."""
    global _settings_instance
    _settings_instance = settings


@contextmanager
def SettingsContext(settings: TodoSettings) -> Generator[TodoSettings, None, None]:
    """Context manager for isolated settings.

    Example:
        with SettingsContext(test_settings) as s:
            # All get_settings() calls here return test_settings
            session = TodoSession.from_settings(get_settings())
    """
    token = _settings_context.set(settings)
    try:
        yield settings
    finally:
        _settings_context.reset(token)


def reload_settings() -> TodoSettings:
    """Reload settings (clears global singleton and context cache).

    Returns:
        Fresh TodoSettings instance
    """
    global _settings_instance
    _settings_instance = None
    _settings_context.set(None)
    return get_settings()


def validate_settings(settings: TodoSettings) -> None:
    """Validate settings for runtime use.

    Raises:
        ConfigurationError: If validation fails
    """
    errors = []

    if not settings.api_host.startswith(("http://", "https://")):
        errors.append(
            f"API host '{settings.api_host}' must be an http:// or https:// URL. "
            "Set TODO_CLIENT_API_HOST."
        )

    if settings.request_timeout <= 0:
        errors.append(
            f"Request timeout must be positive, got {settings.request_timeout}."
        )

    if errors:
        Loggers.config().error("settings_invalid", errors=errors)
        raise ConfigurationError("\n".join(errors))
