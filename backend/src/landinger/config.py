# backend/src/landinger/config.py
"""Configuration system for the Landinger backend.

Settings come from two places: an optional INI file holding tunables
(token budget, retry policy, storage options) and environment variables
holding deployment concerns (provider credentials, backend selection, paths).
"""

from configparser import ConfigParser
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional
import os

from landinger.constants.llm import DEFAULT_MODELS, DEFAULT_PROVIDER
from landinger.constants.pages import VIEW_ROUTE_PREFIX
from landinger.constants.storage import STORAGE_BACKENDS


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# Schema: section -> key -> (type, default, min, max, description)
CONFIG_SCHEMA: dict[str, dict[str, tuple[type, Any, Any, Any, str]]] = {
    "llm": {
        "max_tokens": (int, 8192, 256, 32768, "Max response tokens"),
        "temperature": (float, 0.7, 0.0, 2.0, "Sampling temperature for page generation"),
    },
    "retry": {
        "max_attempts": (int, 3, 1, 10, "Total attempts when the provider is overloaded"),
        "delay_seconds": (float, 2.0, 0.0, 60.0, "Fixed delay between overload retries"),
    },
    "storage": {
        "backend": (str, "memory", None, None, "memory, filesystem, blob or database"),
        "pages_dir": (str, "site", None, None, "Filesystem backend directory under data dir"),
        "database_file": (str, "pages.db", None, None, "Database backend file under data dir"),
        "git_commit": (bool, False, None, None, "Commit filesystem changes with git"),
        "git_push": (bool, False, None, None, "Push filesystem commits to the remote"),
    },
    "server": {
        "cors_origins": (str, "*", None, None, "Comma-separated allowed CORS origins"),
    },
}


@dataclass(frozen=True)
class LLMConfig:
    """LLM call configuration."""

    max_tokens: int
    temperature: float


@dataclass(frozen=True)
class RetryConfig:
    """Overload retry policy."""

    max_attempts: int
    delay_seconds: float


@dataclass(frozen=True)
class StorageConfig:
    """Storage backend configuration."""

    backend: str
    pages_dir: str
    database_file: str
    git_commit: bool
    git_push: bool


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server configuration."""

    cors_origins: str


def _defaults(section: str) -> dict[str, Any]:
    return {key: default for key, (_, default, _, _, _) in CONFIG_SCHEMA[section].items()}


def _load_section(
    parser: ConfigParser, section: str, schema: dict[str, tuple[type, Any, Any, Any, str]]
) -> dict[str, Any]:
    """Load and validate a configuration section.

    Args:
        parser: ConfigParser instance with loaded config
        section: Section name to load
        schema: Schema definition for the section

    Returns:
        Dictionary of validated configuration values

    Raises:
        ConfigError: If validation fails
    """
    result = {}

    for key, (typ, default, min_val, max_val, _) in schema.items():
        if parser.has_option(section, key):
            raw_value = parser.get(section, key)
            value: bool | int | float | str
            try:
                if typ is bool:
                    value = raw_value.lower() in ("true", "1", "yes", "on")
                elif typ is int:
                    value = int(raw_value)
                elif typ is float:
                    value = float(raw_value)
                else:
                    value = raw_value
            except ValueError as e:
                raise ConfigError(
                    f"Invalid value for [{section}].{key}: {raw_value!r} (expected {typ.__name__})"
                ) from e
        else:
            value = default

        if typ in (int, float) and value is not None:
            if min_val is not None and value < min_val:
                raise ConfigError(
                    f"Value for [{section}].{key} is {value}, but minimum is {min_val}"
                )
            if max_val is not None and value > max_val:
                raise ConfigError(
                    f"Value for [{section}].{key} is {value}, but maximum is {max_val}"
                )

        result[key] = value

    return result


def _load_config(config_path: Optional[Path] = None) -> "Config":
    """Load configuration from an INI file (internal use only).

    Environment-derived fields keep their defaults; load_settings() fills them in.

    Args:
        config_path: Path to config file. If None, uses defaults from schema.

    Returns:
        Config object with all sections populated.

    Raises:
        ConfigError: If validation fails
    """
    parser = ConfigParser()

    if config_path and config_path.exists():
        parser.read(config_path)

    storage = StorageConfig(**_load_section(parser, "storage", CONFIG_SCHEMA["storage"]))
    if storage.backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"Invalid value for [storage].backend: {storage.backend!r} "
            f"(expected one of {', '.join(STORAGE_BACKENDS)})"
        )

    return Config(
        llm=LLMConfig(**_load_section(parser, "llm", CONFIG_SCHEMA["llm"])),
        retry=RetryConfig(**_load_section(parser, "retry", CONFIG_SCHEMA["retry"])),
        storage=storage,
        server=ServerConfig(**_load_section(parser, "server", CONFIG_SCHEMA["server"])),
    )


@dataclass(frozen=True)
class Config:
    """Complete application configuration."""

    data_dir: Path = None  # type: ignore[assignment]  # Set in __post_init__ if None
    active_provider: str = DEFAULT_PROVIDER
    active_model: str = DEFAULT_MODELS[DEFAULT_PROVIDER]
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    google_api_key: Optional[str] = None
    ollama_endpoint: str = "http://localhost:11434"

    # Public URL prefix pages are served from. Unset means /view, except for
    # the blob backend where pages are served from the bucket itself
    public_base_url: Optional[str] = None

    # Blob backend (S3-compatible)
    blob_bucket: Optional[str] = None
    blob_region: Optional[str] = None
    blob_endpoint_url: Optional[str] = None
    blob_public_base_url: Optional[str] = None

    llm: LLMConfig = None  # type: ignore[assignment]
    retry: RetryConfig = None  # type: ignore[assignment]
    storage: StorageConfig = None  # type: ignore[assignment]
    server: ServerConfig = None  # type: ignore[assignment]

    def __post_init__(self):
        """Initialize section configs with defaults if not provided."""
        # Since frozen=True, we need to use object.__setattr__
        if self.data_dir is None:
            object.__setattr__(self, "data_dir", Path.home() / ".landinger")
        if self.llm is None:
            object.__setattr__(self, "llm", LLMConfig(**_defaults("llm")))
        if self.retry is None:
            object.__setattr__(self, "retry", RetryConfig(**_defaults("retry")))
        if self.storage is None:
            object.__setattr__(self, "storage", StorageConfig(**_defaults("storage")))
        if self.server is None:
            object.__setattr__(self, "server", ServerConfig(**_defaults("server")))

    @property
    def pages_path(self) -> Path:
        """Root directory for the filesystem backend."""
        return self.data_dir / self.storage.pages_dir

    @property
    def database_path(self) -> Path:
        """SQLite file for the database backend."""
        return self.data_dir / self.storage.database_file

    @property
    def llm_log_path(self) -> Path:
        """Path to LLM query log file."""
        return self.data_dir / "logs" / "llm-queries.jsonl"

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [o.strip() for o in self.server.cors_origins.split(",") if o.strip()]

    @property
    def page_url_base(self) -> Optional[str]:
        """Prefix for public page URLs, or None to use the backend object URL."""
        if self.public_base_url:
            return self.public_base_url
        if self.storage.backend == "blob":
            return None
        return VIEW_ROUTE_PREFIX

    @property
    def llm_provider(self) -> str:
        """LLM provider name."""
        return self.active_provider

    @property
    def llm_model(self) -> str:
        """LLM model name."""
        return self.active_model

    @property
    def llm_api_key(self) -> Optional[str]:
        """API key for the active LLM provider."""
        provider_keys = {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
            "google": self.google_api_key,
        }
        return provider_keys.get(self.active_provider)

    @property
    def llm_endpoint(self) -> Optional[str]:
        """Endpoint for LLM provider (mainly for Ollama)."""
        if self.active_provider == "ollama":
            return self.ollama_endpoint
        return None


def _detect_provider_from_keys() -> tuple[str, str]:
    """Auto-detect provider from available API keys.

    Returns:
        Tuple of (provider, model) based on available keys.
        Falls back to anthropic when no keys are found.
    """
    if os.getenv("ANTHROPIC_API_KEY"):
        return ("anthropic", DEFAULT_MODELS["anthropic"])
    if os.getenv("OPENAI_API_KEY"):
        return ("openai", DEFAULT_MODELS["openai"])
    if os.getenv("GOOGLE_API_KEY"):
        return ("google", DEFAULT_MODELS["google"])
    return (DEFAULT_PROVIDER, DEFAULT_MODELS[DEFAULT_PROVIDER])


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


@lru_cache(maxsize=1)
def load_settings() -> Config:
    """Load settings from environment variables and config file.

    Settings are cached for the lifetime of the application.
    Use load_settings.cache_clear() to reload settings.

    Returns:
        Config object populated from environment variables and config file.

    Raises:
        ConfigError: If the config file or STORAGE_BACKEND is invalid.
    """
    data_dir_str = os.getenv("LANDINGER_DATA_DIR")
    data_dir = Path(data_dir_str) if data_dir_str else Path.home() / ".landinger"

    config_path_str = os.getenv("LANDINGER_CONFIG")
    config_file = Path(config_path_str) if config_path_str else data_dir / "config.ini"
    try:
        config_exists = config_file.exists()
    except PermissionError:
        config_exists = False
    base_config = _load_config(config_file if config_exists else None)

    active_provider = os.getenv("ACTIVE_PROVIDER")
    active_model = os.getenv("ACTIVE_MODEL")

    if not active_provider:
        detected_provider, detected_model = _detect_provider_from_keys()
        active_provider = detected_provider
        if not active_model:
            active_model = detected_model
    elif not active_model:
        active_model = DEFAULT_MODELS.get(active_provider, DEFAULT_MODELS[DEFAULT_PROVIDER])

    backend = os.getenv("STORAGE_BACKEND", base_config.storage.backend)
    if backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"Invalid STORAGE_BACKEND: {backend!r} (expected one of {', '.join(STORAGE_BACKENDS)})"
        )
    storage = StorageConfig(
        backend=backend,
        pages_dir=base_config.storage.pages_dir,
        database_file=base_config.storage.database_file,
        git_commit=_env_flag("PAGES_GIT_COMMIT", base_config.storage.git_commit),
        git_push=_env_flag("PAGES_GIT_PUSH", base_config.storage.git_push),
    )

    public_base_url = os.getenv("PUBLIC_BASE_URL")
    cors_origins = os.getenv("CORS_ORIGINS")
    server = ServerConfig(cors_origins=cors_origins) if cors_origins else base_config.server

    return Config(
        data_dir=data_dir,
        active_provider=active_provider,
        active_model=active_model,
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
        google_api_key=os.getenv("GOOGLE_API_KEY"),
        ollama_endpoint=os.getenv("OLLAMA_ENDPOINT", "http://localhost:11434"),
        public_base_url=public_base_url.rstrip("/") if public_base_url else None,
        blob_bucket=os.getenv("BLOB_BUCKET"),
        blob_region=os.getenv("BLOB_REGION"),
        blob_endpoint_url=os.getenv("BLOB_ENDPOINT_URL"),
        blob_public_base_url=os.getenv("BLOB_PUBLIC_BASE_URL"),
        llm=base_config.llm,
        retry=base_config.retry,
        storage=storage,
        server=server,
    )
