import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self

DEFAULT_DATA_DIR = "~/.local/share/cardscope"


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by CARDSCOPE_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("CARDSCOPE_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "cardscope"
    version: str = "0.1.0"
    description: str = "Faceted browsing over a card catalog"


class DatabaseConfig(BaseModel):
    """Database configuration for the SQL card source.

    An empty url means "SQLite file under the data directory"; Config derives
    the real value.
    """

    url: str = ""
    echo: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from CARDSCOPE_LOG_FILE env var."""
        return os.environ.get("CARDSCOPE_LOG_FILE")


class CatalogConfig(BaseModel):
    """Card source selection and page serving limits."""

    backend: Literal["memory", "sql"] = "memory"
    seed_file: str | None = None  # JSON list of cards for the memory backend
    default_limit: int = 72
    max_limit: int = 400
    cache_pages: bool = True


class BrowseConfig(BaseModel):
    """Incremental loading and scroll restoration constants."""

    first_batch: int = 24
    middle_batch: int = 72
    middle_batches_until: int = 3  # batches 2..N use middle_batch
    later_batch: int = 144
    restore_batch_max: int = 400
    max_batches: int = 100  # safety cap per filter state
    scroll_settle_ms: int = 150
    text_debounce_ms: int = 350
    restore_namespace: str = "cardsGridRestore"


class Config(BaseSettings):
    server: Server = Server()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    catalog: CatalogConfig = CatalogConfig()
    browse: BrowseConfig = BrowseConfig()

    model_config = {
        "env_prefix": "CARDSCOPE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows CARDSCOPE_DATABASE__URL override
    }

    @model_validator(mode="after")
    def derive_database_url(self) -> Self:
        """Default the database to a SQLite file under CARDSCOPE_DATA_DIR."""
        if not self.database.url:
            data_dir = Path(os.environ.get("CARDSCOPE_DATA_DIR", DEFAULT_DATA_DIR)).expanduser()
            self.database = DatabaseConfig(
                url=f"sqlite+aiosqlite:///{data_dir / 'cards.db'}",
                echo=self.database.echo,
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - CARDSCOPE_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup so every module logger
    picks up the handler.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
