"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging (Loguru)
- Database operations (SQLite, optional PostgreSQL)
- Console management (Rich)
"""

from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
    ensure_directories,
)
from .database import (
    get_database_path,
    get_db_connection,
    init_database,
    migrate_database,
)
from .db_adapter import get_radio_db_connection, init_postgres_schema, is_postgres
from .logging import setup_logging, setup_logging_from_config
from .console import get_console, get_error_console, print_error, print_table, safe_print

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    "ensure_directories",
    # Database
    "get_database_path",
    "get_db_connection",
    "init_database",
    "migrate_database",
    "get_radio_db_connection",
    "init_postgres_schema",
    "is_postgres",
    # Logging
    "setup_logging",
    "setup_logging_from_config",
    # Console
    "get_console",
    "get_error_console",
    "safe_print",
    "print_error",
    "print_table",
]
