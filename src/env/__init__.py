from env.env import (
    ConfigError,
    Environment,
    SyncSettings,
    _load_dotenv,
    get_env,
    get_logging_env,
    load_shows_csv,
    parse_show_list,
    reset_env_caches,
)
from env.paths import PROJECT_ROOT, logs_dir, profiles_dir

__all__ = [
    "ConfigError",
    "Environment",
    "SyncSettings",
    "get_env",
    "get_logging_env",
    "load_shows_csv",
    "parse_show_list",
    "reset_env_caches",
    "PROJECT_ROOT",
    "logs_dir",
    "profiles_dir",
    "_load_dotenv",
]
