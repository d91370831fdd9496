from config.settings import Config, ConfigurationError, load_config

__all__ = [
    "Config",
    "ConfigurationError",
    "load_config",
]
