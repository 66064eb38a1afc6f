"""Configuration management for good-base.

Configuration is resolved once at startup with precedence handling:
1. Environment variables (GOOD_BASE_*)
2. Config file (<base>/config/good_base_config.py or good-base.toml)
3. Default values derived from the resolved directories

- Directory resolution: GOOD_BASE_DIR override, development mode, OS convention
- EnvReader: Testable environment variable reading with DI support
- ConfigLoader: Layered loading with explicit source priority and caching
- validate_config: Two-tier validation (fatal problems and warnings)
"""

from good_base.config.directories import (
    APP_NAME,
    derive_directories,
    get_app_directories,
    resolve_base_directory,
)
from good_base.config.env import EnvReader, decode_env_overrides
from good_base.config.errors import (
    CoercionError,
    ConfigError,
    ConfigShapeError,
    ConfigValidationError,
    SourceLoadError,
    UnsupportedPlatformError,
)
from good_base.config.files import PythonModuleReader, TomlReader
from good_base.config.loader import (
    ConfigLoader,
    get_config_value,
    initialize_setup,
    merge_partial,
)
from good_base.config.models import (
    Directories,
    GoodBaseConfig,
    Setup,
)
from good_base.config.sources import (
    ConfigSource,
    EnvironmentConfigSource,
    FileConfigSource,
)
from good_base.config.validation import Problem, Severity, validate_config

__all__ = [
    # Models
    "Directories",
    "GoodBaseConfig",
    "Setup",
    # Directories
    "APP_NAME",
    "derive_directories",
    "get_app_directories",
    "resolve_base_directory",
    # Sources
    "ConfigSource",
    "EnvironmentConfigSource",
    "EnvReader",
    "FileConfigSource",
    "PythonModuleReader",
    "TomlReader",
    "decode_env_overrides",
    # Loader
    "ConfigLoader",
    "get_config_value",
    "initialize_setup",
    "merge_partial",
    # Validation
    "Problem",
    "Severity",
    "validate_config",
    # Errors
    "CoercionError",
    "ConfigError",
    "ConfigShapeError",
    "ConfigValidationError",
    "SourceLoadError",
    "UnsupportedPlatformError",
]
