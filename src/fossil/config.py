"""Loading scan configuration from ``.fossilrc`` files.

Search order:

1. Custom path if provided via ``--config``
2. ``.fossilrc`` in the current directory
3. ``~/.fossilrc`` in the home directory
4. Built-in defaults
"""

import tomllib
from pathlib import Path
from typing import List, Optional

import structlog
from pydantic import ValidationError

from fossil.exceptions import ConfigError
from fossil.models import ScanConfig

logger = structlog.get_logger(__name__)

CONFIG_FILENAME = ".fossilrc"


def load_config(custom_path: Optional[Path] = None) -> ScanConfig:
    """Load configuration from file or use defaults.

    Args:
        custom_path: Explicit config file; used exclusively when given

    Returns:
        ScanConfig

    Raises:
        ConfigError: If the explicit config file cannot be read or is invalid
    """
    if custom_path is not None:
        return load_config_from_file(Path(custom_path))

    for candidate in default_config_paths():
        if not candidate.is_file():
            continue
        try:
            return load_config_from_file(candidate)
        except ConfigError as e:
            logger.warning("config_ignored", path=str(candidate), error=str(e))

    return ScanConfig()


def load_config_from_file(path: Path) -> ScanConfig:
    """Parse and validate a TOML config file.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e

    try:
        return ScanConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def default_config_paths() -> List[Path]:
    paths = [Path.cwd() / CONFIG_FILENAME]
    try:
        paths.append(Path.home() / CONFIG_FILENAME)
    except RuntimeError:
        # No resolvable home directory
        pass
    return paths
