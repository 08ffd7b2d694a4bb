"""
Whitelist config loading for rs-compactor.

The config is a YAML mapping with a single ``whitelist`` list of pattern
identifiers. A missing file is normal (scan everything) unless the caller
asked for a specific path, in which case it is an error.
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml

from .errors import ConfigError
from .models import WhitelistConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("/etc/rs-compactor.yml")


# ===================================================================
#                         Configuration Loaders
# ===================================================================
def _read_yaml(filepath: Path):
    with filepath.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_whitelist_config(filepath: str | Path, explicit: bool = False) -> WhitelistConfig:
    """Load the whitelist config, falling back to defaults when allowed.

    - ``explicit=True``: the path was requested by the operator, so missing,
      unreadable or malformed files raise ConfigError.
    - ``explicit=False``: problems are logged and an unrestricted config is
      returned.
    """
    p = Path(filepath).expanduser()
    try:
        raw = _read_yaml(p)
    except UnicodeDecodeError as e:
        if explicit:
            raise ConfigError(f"Config file {p} is not valid UTF-8: {e}") from e
        logger.warning("Config file %s is not valid UTF-8, going with defaults: %s", p, e)
        return WhitelistConfig()
    except OSError as e:
        if explicit:
            raise ConfigError(f"Failed to open config file {p}: {e}") from e
        logger.debug("Failed to open config file %s, going with defaults.", p)
        return WhitelistConfig()
    except yaml.YAMLError as e:
        if explicit:
            raise ConfigError(f"Invalid YAML in config file {p}: {e}") from e
        logger.warning("Invalid YAML in %s, going with defaults: %s", p, e)
        return WhitelistConfig()

    try:
        config = WhitelistConfig.from_mapping(raw)
    except ValueError as e:
        if explicit:
            raise ConfigError(f"Invalid config file {p}: {e}") from e
        logger.warning("Invalid config in %s, going with defaults: %s", p, e)
        return WhitelistConfig()
    if config.whitelist is not None:
        logger.debug("Loaded whitelist of %d patterns from %s", len(config.whitelist), p)
    return config


def dump_whitelist_config(config: WhitelistConfig) -> str:
    return yaml.safe_dump(config.to_dict(), sort_keys=False, allow_unicode=True)


def write_whitelist_config(config: WhitelistConfig, filepath: str | Path) -> Path:
    p = Path(filepath).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(dump_whitelist_config(config), encoding="utf-8")
    logger.info("Wrote whitelist of %d patterns to %s", len(config.whitelist or ()), p)
    return p
