"""
Load and save the chains config used by the deployment scripts.

The config lives in <CHAINS_CONFIG_DIR>/<env>.json. It is read once before a run
and written once after it, so every change made during the run lands in a
single write.
"""

import json
import logging
import os
from pathlib import Path

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ENVIRONMENTS = [
    "local",
    "devnet",
    "devnet-amplifier",
    "devnet-verifiers",
    "stagenet",
    "testnet",
    "mainnet",
]
DEFAULT_ENV = "testnet"
DEFAULT_CONFIG_DIR = "axelar-chains-config/info"
CHAIN_KEY = "stellar"


def get_config_path(env: str) -> Path:
    """Return the config file path for an environment."""
    config_dir = os.getenv("CHAINS_CONFIG_DIR", DEFAULT_CONFIG_DIR)
    return Path(config_dir) / f"{env}.json"


def load_config(env: str) -> dict:
    config_path = get_config_path(env)

    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        config = json.load(f)

    logger.debug(f"Loaded config from {config_path}")
    return config


def save_config(config: dict, env: str) -> Path:
    config_path = get_config_path(env)

    with open(config_path, "w") as f:
        json.dump(config, f, indent=2)
        f.write("\n")

    logger.info(f"💾 Config saved to: {config_path}")
    return config_path


def get_chain(config: dict) -> dict:
    """Return the Stellar chain section of the config."""
    chain = config.get(CHAIN_KEY)

    if not chain:
        raise ConfigurationError(f"Missing '{CHAIN_KEY}' section in chains config")

    return chain
