import json
import logging
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Pick up VECTOR_RACE_CONFIG from a local .env file when present
load_dotenv()

DEFAULT_CONFIG_FILE_PATH = 'configs/strategy_balance.json'
CONFIG_FILE_PATH = os.getenv('VECTOR_RACE_CONFIG', DEFAULT_CONFIG_FILE_PATH)


def load_config(path=None):
    """
    Loads the strategy balance config file.

    Returns ``None`` when the file is missing or cannot be parsed; every
    consumer falls back to its built-in defaults in that case.
    """
    config_path = path or CONFIG_FILE_PATH
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
        return config
    except FileNotFoundError:
        logger.warning("Could not find config file at %s, using built-in defaults", config_path)
        return None
    except (OSError, ValueError) as e:
        logger.warning("Could not parse config file %s: %s", config_path, e)
        return None


# Load the config ONCE when the module is first imported
BALANCE_CONFIG = load_config()


def get_config(key_path, default=None, config=None):
    """
    Safely gets a value from the loaded config using a 'dot.path'.
    Example: get_config('strategies.weighted_random.ideal_velocity')
    """
    source = BALANCE_CONFIG if config is None else config
    if not source:
        return default

    try:
        keys = key_path.split('.')
        value = source
        for key in keys:
            value = value[key]
        return value
    except (KeyError, TypeError):
        logger.debug("Config key %s not set, using default", key_path)
        return default
