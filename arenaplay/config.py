"""
Configuration loading.

Settings come from a TOML file (default ./arenaplay.toml). The cookie is a
secret and is normally kept out of that file: set ARENA_COOKIE in the
environment or in a .env file in the working directory.

Example arenaplay.toml:
    user_id = 1234567
    puzzle_name = "spring-challenge-2021"
    code_path = "./bot.py"
    programming_language_id = "Python3"
    agent1 = -1
    agent2 = [-2]
    output_dir = "./arena-out"
"""

import os
from pathlib import Path

from dotenv import load_dotenv

try:
    import tomllib
except ImportError:
    import tomli as tomllib

# Load environment variables
load_dotenv(Path.cwd() / '.env')


class ConfigError(Exception):
    """Raised when the config file is missing or unreadable."""
    pass


def load_config(config_path: Path) -> dict:
    """Load the TOML config file and apply environment overrides."""
    config_path = Path(config_path).resolve()
    if not config_path.exists():
        raise ConfigError(f"Could not find valid config file at {config_path}")
    try:
        with open(config_path, 'rb') as f:
            config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Could not parse config file {config_path}: {e}") from e

    if os.getenv('ARENA_COOKIE'):
        config['cookie'] = os.environ['ARENA_COOKIE']
    return config


def as_id_list(value) -> list:
    """agent2 may be a single id or a list of ids."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def read_code(code_path: Path) -> str:
    return Path(code_path).resolve().read_text(encoding='utf-8').strip()
