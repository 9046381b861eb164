"""Environment-driven settings for the Music Store toolkit.

Values are read from the process environment, after loading a local .env
file if one exists.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_PROGRAM_ID = "83eMBGtHrS4oR6VjptrJdwVjidDjoAdokVxCi6dZQeZP"
DEFAULT_NETWORK = "devnet"
DEFAULT_KEYPAIR = "~/.config/solana/id.json"


@dataclass(frozen=True)
class Settings:
    program_id: str = DEFAULT_PROGRAM_ID
    network: str = DEFAULT_NETWORK
    keypair_path: str = DEFAULT_KEYPAIR
    max_retries: int = 1
    confirm_attempts: int = 30


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}")
    if value < 1:
        raise ValueError(f"{key} must be at least 1, got {value}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment.

    Args:
        env: Mapping to read instead of os.environ. When omitted, a .env file
            in the working directory is loaded first.

    Raises:
        ValueError: If a numeric setting is malformed.
    """
    if env is None:
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ

    return Settings(
        program_id=env.get("MUSIC_STORE_PROGRAM_ID") or DEFAULT_PROGRAM_ID,
        network=env.get("SOLANA_NETWORK") or DEFAULT_NETWORK,
        keypair_path=env.get("SOLANA_KEYPAIR") or DEFAULT_KEYPAIR,
        max_retries=_int_env(env, "MUSIC_STORE_MAX_RETRIES", 1),
        confirm_attempts=_int_env(env, "MUSIC_STORE_CONFIRM_ATTEMPTS", 30),
    )
