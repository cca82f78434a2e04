#!/usr/bin/env python3
"""
Configuration Management
========================
Loads bot settings from the environment, a .env file and app.yaml.

Precedence for every option: environment variable, then app.yaml, then the
built-in default. The result is an immutable value handed to each component
explicitly; nothing reads configuration behind the caller's back.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from markovbot.errors import ConfigError
from markovbot.settings import bot_home, get_setting, resolve_path


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_STATE_SIZE = 2
DEFAULT_MIN_CHARS = 100
DEFAULT_MAX_CHARS = 280
DEFAULT_MAX_TRIES = 100
DEFAULT_POST_PROBABILITY = 0.3
DEFAULT_RECENT_POST_TTL_HOURS = 24
DEFAULT_DB_PATH = 'data/corpus.db'

DEBUG_LEVELS = ('info', 'verbose')

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


# =============================================================================
# Configuration Values
# =============================================================================

@dataclass(frozen=True)
class MarkovConfig:
    """Chain width and acceptance bounds for generated text."""
    state_size: int = DEFAULT_STATE_SIZE
    min_chars: int = DEFAULT_MIN_CHARS
    max_chars: int = DEFAULT_MAX_CHARS
    max_tries: int = DEFAULT_MAX_TRIES

    def __post_init__(self):
        for name in ('state_size', 'min_chars', 'max_chars', 'max_tries'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        if self.state_size < 1:
            raise ConfigError(f"state_size must be >= 1, got {self.state_size}")
        if self.min_chars < 0:
            raise ConfigError(f"min_chars must be >= 0, got {self.min_chars}")
        if self.max_chars < self.min_chars:
            raise ConfigError(
                f"max_chars ({self.max_chars}) must be >= min_chars ({self.min_chars})"
            )
        if self.max_tries < 1:
            raise ConfigError(f"max_tries must be >= 1, got {self.max_tries}")


@dataclass(frozen=True)
class BotConfig:
    """Everything a bot run needs, resolved once."""
    markov: MarkovConfig = field(default_factory=MarkovConfig)
    excluded_words: frozenset = frozenset()
    debug_mode: bool = True
    debug_level: str = 'info'
    post_probability: float = DEFAULT_POST_PROBABILITY
    db_path: Optional[Path] = None
    recent_post_ttl_hours: int = DEFAULT_RECENT_POST_TTL_HOURS

    def __post_init__(self):
        if self.debug_level not in DEBUG_LEVELS:
            raise ConfigError(
                f"debug_level must be one of {', '.join(DEBUG_LEVELS)}, got {self.debug_level!r}"
            )
        if not 0.0 <= self.post_probability <= 1.0:
            raise ConfigError(
                f"post_probability must be between 0 and 1, got {self.post_probability}"
            )
        if self.recent_post_ttl_hours < 0:
            raise ConfigError("recent_post_ttl_hours must be >= 0")

    @property
    def verbose(self) -> bool:
        return self.debug_level == 'verbose'


# =============================================================================
# Parsing Helpers
# =============================================================================

def parse_word_list(value) -> frozenset:
    """
    Parse an excluded-word list.

    Accepts a comma/whitespace separated string or any iterable of strings.
    Empty entries are dropped.
    """
    if value is None:
        return frozenset()
    if isinstance(value, str):
        parts = re.split(r'[,\s]+', value)
    else:
        parts = [str(v) for v in value]
    return frozenset(p.strip() for p in parts if p and p.strip())


def _parse_int(name: str, value) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def _parse_float(name: str, value) -> float:
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None


def _parse_bool(name: str, value) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be true or false, got {value!r}")


def _lookup(env_key: str, setting: str, default):
    """Environment first, then app.yaml, then default."""
    value = os.environ.get(env_key)
    if value is not None and value.strip() != '':
        return value
    value = get_setting(setting)
    if value is not None:
        return value
    return default


# =============================================================================
# Loading
# =============================================================================

def load_env(env_path: Path = None) -> dict:
    """Load environment variables from .env file."""
    if env_path is None:
        env_path = bot_home() / '.env'

    env_path = Path(env_path)
    env_vars = {}
    if env_path.exists():
        for line in env_path.read_text().splitlines():
            line = line.strip()
            if '=' in line and not line.startswith('#'):
                key, value = line.split('=', 1)
                value = value.strip().strip('"').strip("'")
                env_vars[key.strip()] = value
                # Real environment wins over the file
                os.environ.setdefault(key.strip(), value)

    return env_vars


def get_markov_config() -> MarkovConfig:
    """Resolve the Markov options alone."""
    return MarkovConfig(
        state_size=_parse_int(
            'MARKOV_STATE_SIZE',
            _lookup('MARKOV_STATE_SIZE', 'markov.state_size', DEFAULT_STATE_SIZE),
        ),
        min_chars=_parse_int(
            'MARKOV_MIN_CHARS',
            _lookup('MARKOV_MIN_CHARS', 'markov.min_chars', DEFAULT_MIN_CHARS),
        ),
        max_chars=_parse_int(
            'MARKOV_MAX_CHARS',
            _lookup('MARKOV_MAX_CHARS', 'markov.max_chars', DEFAULT_MAX_CHARS),
        ),
        max_tries=_parse_int(
            'MARKOV_MAX_TRIES',
            _lookup('MARKOV_MAX_TRIES', 'markov.max_tries', DEFAULT_MAX_TRIES),
        ),
    )


def get_config(env_path: Path = None) -> BotConfig:
    """Get configuration from environment, .env and app.yaml."""
    load_env(env_path)

    db_value = _lookup('CORPUS_DB_PATH', 'corpus.db_path', DEFAULT_DB_PATH)

    return BotConfig(
        markov=get_markov_config(),
        excluded_words=parse_word_list(
            _lookup('EXCLUDED_WORDS', 'normalizer.excluded_words', None)
        ),
        debug_mode=_parse_bool('DEBUG_MODE', _lookup('DEBUG_MODE', 'bot.debug_mode', True)),
        debug_level=str(_lookup('DEBUG_LEVEL', 'bot.debug_level', 'info')).strip().lower(),
        post_probability=_parse_float(
            'POST_PROBABILITY',
            _lookup('POST_PROBABILITY', 'bot.post_probability', DEFAULT_POST_PROBABILITY),
        ),
        db_path=resolve_path(db_value),
        recent_post_ttl_hours=_parse_int(
            'RECENT_POST_TTL_HOURS',
            _lookup('RECENT_POST_TTL_HOURS', 'corpus.recent_post_ttl_hours',
                    DEFAULT_RECENT_POST_TTL_HOURS),
        ),
    )


__all__ = [
    'MarkovConfig',
    'BotConfig',
    'parse_word_list',
    'load_env',
    'get_markov_config',
    'get_config',
]
