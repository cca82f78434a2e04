"""Shared fixtures for markovbot tests."""
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

ENV_KEYS = (
    'MARKOV_STATE_SIZE',
    'MARKOV_MIN_CHARS',
    'MARKOV_MAX_CHARS',
    'MARKOV_MAX_TRIES',
    'EXCLUDED_WORDS',
    'DEBUG_MODE',
    'DEBUG_LEVEL',
    'POST_PROBABILITY',
    'CORPUS_DB_PATH',
    'RECENT_POST_TTL_HOURS',
    'MARKOVBOT_HOME',
)


@pytest.fixture
def clean_env(monkeypatch):
    """A private copy of os.environ without any markovbot variables.

    load_env() writes into os.environ, so each test gets its own dict.
    """
    env = {k: v for k, v in os.environ.items() if k not in ENV_KEYS}
    monkeypatch.setattr(os, 'environ', env)
    return env


@pytest.fixture
def missing_env_file(tmp_path):
    """Path to a .env file that does not exist."""
    return tmp_path / 'absent.env'


@pytest.fixture
def fox_corpus():
    return ["the quick brown fox jumps over the lazy dog"]


@pytest.fixture
def tweet_corpus():
    """Ten short posts sharing enough phrasing to branch."""
    return [
        'This is a test tweet with some more words to work with.',
        'Another test tweet with additional content for better generation.',
        'A third test tweet to provide more context and vocabulary.',
        'Adding more sample text to improve generation quality.',
        'The more varied content we have, the better the output will be.',
        'Including different sentence structures helps create natural text.',
        'Using more words and phrases improves the generation quality.',
        'Final test sentence with good length and natural patterns.',
        'Mentioning friends and sharing links makes it realistic.',
        'The output will be better with more words to work with.',
    ]
