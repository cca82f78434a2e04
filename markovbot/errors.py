#!/usr/bin/env python3
"""
Exceptions
==========
Error taxonomy shared by the text engine, the corpus store and the bot.
"""


class MarkovBotError(Exception):
    """Base class for all markovbot errors."""


class ConfigError(MarkovBotError, ValueError):
    """Invalid or missing configuration value."""


class EmptyCorpusError(MarkovBotError):
    """No training item was long enough to build a transition model."""


class NoStartStatesError(MarkovBotError):
    """Generation was attempted against a model without start states."""


class GenerationBoundsError(MarkovBotError):
    """Every walk in the attempt budget fell outside the length bounds."""

    def __init__(self, min_chars: int, max_chars: int, attempts: int):
        self.min_chars = min_chars
        self.max_chars = max_chars
        self.attempts = attempts
        super().__init__(
            f"Failed to generate text between {min_chars} and {max_chars} "
            f"characters after {attempts} attempts"
        )


class CorpusStoreError(MarkovBotError):
    """The corpus database could not be read or written."""


__all__ = [
    'MarkovBotError',
    'ConfigError',
    'EmptyCorpusError',
    'NoStartStatesError',
    'GenerationBoundsError',
    'CorpusStoreError',
]
