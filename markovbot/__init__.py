#!/usr/bin/env python3
"""
markovbot - Markov Chain Social Media Bot
=========================================

Learns word-transition statistics from previously published posts and
synthesizes new, length-bounded posts from them.

Quick Start
-----------
    from markovbot import MarkovBot, MarkovConfig, BotConfig

    bot = MarkovBot(BotConfig(markov=MarkovConfig(min_chars=40, max_chars=280)))
    bot.train(open('tweets.txt').read().splitlines())
    print(bot.generate().string)

Modules
-------
    markovbot.normalizer  - Raw post -> clean training text
    markovbot.generators  - Transition model, builder, generator, random source
    markovbot.corpus      - SQLite corpus and recent-post store
    markovbot.bot         - One posting cycle with pluggable publishers
    markovbot.config      - Typed configuration from env / .env / app.yaml

CLI Usage
---------
    python -m markovbot generate --file tweets.txt -n 3
    python -m markovbot upload tweets.txt --replace
    python -m markovbot run --force
"""

__version__ = "2.0.0"
__author__ = "markovbot"

from typing import Iterable, Optional

from . import generators
from . import config

# =============================================================================
# Public API
# =============================================================================

from .config import (
    MarkovConfig,
    BotConfig,
    get_config,
    get_markov_config,
)
from .errors import (
    MarkovBotError,
    ConfigError,
    EmptyCorpusError,
    NoStartStatesError,
    GenerationBoundsError,
    CorpusStoreError,
)
from .normalizer import (
    Normalizer,
    normalize,
    clean_corpus,
)
from .generators import (
    EntropySource,
    get_rng,
    TransitionModel,
    ChainBuilder,
    Generator,
    GenerationResult,
    save_model,
    load_model,
)
from .corpus import CorpusStore, RecentPost
from .bot import (
    BotRunner,
    ConsolePublisher,
    RunResult,
    generate_post,
)


# =============================================================================
# Main Interface
# =============================================================================

class MarkovBot:
    """
    Unified interface for cleaning, training and generating.

    Usage:
        bot = MarkovBot()
        bot.train(posts)
        result = bot.generate()
        batch = bot.generate_batch(5)
    """

    def __init__(self,
                 config: BotConfig = None,
                 rng: EntropySource = None):
        self.config = config or BotConfig()
        self.rng = rng or get_rng()
        self.normalizer = Normalizer(self.config.excluded_words)
        self.generator = Generator(self.config.markov, self.rng)
        self.model: Optional[TransitionModel] = None

    def normalize(self, raw) -> str:
        """Clean a single raw post."""
        return self.normalizer.normalize(raw)

    def train(self, corpus: Iterable) -> TransitionModel:
        """Normalize a raw corpus and build the model used by generate()."""
        cleaned = self.normalizer.clean_corpus(corpus)
        self.model = ChainBuilder(self.config.markov.state_size).build(cleaned)
        return self.model

    def _require_model(self) -> TransitionModel:
        if self.model is None:
            raise NoStartStatesError("No model trained yet; call train() first")
        return self.model

    def generate(self) -> GenerationResult:
        """Generate one post from the trained model."""
        return self.generator.generate(self._require_model())

    def generate_batch(self, count: int, max_workers: int = None) -> list:
        """Generate several posts in parallel from the trained model."""
        return self.generator.generate_batch(self._require_model(), count, max_workers)

    def save(self, filepath: str):
        """Persist the trained model as JSON."""
        save_model(self._require_model(), filepath)

    def load(self, filepath: str) -> TransitionModel:
        """Load a model saved with save()."""
        model = load_model(filepath)
        if model.state_size != self.config.markov.state_size:
            raise ConfigError(
                f"Model state size {model.state_size} does not match "
                f"configured state size {self.config.markov.state_size}"
            )
        self.model = model
        return model


__all__ = [
    '__version__',
    'MarkovBot',
    # Configuration
    'MarkovConfig',
    'BotConfig',
    'get_config',
    'get_markov_config',
    # Errors
    'MarkovBotError',
    'ConfigError',
    'EmptyCorpusError',
    'NoStartStatesError',
    'GenerationBoundsError',
    'CorpusStoreError',
    # Text
    'Normalizer',
    'normalize',
    'clean_corpus',
    # Generation
    'EntropySource',
    'get_rng',
    'TransitionModel',
    'ChainBuilder',
    'Generator',
    'GenerationResult',
    'save_model',
    'load_model',
    # Storage and bot
    'CorpusStore',
    'RecentPost',
    'BotRunner',
    'ConsolePublisher',
    'RunResult',
    'generate_post',
]
