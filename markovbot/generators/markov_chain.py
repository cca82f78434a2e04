#!/usr/bin/env python3
"""
Markov Chain Text Generator
===========================
Generates short posts using word-level Markov chains trained on a corpus
of previously published text.

Components:
- ChainBuilder: turns clean text into an immutable TransitionModel
- Generator: walks the model until a walk fits the length bounds

Theory:
-------
A state is a window of N consecutive words. The model maps each state to
every word seen right after it, duplicates kept, so a word that followed a
state three times is three times as likely to be tried first. A walk
starts from the opening words of a random training item and keeps
appending followers. Within one walk no state may be entered twice, which
guarantees termination and prevents the generator from looping on
repeated phrasing. Walks that end outside [min_chars, max_chars] are
discarded and a new walk starts, up to max_tries times.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from markovbot.config import MarkovConfig
from markovbot.errors import (
    ConfigError,
    EmptyCorpusError,
    GenerationBoundsError,
    NoStartStatesError,
)
from markovbot.generators.entropy import EntropySource, get_rng

logger = logging.getLogger(__name__)

State = Tuple[str, ...]


# =============================================================================
# MARKOV CHAIN MODEL
# =============================================================================

@dataclass(frozen=True)
class TransitionModel:
    """Word-level Markov chain model (read-only once built)"""
    state_size: int
    transitions: Mapping[State, Tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    start_states: Tuple[State, ...] = ()

    def candidates(self, state: State) -> Tuple[str, ...]:
        """Words observed after `state`, empty if none."""
        return self.transitions.get(state, ())

    def __len__(self) -> int:
        return len(self.transitions)

    @property
    def vocabulary_size(self) -> int:
        words = set()
        for state, followers in self.transitions.items():
            words.update(state)
            words.update(followers)
        return len(words)

    def to_dict(self) -> dict:
        """Serialize model to dictionary"""
        return {
            'state_size': self.state_size,
            'transitions': [
                [list(state), list(followers)]
                for state, followers in self.transitions.items()
            ],
            'start_states': [list(state) for state in self.start_states],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TransitionModel':
        """Deserialize model from dictionary"""
        state_size = int(data['state_size'])
        transitions = {}
        for state, followers in data.get('transitions', []):
            transitions[tuple(state)] = tuple(followers)
        start_states = tuple(tuple(s) for s in data.get('start_states', []))

        for state in list(transitions) + list(start_states):
            if len(state) != state_size:
                raise ValueError(
                    f"State {state!r} does not have {state_size} words"
                )

        return cls(
            state_size=state_size,
            transitions=MappingProxyType(transitions),
            start_states=start_states,
        )


class ChainBuilder:
    """Builds transition models from clean text"""

    def __init__(self, state_size: int = 2):
        if isinstance(state_size, bool) or not isinstance(state_size, int) or state_size < 1:
            raise ConfigError(f"state_size must be an integer >= 1, got {state_size!r}")
        self.state_size = state_size

    def _tokens(self, item) -> Optional[List[str]]:
        """Whitespace tokens of a qualifying item, None if it must be skipped."""
        if not isinstance(item, str) or not item.strip():
            return None
        words = item.split()
        # A state alone is not enough: at least one transition is required
        if len(words) < self.state_size + 1:
            return None
        return words

    def build(self, corpus: Iterable[str]) -> TransitionModel:
        """Train a model on a corpus of normalized strings"""
        n = self.state_size
        transitions = {}
        start_states = []
        skipped = 0

        for item in corpus or ():
            words = self._tokens(item)
            if words is None:
                skipped += 1
                continue

            start_states.append(tuple(words[:n]))

            for i in range(len(words) - n + 1):
                if i + n < len(words):
                    state = tuple(words[i:i + n])
                    transitions.setdefault(state, []).append(words[i + n])

        if not start_states:
            raise EmptyCorpusError(
                f"No training item has at least {n + 1} words; "
                f"cannot build a chain with state size {n}"
            )

        logger.debug(
            f"Built chain: {len(start_states)} items, {len(transitions)} states, "
            f"{skipped} items skipped"
        )

        return TransitionModel(
            state_size=n,
            transitions=MappingProxyType(
                {state: tuple(followers) for state, followers in transitions.items()}
            ),
            start_states=tuple(start_states),
        )


# =============================================================================
# GENERATION
# =============================================================================

@dataclass(frozen=True)
class GenerationResult:
    """An accepted post"""
    string: str
    attempts: int = 1

    @property
    def length(self) -> int:
        return len(self.string)

    def __str__(self) -> str:
        return self.string


@dataclass
class Walk:
    """Raw output of one attempt"""
    tokens: List[str]
    states: List[State]
    overflowed: bool = False

    @property
    def text(self) -> str:
        return ' '.join(self.tokens)


class Generator:
    """Generates text by walking a trained TransitionModel"""

    def __init__(self,
                 config: MarkovConfig = None,
                 rng: EntropySource = None):
        """
        Initialize generator.

        Args:
            config: Length bounds and attempt budget (defaults if None)
            rng: Random source; pass a seeded one for reproducible output
        """
        self.config = config or MarkovConfig()
        self.rng = rng or get_rng()

    def walk(self, model: TransitionModel, limit: int = None) -> Walk:
        """
        Perform a single cycle-avoiding walk.

        Args:
            model: Trained model
            limit: Stop early once the joined text is longer than this

        Returns:
            The walk; `overflowed` is set when it was cut short by `limit`
        """
        if not model.start_states:
            raise NoStartStatesError("Model has no start states")

        state = self.rng.choice(model.start_states)
        tokens = list(state)
        states = [state]
        visited = {state}
        length = len(' '.join(tokens))

        while True:
            if limit is not None and length > limit:
                return Walk(tokens, states, overflowed=True)

            candidates = model.candidates(state)
            if not candidates:
                break

            # Full shuffle, not resampling: duplicates keep their weight
            for word in self.rng.shuffled(candidates):
                next_state = state[1:] + (word,)
                if next_state in visited:
                    continue
                tokens.append(word)
                length += 1 + len(word)
                state = next_state
                states.append(state)
                visited.add(state)
                break
            else:
                # Every follower leads back into this walk
                break

        return Walk(tokens, states)

    def generate(self, model: TransitionModel) -> GenerationResult:
        """
        Generate one post within the configured bounds.

        Raises:
            NoStartStatesError: model has nothing to start from
            GenerationBoundsError: no walk fit after max_tries attempts
        """
        if not model.start_states:
            raise NoStartStatesError("Model has no start states")

        min_chars = self.config.min_chars
        max_chars = self.config.max_chars

        for attempt in range(1, self.config.max_tries + 1):
            walk = self.walk(model, limit=max_chars)
            text = walk.text

            if not walk.overflowed and min_chars <= len(text) <= max_chars:
                logger.debug(f"Generated text length: {len(text)} characters (attempt {attempt})")
                return GenerationResult(string=text, attempts=attempt)

            if walk.overflowed:
                logger.debug(
                    f"Attempt {attempt}: walk passed {max_chars} characters, abandoned"
                )
            else:
                logger.debug(
                    f"Attempt {attempt}: generated text ({len(text)} chars) "
                    f"outside bounds [{min_chars}, {max_chars}]"
                )

        raise GenerationBoundsError(min_chars, max_chars, self.config.max_tries)

    def generate_batch(self,
                       model: TransitionModel,
                       count: int,
                       max_workers: int = None) -> List[GenerationResult]:
        """
        Generate several posts in parallel.

        Each task runs on its own generator with a random source forked from
        this one, so a seeded generator still gives a reproducible batch.

        Args:
            model: Trained model, shared read-only by all workers
            count: Number of generations to run
            max_workers: Thread pool size (default: executor's choice)

        Returns:
            Successful results in submission order; failures are logged
        """
        if count < 1:
            return []

        workers = [Generator(self.config, self.rng.fork()) for _ in range(count)]
        results = []

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(g.generate, model) for g in workers]
            for i, future in enumerate(futures, 1):
                try:
                    results.append(future.result())
                except GenerationBoundsError as e:
                    logger.warning(f"Batch generation {i}/{count} failed: {e}")

        return results


# =============================================================================
# PERSISTENCE
# =============================================================================

def save_model(model: TransitionModel, filepath: str):
    """Save a trained model to JSON file"""
    Path(filepath).write_text(json.dumps(model.to_dict(), indent=2))


def load_model(filepath: str) -> TransitionModel:
    """Load a trained model from JSON file"""
    data = json.loads(Path(filepath).read_text())
    return TransitionModel.from_dict(data)


__all__ = [
    'State',
    'TransitionModel',
    'ChainBuilder',
    'GenerationResult',
    'Walk',
    'Generator',
    'save_model',
    'load_model',
]
