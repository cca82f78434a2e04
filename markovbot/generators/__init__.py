#!/usr/bin/env python3
"""
Text Generators
===============
- markov_chain: word-level Markov chain model, builder and generator
- entropy: seedable random source injected into generators
"""

from .entropy import (
    EntropySource,
    fresh_seed,
    get_rng,
)
from .markov_chain import (
    State,
    TransitionModel,
    ChainBuilder,
    GenerationResult,
    Walk,
    Generator,
    save_model,
    load_model,
)

__all__ = [
    'EntropySource',
    'fresh_seed',
    'get_rng',
    'State',
    'TransitionModel',
    'ChainBuilder',
    'GenerationResult',
    'Walk',
    'Generator',
    'save_model',
    'load_model',
]
