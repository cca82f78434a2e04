#!/usr/bin/env python3
"""
Bot Pipeline
============
One posting cycle: gather the corpus, clean it, train, generate, publish.

Platform clients live outside this package. Anything with a `name` and a
`publish(text) -> dict` method can be passed in as a publisher; the
returned dict should carry the platform's post id under 'id'.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence

from rich.console import Console
from rich.panel import Panel

from markovbot.config import BotConfig, MarkovConfig
from markovbot.corpus import CorpusStore
from markovbot.errors import EmptyCorpusError
from markovbot.generators import ChainBuilder, EntropySource, GenerationResult, Generator, get_rng
from markovbot.normalizer import Normalizer

logger = logging.getLogger(__name__)


class Publisher(Protocol):
    """Posting collaborator for one platform."""
    name: str

    def publish(self, text: str) -> dict:
        ...


class ConsolePublisher:
    """Prints posts instead of sending them anywhere."""

    name = 'console'

    def __init__(self, console: Console = None):
        self.console = console or Console()

    def publish(self, text: str) -> dict:
        self.console.print(Panel(text, title='Generated Post', subtitle=f'{len(text)} chars'))
        post_id = hashlib.sha256(text.encode('utf-8')).hexdigest()[:12]
        return {'id': post_id}


# =============================================================================
# Post Generation
# =============================================================================

def generate_post(content: Iterable,
                  config: MarkovConfig = None,
                  rng: EntropySource = None,
                  normalizer: Normalizer = None) -> GenerationResult:
    """
    Clean a raw corpus and generate one post from it.

    Raises:
        EmptyCorpusError: nothing usable is left after cleaning
        GenerationBoundsError: no walk fit the configured bounds
    """
    config = config or MarkovConfig()
    normalizer = normalizer or Normalizer()

    cleaned = normalizer.clean_corpus(content or ())
    if not cleaned:
        raise EmptyCorpusError('Content array is empty. Cannot generate Markov chain.')

    logger.debug(f"Processing {len(cleaned)} content items")

    model = ChainBuilder(config.state_size).build(cleaned)
    result = Generator(config, rng).generate(model)

    logger.debug(f"Generated post length: {result.length} characters")
    return result


# =============================================================================
# Bot Run
# =============================================================================

RUN_SKIPPED = 'skipped'
RUN_DRY = 'dry_run'
RUN_PUBLISHED = 'published'


@dataclass
class RunResult:
    """Outcome of one bot cycle."""
    status: str
    text: Optional[str] = None
    published: Dict[str, str] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)


class BotRunner:
    """
    Runs posting cycles.

    Usage:
        runner = BotRunner(get_config(), CorpusStore(), [ConsolePublisher()])
        result = runner.run()
    """

    def __init__(self,
                 config: BotConfig,
                 store: CorpusStore,
                 publishers: Sequence[Publisher] = (),
                 rng: EntropySource = None,
                 extra_source: Callable[[], Iterable[str]] = None):
        self.config = config
        self.store = store
        self.publishers = list(publishers)
        self.rng = rng or get_rng()
        self.extra_source = extra_source
        self.normalizer = Normalizer(config.excluded_words)

    def gather_corpus(self) -> List[str]:
        """Stored posts followed by whatever the extra source supplies."""
        content = self.store.get_source_posts()
        logger.info(f"Loaded {len(content)} posts from corpus store")

        if self.extra_source is not None:
            extra = list(self.extra_source() or ())
            logger.info(f"Fetched {len(extra)} recent posts")
            content.extend(extra)

        logger.info(f"Total content items for processing: {len(content)}")
        return content

    def run(self, force: bool = False) -> RunResult:
        """
        Run one cycle.

        Args:
            force: Skip the random post_probability gate

        Returns:
            RunResult with status 'skipped', 'dry_run' or 'published'
        """
        logger.info("Starting bot execution")

        if not force:
            roll = self.rng.random()
            if roll >= self.config.post_probability:
                logger.info(
                    f"Random check failed ({roll:.2f} >= {self.config.post_probability}), "
                    f"skipping this run"
                )
                return RunResult(status=RUN_SKIPPED)

        result = generate_post(
            self.gather_corpus(),
            config=self.config.markov,
            rng=self.rng,
            normalizer=self.normalizer,
        )

        if self.config.debug_mode:
            logger.info("Debug mode enabled - skipping actual posting")
            logger.info(f"Generated post: {result.string}")
            return RunResult(status=RUN_DRY, text=result.string)

        run_result = RunResult(status=RUN_PUBLISHED, text=result.string)
        for publisher in self.publishers:
            try:
                response = publisher.publish(result.string) or {}
                if not isinstance(response, dict):
                    raise TypeError(
                        f"publish() returned {type(response).__name__}, expected a dict"
                    )
                post_id = response.get('id')
            except Exception as e:
                logger.error(f"Publishing to {publisher.name} failed: {e}")
                run_result.failed.append(publisher.name)
                continue

            run_result.published[publisher.name] = post_id
            if post_id is not None:
                self.store.remember_post(publisher.name, post_id, result.string)
            logger.info(f"Posted to {publisher.name}")

        return run_result


__all__ = [
    'Publisher',
    'ConsolePublisher',
    'generate_post',
    'RunResult',
    'BotRunner',
    'RUN_SKIPPED',
    'RUN_DRY',
    'RUN_PUBLISHED',
]
