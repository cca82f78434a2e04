#!/usr/bin/env python3
"""
markovbot CLI
=============
Command-line interface for corpus management and post generation.

Usage:
    markovbot generate --file tweets.txt -n 3 --seed 42
    markovbot clean raw_posts.txt
    markovbot upload tweets.txt --replace
    markovbot count
    markovbot run --force
    markovbot config
"""

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from markovbot import __version__

# =============================================================================
# Utilities
# =============================================================================


class Output:
    """Handles CLI output with quiet mode support."""

    def __init__(self, quiet: bool = False, console: Console = None, err_console: Console = None):
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def print(self, *args, **kwargs):
        if not self.quiet:
            self.console.print(*args, **kwargs)

    def result(self, text: str):
        """Essential output, printed even in quiet mode."""
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def error(self, msg: str):
        self.err_console.print(f"[bold red]Error:[/bold red] {msg}", markup=True)

    def success(self, msg: str):
        if not self.quiet:
            self.console.print(f"[green]OK:[/green] {msg}")

    def table(self, title: str, headers: list, rows: list):
        """Print a formatted table."""
        if self.quiet:
            return
        table = Table(title=title)
        for header in headers:
            table.add_column(str(header))
        for row in rows:
            table.add_row(*(str(c) for c in row))
        self.console.print(table)


def positive_int(value: str) -> int:
    """argparse type for counts of at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def setup_logging(verbose: bool = False, quiet: bool = False):
    """Route library logging through rich."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def read_lines(path: str) -> list:
    """Lines of a file, or of stdin for '-'."""
    if path == '-':
        return sys.stdin.read().splitlines()
    return Path(path).read_text(encoding='utf-8').splitlines()


def load_bot_config(args):
    """Resolve configuration and apply command-line overrides."""
    from markovbot.config import get_config

    config = get_config(Path(args.env) if getattr(args, 'env', None) else None)
    if config.verbose and not getattr(args, 'quiet', False):
        logging.getLogger().setLevel(logging.DEBUG)

    overrides = {
        name: getattr(args, name)
        for name in ('state_size', 'min_chars', 'max_chars', 'max_tries')
        if getattr(args, name, None) is not None
    }
    if overrides:
        config = dataclasses.replace(
            config, markov=dataclasses.replace(config.markov, **overrides)
        )
    return config


def make_rng(args):
    from markovbot.generators import EntropySource, get_rng

    if getattr(args, 'seed', None) is not None:
        return EntropySource(args.seed)
    return get_rng()


def open_store(config):
    from markovbot.corpus import CorpusStore

    return CorpusStore(config.db_path, config.recent_post_ttl_hours)


# =============================================================================
# Commands
# =============================================================================

def cmd_generate(args, out: Output):
    """Generate posts."""
    from markovbot.generators import ChainBuilder, Generator
    from markovbot.normalizer import Normalizer

    config = load_bot_config(args)

    if args.file:
        raw = read_lines(args.file)
    else:
        raw = open_store(config).get_source_posts()

    corpus = Normalizer(config.excluded_words).clean_corpus(raw)
    out.print(f"Training on {len(corpus)} of {len(raw)} items "
              f"(state size {config.markov.state_size})...")

    model = ChainBuilder(config.markov.state_size).build(corpus)
    generator = Generator(config.markov, make_rng(args))

    if args.count == 1:
        results = [generator.generate(model)]
    else:
        results = generator.generate_batch(model, args.count)

    if args.json:
        out.result(json.dumps(
            [{'text': r.string, 'length': r.length, 'attempts': r.attempts} for r in results],
            indent=2, ensure_ascii=False,
        ))
        return 0

    for i, r in enumerate(results, 1):
        out.print(f"[dim]{i:2}. ({r.length} chars)[/dim]")
        out.result(r.string)

    if len(results) < args.count:
        out.error(f"Only {len(results)} of {args.count} posts fit the bounds")
        return 1
    return 0


def cmd_clean(args, out: Output):
    """Normalize lines and print the non-empty ones."""
    from markovbot.config import parse_word_list
    from markovbot.normalizer import Normalizer

    excluded = parse_word_list(args.exclude) if args.exclude else load_bot_config(args).excluded_words
    normalizer = Normalizer(excluded)

    for text in normalizer.clean_corpus(read_lines(args.path)):
        out.result(text)
    return 0


def cmd_upload(args, out: Output):
    """Load a text file into the corpus store."""
    config = load_bot_config(args)
    store = open_store(config)

    text = '\n'.join(read_lines(args.path))
    total = store.upload_from_text(text, append=not args.replace)

    mode = 'replace' if args.replace else 'append'
    out.success(f"Uploaded {args.path} ({mode}); {total} posts stored")
    return 0


def cmd_count(args, out: Output):
    """Show number of stored source posts."""
    config = load_bot_config(args)
    out.result(str(open_store(config).count()))
    return 0


def cmd_run(args, out: Output):
    """Run one bot cycle."""
    from markovbot.bot import BotRunner, ConsolePublisher, RUN_SKIPPED

    config = load_bot_config(args)
    if args.live:
        config = dataclasses.replace(config, debug_mode=False)

    runner = BotRunner(
        config,
        open_store(config),
        publishers=[ConsolePublisher(out.console)],
        rng=make_rng(args),
    )
    result = runner.run(force=args.force)

    if result.status == RUN_SKIPPED:
        out.print("Skipped this run.")
        return 0

    if config.debug_mode:
        out.print("[yellow]Debug mode: not published[/yellow]")
        out.result(result.text)
        return 0

    for platform, post_id in result.published.items():
        out.success(f"Posted to {platform} ({post_id})")
    return 1 if result.failed else 0


def cmd_config(args, out: Output):
    """Show the effective configuration."""
    config = load_bot_config(args)
    rows = [
        ('state_size', config.markov.state_size),
        ('min_chars', config.markov.min_chars),
        ('max_chars', config.markov.max_chars),
        ('max_tries', config.markov.max_tries),
        ('excluded_words', ', '.join(sorted(config.excluded_words)) or '-'),
        ('debug_mode', config.debug_mode),
        ('debug_level', config.debug_level),
        ('post_probability', config.post_probability),
        ('db_path', config.db_path),
        ('recent_post_ttl_hours', config.recent_post_ttl_hours),
    ]
    out.table('markovbot configuration', ['Option', 'Value'], rows)
    return 0


# =============================================================================
# Main
# =============================================================================

def add_markov_options(p):
    p.add_argument('--state-size', type=int, help='Words per chain state')
    p.add_argument('--min-chars', type=int, help='Shortest accepted post')
    p.add_argument('--max-chars', type=int, help='Longest accepted post')
    p.add_argument('--max-tries', type=int, help='Walks before giving up')
    p.add_argument('--seed', type=int, help='Seed for reproducible output')


def build_parser():
    parser = argparse.ArgumentParser(
        prog='markovbot',
        description='markovbot - Markov chain post generator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate --file tweets.txt -n 3 --min-chars 40
  %(prog)s clean raw_posts.txt --exclude spoiler,nsfw
  %(prog)s upload tweets.txt --replace
  %(prog)s run --force
"""
    )

    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress non-essential output')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log every generation attempt')
    parser.add_argument('--env', help='Path to .env file (default: .env in MARKOVBOT_HOME or the current directory)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # --- generate ---
    p = subparsers.add_parser('generate', aliases=['gen', 'g'], help='Generate posts')
    p.add_argument('--file', '-f', help='Corpus file, one post per line (default: corpus store)')
    p.add_argument('-n', '--count', type=positive_int, default=1, help='Number of posts (default: 1)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')
    add_markov_options(p)

    # --- clean ---
    p = subparsers.add_parser('clean', help='Normalize raw posts')
    p.add_argument('path', help="Input file, or '-' for stdin")
    p.add_argument('--exclude', '-x', help='Comma-separated words to remove')

    # --- upload ---
    p = subparsers.add_parser('upload', help='Load a corpus file into the store')
    p.add_argument('path', help="Input file, or '-' for stdin")
    p.add_argument('--replace', action='store_true', help='Replace stored posts instead of appending')

    # --- count ---
    subparsers.add_parser('count', help='Number of stored source posts')

    # --- run ---
    p = subparsers.add_parser('run', help='Run one bot cycle')
    p.add_argument('--force', action='store_true', help='Skip the random posting gate')
    p.add_argument('--live', action='store_true', help='Publish even if DEBUG_MODE is set')
    add_markov_options(p)

    # --- config ---
    subparsers.add_parser('config', help='Show effective configuration')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    # Handle aliases
    cmd_map = {'gen': 'generate', 'g': 'generate'}
    command = cmd_map.get(args.command, args.command)

    out = Output(quiet=args.quiet)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    commands = {
        'generate': cmd_generate,
        'clean': cmd_clean,
        'upload': cmd_upload,
        'count': cmd_count,
        'run': cmd_run,
        'config': cmd_config,
    }

    handler = commands.get(command)
    if handler:
        try:
            return handler(args, out)
        except KeyboardInterrupt:
            out.print("\nCancelled.")
            return 130
        except Exception as e:
            out.error(str(e))
            if args.verbose:
                import traceback
                traceback.print_exc()
            return 1

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
