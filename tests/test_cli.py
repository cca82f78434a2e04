"""
Tests for CLI Commands
======================
Tests for the markovbot CLI interface in markovbot/cli.py.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

from markovbot import __version__
from markovbot.cli import build_parser, main

ROOT = Path(__file__).resolve().parents[1]


class TestCLIBasic:
    """Basic CLI tests."""

    def test_version_flag(self):
        """Test --version flag."""
        result = subprocess.run(
            [sys.executable, "-m", "markovbot", "--version"],
            capture_output=True,
            text=True,
            cwd=str(ROOT),
        )
        assert result.returncode == 0
        assert __version__ in result.stdout

    def test_help_flag(self):
        """Test --help flag."""
        result = subprocess.run(
            [sys.executable, "-m", "markovbot", "--help"],
            capture_output=True,
            text=True,
            cwd=str(ROOT),
        )
        assert result.returncode == 0
        assert "generate" in result.stdout
        assert "upload" in result.stdout

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    @pytest.mark.parametrize("count", ['0', '-2', 'many'])
    def test_count_must_be_positive(self, count, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(['generate', '-n', count])
        assert exc_info.value.code == 2
        assert '--count' in capsys.readouterr().err

    def test_generate_aliases(self):
        parser = build_parser()
        for alias in ('generate', 'gen', 'g'):
            args = parser.parse_args([alias, '-n', '2'])
            assert args.count == 2


@pytest.fixture
def cli_env(clean_env, tmp_path, missing_env_file):
    """Point the corpus store at a temp database; return the --env args."""
    clean_env['CORPUS_DB_PATH'] = str(tmp_path / 'cli.db')
    return ['--env', str(missing_env_file)]


@pytest.fixture
def corpus_file(tmp_path, tweet_corpus):
    path = tmp_path / 'tweets.txt'
    path.write_text('\n'.join(tweet_corpus) + '\n', encoding='utf-8')
    return path


LOOSE = ['--min-chars', '1', '--max-chars', '1000']


class TestGenerateCommand:

    def test_generate_from_file(self, cli_env, corpus_file, capsys):
        code = main(cli_env + ['-q', 'generate', '--file', str(corpus_file), '--seed', '3'] + LOOSE)
        assert code == 0
        assert capsys.readouterr().out.strip()

    def test_seed_reproducible(self, cli_env, corpus_file, capsys):
        args = cli_env + ['-q', 'generate', '-f', str(corpus_file), '--seed', '9'] + LOOSE
        main(args)
        first = capsys.readouterr().out
        main(args)
        assert capsys.readouterr().out == first

    def test_json_output(self, cli_env, corpus_file, capsys):
        code = main(cli_env + ['-q', 'generate', '-f', str(corpus_file), '-n', '3', '--json',
                               '--seed', '1'] + LOOSE)
        assert code == 0
        posts = json.loads(capsys.readouterr().out)
        assert len(posts) == 3
        for post in posts:
            assert post['length'] == len(post['text'])
            assert post['attempts'] >= 1

    def test_generate_from_store(self, cli_env, corpus_file, capsys):
        assert main(cli_env + ['upload', str(corpus_file)]) == 0
        capsys.readouterr()
        assert main(cli_env + ['-q', 'gen', '--seed', '2'] + LOOSE) == 0
        assert capsys.readouterr().out.strip()

    def test_impossible_bounds(self, cli_env, corpus_file, capsys):
        code = main(cli_env + ['generate', '-f', str(corpus_file), '--min-chars', '5000',
                               '--max-chars', '6000', '--max-tries', '3'])
        assert code == 1
        assert 'Error' in capsys.readouterr().err

    def test_empty_store(self, cli_env, capsys):
        assert main(cli_env + ['generate']) == 1
        assert 'Error' in capsys.readouterr().err

    def test_invalid_bounds(self, cli_env, corpus_file, capsys):
        code = main(cli_env + ['generate', '-f', str(corpus_file),
                               '--min-chars', '50', '--max-chars', '10'])
        assert code == 1
        assert 'max_chars' in capsys.readouterr().err


class TestCorpusCommands:

    def test_upload_and_count(self, cli_env, tmp_path, capsys):
        path = tmp_path / 'posts.txt'
        path.write_text('one post here\n\nanother post\nthird post\n')
        assert main(cli_env + ['upload', str(path)]) == 0
        capsys.readouterr()

        assert main(cli_env + ['count']) == 0
        assert capsys.readouterr().out.strip() == '3'

    def test_upload_replace(self, cli_env, tmp_path, capsys):
        path = tmp_path / 'posts.txt'
        path.write_text('a b c\nd e f\n')
        main(cli_env + ['upload', str(path)])
        main(cli_env + ['upload', str(path)])
        main(cli_env + ['upload', '--replace', str(path)])
        capsys.readouterr()

        main(cli_env + ['count'])
        assert capsys.readouterr().out.strip() == '2'

    def test_clean(self, cli_env, tmp_path, capsys):
        path = tmp_path / 'raw.txt'
        path.write_text('<p>hi there</p>\n@bob https://x.com\nRT @al: spoiler alert\n')
        assert main(cli_env + ['clean', str(path), '--exclude', 'spoiler']) == 0
        assert capsys.readouterr().out.splitlines() == ['hi there', 'alert']


class TestRunCommand:

    def test_dry_run(self, cli_env, corpus_file, capsys):
        main(cli_env + ['upload', str(corpus_file)])
        capsys.readouterr()
        code = main(cli_env + ['run', '--force', '--seed', '4'] + LOOSE)
        assert code == 0
        assert 'Debug mode' in capsys.readouterr().out

    def test_live_run_prints_panel(self, cli_env, corpus_file, capsys):
        main(cli_env + ['upload', str(corpus_file)])
        capsys.readouterr()
        code = main(cli_env + ['run', '--force', '--live', '--seed', '4'] + LOOSE)
        assert code == 0
        out = capsys.readouterr().out
        assert 'Generated Post' in out
        assert 'Posted to console' in out


class TestConfigCommand:

    def test_shows_options(self, cli_env, capsys):
        assert main(cli_env + ['config']) == 0
        out = capsys.readouterr().out
        assert 'state_size' in out
        assert 'post_probability' in out
