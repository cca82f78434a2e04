#!/usr/bin/env python3
"""
Corpus Store
============
SQLite storage for the training corpus and for the bot's own recent posts.

Usage:
    store = CorpusStore()

    # Replace the corpus with an uploaded file
    store.upload_from_text(Path('tweets.txt').read_text(), append=False)

    # Read it back for training
    posts = store.get_source_posts()

    # Remember what we published so replies can be matched to it
    store.remember_post('mastodon', '1123581321', 'the generated text')
    store.get_recent_post('mastodon', '1123581321')
"""

import logging
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from markovbot.errors import CorpusStoreError
from markovbot.settings import get_setting, resolve_path

logger = logging.getLogger(__name__)

DEFAULT_RECENT_POST_TTL_HOURS = 24


@dataclass
class RecentPost:
    """A post the bot published recently."""
    platform: str
    post_id: str
    content: str
    created_at: float

    def to_dict(self) -> dict:
        return {
            'platform': self.platform,
            'post_id': self.post_id,
            'content': self.content,
            'created_at': self.created_at,
        }


class CorpusStore:
    """
    SQLite database holding source posts and recently published posts.

    Source posts keep their insertion order, which is the order they are
    fed to the chain builder.
    """

    def __init__(self, db_path: str = None, recent_post_ttl_hours: int = None):
        if db_path is None:
            db_path = resolve_path(get_setting('corpus.db_path', 'data/corpus.db'))
        if recent_post_ttl_hours is None:
            recent_post_ttl_hours = get_setting(
                'corpus.recent_post_ttl_hours', DEFAULT_RECENT_POST_TTL_HOURS
            )

        self.db_path = Path(db_path)
        self.recent_post_ttl_hours = recent_post_ttl_hours
        self._init_db()

    @contextmanager
    def _connect(self):
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise CorpusStoreError(f"Cannot open corpus database {self.db_path}: {e}") from e
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            raise CorpusStoreError(f"Corpus database error: {e}") from e
        finally:
            conn.close()

    def _init_db(self):
        """Create database tables"""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS source_posts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    text TEXT NOT NULL,
                    created_at REAL NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS recent_posts (
                    platform TEXT NOT NULL,
                    post_id TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    PRIMARY KEY (platform, post_id)
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_recent_created ON recent_posts(created_at)"
            )

    # =========================================================================
    # Source Posts
    # =========================================================================

    def store_source_posts(self, posts: Iterable[str], append: bool = False) -> int:
        """
        Store training posts.

        Args:
            posts: Post texts; blank entries are dropped, others trimmed
            append: Keep existing posts instead of replacing them

        Returns:
            Total number of stored posts afterwards
        """
        rows = [p.strip() for p in posts if isinstance(p, str) and p.strip()]
        now = time.time()

        with self._connect() as conn:
            if not append:
                conn.execute("DELETE FROM source_posts")
            conn.executemany(
                "INSERT INTO source_posts (text, created_at) VALUES (?, ?)",
                [(text, now) for text in rows],
            )
            total = conn.execute("SELECT COUNT(*) FROM source_posts").fetchone()[0]

        logger.info(
            f"{'Appended' if append else 'Stored'} {len(rows)} source posts ({total} total)"
        )
        return total

    def get_source_posts(self) -> List[str]:
        """All source posts in insertion order"""
        with self._connect() as conn:
            cursor = conn.execute("SELECT text FROM source_posts ORDER BY id ASC")
            return [row[0] for row in cursor.fetchall()]

    def upload_from_text(self, text: str, append: bool = True) -> int:
        """Store one post per non-blank line of `text`."""
        return self.store_source_posts(text.splitlines(), append=append)

    def count(self) -> int:
        """Count stored source posts"""
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM source_posts").fetchone()[0]

    # =========================================================================
    # Recent Posts
    # =========================================================================

    def remember_post(self,
                      platform: str,
                      post_id: str,
                      content: str,
                      now: float = None) -> RecentPost:
        """Record a published post, dropping entries older than the TTL."""
        now = time.time() if now is None else now
        post = RecentPost(platform, str(post_id), content, now)

        with self._connect() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO recent_posts (platform, post_id, content, created_at)
                VALUES (?, ?, ?, ?)
            """, (post.platform, post.post_id, post.content, post.created_at))

        self.prune_recent(self.recent_post_ttl_hours, now=now)
        return post

    def get_recent_post(self, platform: str, post_id: str) -> Optional[RecentPost]:
        """Look up a remembered post"""
        with self._connect() as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute("""
                SELECT platform, post_id, content, created_at
                FROM recent_posts WHERE platform = ? AND post_id = ?
            """, (platform, str(post_id))).fetchone()

        if not row:
            return None
        return RecentPost(row['platform'], row['post_id'], row['content'], row['created_at'])

    def prune_recent(self, ttl_hours: float = None, now: float = None) -> int:
        """Delete remembered posts older than `ttl_hours`; returns how many."""
        if ttl_hours is None:
            ttl_hours = self.recent_post_ttl_hours
        now = time.time() if now is None else now
        cutoff = now - ttl_hours * 3600

        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM recent_posts WHERE created_at < ?", (cutoff,)
            )
            removed = cursor.rowcount

        if removed:
            logger.debug(f"Pruned {removed} recent posts older than {ttl_hours}h")
        return removed


__all__ = [
    'CorpusStore',
    'RecentPost',
]
