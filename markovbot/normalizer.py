#!/usr/bin/env python3
"""
Text Normalization
==================
Turns raw posts (HTML from Mastodon, plain text from Bluesky, lines from
an uploaded corpus) into clean plain text for training and filtering.

Pipeline, in order:
1. Markup: block boundaries become spaces, other tags are dropped
2. Entities: a fixed table is decoded, unknown entities are dropped
3. Control and format characters are removed
4. URLs: scheme, www. and bare domain.tld forms
5. Mentions: leading RT marker with its mention chain, then @handles
   (federated @user@host.tld included) and a colon right after them
6. Whitespace collapsed and trimmed
7. Excluded words removed (whole word, case-insensitive)
8. Final control character / whitespace pass

Usage:
    from markovbot.normalizer import Normalizer

    normalizer = Normalizer(excluded_words={'spoiler'})
    normalizer.normalize('<p>RT @alice: look https://x.io</p>')   # 'look'
"""

import re
import unicodedata
from typing import Iterable, List, Optional


# =============================================================================
# Patterns
# =============================================================================

BLOCK_TAGS = (
    'p', 'br', 'div', 'li', 'ul', 'ol', 'blockquote', 'pre', 'hr',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'tr', 'td', 'th',
    'section', 'article', 'header', 'footer',
)

BLOCK_TAG_RE = re.compile(
    r'<\s*/?\s*(?:' + '|'.join(BLOCK_TAGS) + r')\b[^>]*>',
    re.IGNORECASE,
)
COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)
TAG_RE = re.compile(r'</?[a-zA-Z][^<>]*>')

ENTITY_RE = re.compile(r'&#?[0-9a-zA-Z]+;')

ENTITIES = {
    '&amp;': '&',
    '&lt;': '<',
    '&gt;': '>',
    '&quot;': '"',
    '&#34;': '"',
    '&#39;': "'",
    '&#x27;': "'",
    '&apos;': "'",
    '&#x2f;': '/',
    '&#47;': '/',
    '&#x5c;': '\\',
    '&#92;': '\\',
    '&#x60;': '`',
    '&#96;': '`',
    '&#x3d;': '=',
    '&#61;': '=',
    '&nbsp;': ' ',
    '&#160;': ' ',
    '&#xa0;': ' ',
    '&hellip;': '\u2026',
    '&ndash;': '\u2013',
    '&mdash;': '\u2014',
    '&lsquo;': '\u2018',
    '&rsquo;': '\u2019',
    '&#8217;': '\u2019',
    '&ldquo;': '\u201c',
    '&rdquo;': '\u201d',
}

# Tab, newline and friends turn into spaces instead of vanishing
WHITESPACE_CONTROLS = '\t\n\r\x0b\x0c'
CONTROL_CATEGORIES = ('Cc', 'Cf')
# Zero width joiner glues multi-codepoint emoji together
KEEP_FORMAT_CHARS = '\u200d'

URL_TLDS = (
    'com', 'net', 'org', 'edu', 'gov', 'mil', 'int', 'io', 'co', 'ai',
    'app', 'dev', 'me', 'ly', 'gg', 'tv', 'fm', 'xyz', 'info', 'biz',
    'social', 'online', 'site', 'tech', 'blog', 'news', 'page', 'link',
    'us', 'uk', 'de', 'ca', 'au', 'fr', 'jp', 'eu', 'nl',
)

SCHEME_URL_RE = re.compile(r'\bhttps?://\S+', re.IGNORECASE)
WWW_URL_RE = re.compile(r'\bwww\.\S+', re.IGNORECASE)
# Address with a local part; a handle starting at '@' is left to the mention stage
EMAIL_RE = re.compile(
    r'(?<![\w@.+\-])[\w.+\-]+@(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z]{2,}\b',
    re.IGNORECASE,
)
# Not after '@' so federated handles reach the mention stage intact
BARE_DOMAIN_RE = re.compile(
    r'(?<![@\w.])'
    r'(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+'
    r'(?:' + '|'.join(URL_TLDS) + r')\b'
    r'(?:[/?#]\S*)?',
    re.IGNORECASE,
)

_HANDLE = r'@\w+(?:[.\-]\w+)*'
MENTION = _HANDLE + r'(?:' + _HANDLE + r')?'
MENTION_RE = re.compile(r'(?<!\w)' + MENTION + r':?')
RT_PREFIX_RE = re.compile(
    r'^\s*RT\b:?\s*(?:' + MENTION + r':?\s*)*',
    re.IGNORECASE,
)

WHITESPACE_RE = re.compile(r'\s+')


# =============================================================================
# Stages
# =============================================================================

def collapse_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub(' ', text).strip()


def strip_markup(text: str) -> str:
    """Remove HTML, keeping block boundaries as word breaks."""
    text = COMMENT_RE.sub(' ', text)
    text = BLOCK_TAG_RE.sub(' ', text)
    text = TAG_RE.sub('', text)
    return collapse_whitespace(text)


def _replace_entity(match) -> str:
    entity = match.group(0)
    if entity in ENTITIES:
        return ENTITIES[entity]
    return ENTITIES.get(entity.lower(), '')


def decode_entities(text: str) -> str:
    """Decode known entities; unknown ones are dropped."""
    return ENTITY_RE.sub(_replace_entity, text)


def strip_control_chars(text: str) -> str:
    out = []
    for ch in text:
        if ch in WHITESPACE_CONTROLS:
            out.append(' ')
        elif ch in KEEP_FORMAT_CHARS:
            out.append(ch)
        elif unicodedata.category(ch) in CONTROL_CATEGORIES:
            continue
        else:
            out.append(ch)
    return ''.join(out)


def strip_urls(text: str) -> str:
    text = EMAIL_RE.sub('', text)
    text = SCHEME_URL_RE.sub('', text)
    text = WWW_URL_RE.sub('', text)
    return BARE_DOMAIN_RE.sub('', text)


def strip_mentions(text: str) -> str:
    text = RT_PREFIX_RE.sub('', text)
    return MENTION_RE.sub('', text)


def compile_excluded(words: Iterable[str]) -> Optional[re.Pattern]:
    """Single whole-word, case-insensitive pattern for all excluded words."""
    cleaned = sorted({w.strip() for w in words if w and w.strip()}, key=len, reverse=True)
    if not cleaned:
        return None
    alternation = '|'.join(re.escape(w) for w in cleaned)
    return re.compile(r'(?<!\w)(?:' + alternation + r')(?!\w)', re.IGNORECASE)


# =============================================================================
# Normalizer
# =============================================================================

class Normalizer:
    """Stateless text cleaner configured with an excluded-word list."""

    def __init__(self, excluded_words: Iterable[str] = ()):
        self.excluded_words = frozenset(excluded_words or ())
        self._excluded_re = compile_excluded(self.excluded_words)

    def normalize(self, raw) -> str:
        """Clean one raw item. Never raises; bad input gives ''."""
        if not isinstance(raw, str) or not raw.strip():
            return ''

        text = strip_markup(raw)
        text = decode_entities(text)
        text = strip_control_chars(text)
        text = strip_urls(text)
        text = strip_mentions(text)
        text = collapse_whitespace(text)

        if self._excluded_re is not None:
            text = collapse_whitespace(self._excluded_re.sub('', text))

        return collapse_whitespace(strip_control_chars(text))

    __call__ = normalize

    def clean_corpus(self, items: Iterable) -> List[str]:
        """Normalize every item, dropping those that end up empty."""
        cleaned = []
        for item in items or ():
            text = self.normalize(item)
            if text:
                cleaned.append(text)
        return cleaned


_default_normalizer = Normalizer()


def normalize(raw, excluded_words: Iterable[str] = None) -> str:
    """Normalize with an optional excluded-word list."""
    if excluded_words:
        return Normalizer(excluded_words).normalize(raw)
    return _default_normalizer.normalize(raw)


def clean_corpus(items: Iterable, excluded_words: Iterable[str] = None) -> List[str]:
    """Normalize a corpus, dropping empty results."""
    if excluded_words:
        return Normalizer(excluded_words).clean_corpus(items)
    return _default_normalizer.clean_corpus(items)


__all__ = [
    'Normalizer',
    'normalize',
    'clean_corpus',
    'strip_markup',
    'decode_entities',
    'strip_control_chars',
    'strip_urls',
    'strip_mentions',
    'collapse_whitespace',
]
