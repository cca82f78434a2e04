"""
Tests for Text Normalization
============================
Tests for Normalizer and the individual cleaning stages in
markovbot/normalizer.py.
"""

import pytest

from markovbot.normalizer import (
    Normalizer,
    normalize,
    clean_corpus,
    strip_markup,
    decode_entities,
    strip_control_chars,
    strip_urls,
    strip_mentions,
)


class TestEmptyInput:
    """Bad input never raises and gives ''."""

    @pytest.mark.parametrize("raw", [None, '', '   ', '\n\t  \r\n', 42, ['a b c']])
    def test_returns_empty_string(self, raw):
        assert normalize(raw) == ''

    def test_only_noise_becomes_empty(self):
        """Input that is nothing but links and mentions ends up empty."""
        assert normalize('@alice https://example.com') == ''


class TestMarkup:
    """Tests for HTML stripping."""

    def test_block_boundaries_become_spaces(self):
        assert normalize('<p>Hello</p><p>World</p>') == 'Hello World'

    def test_line_breaks_become_spaces(self):
        assert normalize('one<br>two<br/>three') == 'one two three'

    def test_inline_tags_removed_without_space(self):
        assert normalize('<b>bold</b>text') == 'boldtext'

    def test_mastodon_status_html(self):
        """A typical Mastodon status body with an h-card mention."""
        html = (
            '<p><span class="h-card"><a href="https://hachyderm.io/@bob" '
            'class="u-url mention">@<span>bob</span></a></span> '
            'hello there</p><p>second paragraph</p>'
        )
        assert normalize(html) == 'hello there second paragraph'

    def test_strip_markup_collapses_whitespace(self):
        assert strip_markup('<div>  a  </div>\n<div>b</div>') == 'a b'


class TestEntities:
    """Tests for entity decoding."""

    def test_known_entities(self):
        assert normalize('Tom &amp; Jerry') == 'Tom & Jerry'
        assert normalize('I &lt;3 this') == 'I <3 this'
        assert normalize('it&#39;s &quot;fine&quot;') == 'it\'s "fine"'

    def test_hex_entities_any_case(self):
        assert decode_entities('a&#x2F;b&#x2f;c') == 'a/b/c'

    def test_unknown_entities_dropped(self):
        assert normalize('a &bogus; b') == 'a b'

    def test_nbsp_collapses(self):
        assert normalize('a&nbsp;&nbsp;b') == 'a b'


class TestControlCharacters:
    """Tests for control character stripping."""

    def test_null_and_zero_width_removed(self):
        assert normalize('hello\x00world\u200b!') == 'helloworld!'

    def test_whitespace_controls_become_spaces(self):
        assert strip_control_chars('tab\tsep\nline') == 'tab sep line'

    def test_zero_width_joiner_kept(self):
        family = '\U0001F468\u200d\U0001F469'
        assert strip_control_chars(family) == family


class TestUrls:
    """Tests for URL removal."""

    def test_scheme_url(self):
        assert normalize('Check out this link https://example.com') == 'Check out this link'

    def test_http_url_with_query(self):
        assert normalize('see http://example.com/a?b=1#c now') == 'see now'

    def test_www_url(self):
        assert normalize('visit www.example.org/page today') == 'visit today'

    def test_bare_domain_with_path(self):
        assert normalize('read example.com/path/to?x=1 later') == 'read later'

    def test_bare_multi_label_domain(self):
        assert normalize('news at blog.example.co.uk daily') == 'news at daily'

    def test_non_domain_dotted_word_kept(self):
        assert normalize('node.js is fine') == 'node.js is fine'

    def test_email_removed(self):
        assert normalize('mail me at a@b.com ok') == 'mail me at ok'

    def test_email_with_dotted_local_part(self):
        assert normalize('write first.last+tag@example.co.uk today.') == 'write today.'

    def test_email_domain_not_left_behind(self):
        assert strip_urls('ping a@b.com') == 'ping '

    def test_federated_handle_not_split(self):
        """The host of a federated handle is not mistaken for a URL."""
        assert strip_urls('@alice@mastodon.social hi') == '@alice@mastodon.social hi'


class TestMentions:
    """Tests for mention removal."""

    def test_multiple_mentions(self):
        assert normalize('@user1 @user2 multiple mentions') == 'multiple mentions'

    def test_dotted_handle(self):
        assert normalize('thanks @bob.smith for this') == 'thanks for this'

    def test_federated_handle(self):
        assert normalize('@alice@mastodon.social: hello there') == 'hello there'

    def test_trailing_colon_removed(self):
        assert normalize('@bob: hi') == 'hi'

    def test_rt_prefix_with_mention_chain(self):
        assert normalize('RT @alice: @bob great post') == 'great post'

    def test_rt_prefix_lowercase(self):
        assert strip_mentions('rt @alice: nice') == 'nice'

    def test_rt_inside_text_kept(self):
        assert normalize('I said RT please') == 'I said RT please'

    def test_sentence_dot_after_mention_kept(self):
        assert normalize('ask @carol.') == 'ask .'


class TestExcludedWords:
    """Tests for the excluded-word filter."""

    def test_whole_word_case_insensitive(self):
        n = Normalizer({'cat'})
        assert n.normalize('The cat concatenated CAT catalog') == 'The concatenated catalog'

    def test_multiple_words(self):
        n = Normalizer(['spoiler', 'nsfw'])
        assert n.normalize('NSFW big spoiler ahead') == 'big ahead'

    def test_regex_characters_escaped(self):
        n = Normalizer({'c++'})
        assert n.normalize('I like c++ and c') == 'I like and c'

    def test_no_excluded_words(self):
        assert Normalizer().normalize('keep every word') == 'keep every word'

    def test_module_function_accepts_list(self):
        assert normalize('drop this word', excluded_words=['this']) == 'drop word'


class TestCleanCorpus:
    """Tests for clean_corpus()."""

    def test_drops_empty_results(self):
        items = ['hello world', None, '   ', '@only @mentions', '<p>kept text</p>']
        assert clean_corpus(items) == ['hello world', 'kept text']

    def test_deterministic(self):
        items = ['RT @a: one https://x.io two', '<p>three &amp; four</p>']
        assert clean_corpus(items) == clean_corpus(items)

    def test_callable(self):
        n = Normalizer()
        assert n('  spaced   out  ') == 'spaced out'
