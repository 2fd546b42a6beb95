"""Remove unwanted tags and attributes from markup.

`TagFilter` receives markup events (start tag, end tag, raw text), asks its
`RuleSet` whether each tag and attribute may stay, and appends whatever
survives to an output buffer. Text passed to `on_text` is never inspected or
changed: only markup is filtered.

Raw markup goes through `parse()`, which drives the standard library's
``html.parser`` tokenizer; callers with their own tokenizer can feed events
directly through `on_start`, `on_end` and `on_text`, or filter a token stream
with `filter_tokens`.
"""

from __future__ import annotations

import logging
import re
from html.parser import HTMLParser

from .defaults import DEFAULT_ALLOW, DEFAULT_DENY
from .errors import FilterClosedError
from .rules import RuleSet
from .serialize import end_tag_to_html, start_tag_to_html
from .tokens import CharacterTokens, Tag, attr_items

logger = logging.getLogger(__name__)

_SECTION_NAME = re.compile(r"[a-zA-Z][-_.a-zA-Z0-9]*")
_CONDITIONAL_SECTIONS = frozenset({"if", "else", "endif"})


class _MarkupTokenizer(HTMLParser):
    """Turns raw markup into filter events.

    Character references are left unconverted so that text reaches the
    output exactly as written; comments, declarations and processing
    instructions are handed on as text.

    A stray ``<`` or ``&`` that the tokenizer could not place is escaped:
    once the tag next to it is dropped it would otherwise join the following
    text into new markup.
    """

    def __init__(self, sink):
        super().__init__(convert_charrefs=False)
        self.sink = sink

    def handle_starttag(self, tag, attrs):
        self.sink.on_start(tag, attrs)

    def handle_startendtag(self, tag, attrs):
        self.sink.on_start(tag, attrs, self_closing=True)

    def handle_endtag(self, tag):
        self.sink.on_end(tag)

    def set_cdata_mode(self, elem, **kwargs):
        # The body of a dropped <script> or <style> is tokenized and filtered
        # like any other markup instead of passing through as raw text.
        if self.sink.rules.tag_ok(elem):
            super().set_cdata_mode(elem, **kwargs)

    def handle_data(self, data):
        if self.cdata_elem is None:
            data = data.replace("&", "&amp;").replace("<", "&lt;")
        self.sink.on_text(data)

    def handle_entityref(self, name):
        self.sink.on_text(f"&{name};")

    def handle_charref(self, name):
        self.sink.on_text(f"&#{name};")

    def handle_comment(self, data):
        self.sink.on_text(f"<!--{data}-->")

    def handle_decl(self, decl):
        self.sink.on_text(f"<!{decl}>")

    def handle_pi(self, data):
        self.sink.on_text(f"<?{data}>")

    def unknown_decl(self, data):
        # Marked sections end in "]]>" except the conditional ones (MS Office "if"/"else"/"endif").
        name = _SECTION_NAME.match(data)
        close = "]>" if name and name.group().lower() in _CONDITIONAL_SECTIONS else "]]>"
        self.sink.on_text(f"<![{data}{close}")


class TagFilter:
    """Selective tag remover.

    Usage::

        f = TagFilter()
        f.parse(dirty_html)
        clean_html = f.output()

    Without arguments the rules in `tagfilter.defaults` are loaded. `allow`
    and `deny` replace the respective default independently; pass ``{}`` to
    start a kind out empty. A prebuilt `rules` object is used as is, and may
    be shared between filters that run one after another.

    `output()` finishes the current document. Calling `parse()` again starts
    a new document whose output is appended to the same buffer; `clear()`
    empties it.
    """

    __slots__ = ("_buffer", "_closed", "_tokenizer", "rules")

    def __init__(self, allow=None, deny=None, *, rules=None):
        if rules is None:
            rules = RuleSet(
                DEFAULT_ALLOW if allow is None else allow,
                DEFAULT_DENY if deny is None else deny,
            )
        elif allow is not None or deny is not None:
            raise TypeError("Pass either a RuleSet or allow/deny fragments, not both")
        self.rules = rules
        self._buffer = []
        self._closed = False
        self._tokenizer = _MarkupTokenizer(self)

    # Configuration

    def allow_tags(self, fragment=None):
        self.rules.allow(fragment)

    def deny_tags(self, fragment=None):
        self.rules.deny(fragment)

    def allows(self):
        return self.rules.allows()

    def denies(self):
        return self.rules.denies()

    # Driving

    @property
    def closed(self):
        return self._closed

    def parse(self, text):
        """Feed raw markup. May be called repeatedly with consecutive chunks."""
        if self._closed:
            self._tokenizer = _MarkupTokenizer(self)
            self._closed = False
        self._tokenizer.feed(text or "")
        return self

    def finish(self):
        """Flush anything the tokenizer still holds and close the document."""
        if self._closed:
            return
        self._tokenizer.close()
        self._closed = True

    def output(self):
        self.finish()
        return "".join(self._buffer)

    def clear(self):
        self._buffer = []

    # Events

    def on_start(self, tag, attrs=None, self_closing=False):
        self._check_open()
        kept = filter_start_tag(self.rules, tag, attrs)
        if kept is not None:
            self._buffer.append(start_tag_to_html(tag, kept, self_closing))

    def on_end(self, tag):
        self._check_open()
        if self.rules.tag_ok(tag):
            self._buffer.append(end_tag_to_html(tag))
        else:
            logger.debug("dropped </%s>", tag)

    def on_text(self, raw):
        self._check_open()
        self._buffer.append(raw)

    def process_token(self, token):
        """Token-sink form of the three event methods."""
        token_type = type(token)
        if token_type is CharacterTokens:
            self.on_text(token.data)
        elif token_type is Tag:
            if token.kind == Tag.START:
                self.on_start(token.name, token.attrs, token.self_closing)
            else:
                self.on_end(token.name)
        else:
            raise TypeError(f"Unsupported token: {token!r}")

    def _check_open(self):
        if self._closed:
            raise FilterClosedError("Filter is finished; call parse() to start a new document")


def filter_start_tag(rules, tag, attrs):
    """Return the attributes of a start tag that may stay, or None to drop the tag.

    The result keeps the surviving (name, value) pairs in their original
    order and casing; only the rule lookups are case-insensitive.
    """
    if not rules.tag_ok(tag):
        logger.debug("dropped <%s>", tag)
        return None

    kept = []
    for name, value in attr_items(attrs):
        if rules.attribute_ok(tag, name, value):
            kept.append((name, value))
        else:
            logger.debug("dropped attribute %s of <%s>", name, tag)
    return kept


def filter_tokens(tokens, rules=None):
    """Yield the tokens that survive `rules`, with start tags trimmed.

    Without `rules` the default rule set is used.
    """
    if rules is None:
        rules = RuleSet(DEFAULT_ALLOW, DEFAULT_DENY)

    for token in tokens:
        token_type = type(token)
        if token_type is CharacterTokens:
            yield token
        elif token_type is Tag:
            if token.kind == Tag.START:
                kept = filter_start_tag(rules, token.name, token.attrs)
                if kept is not None:
                    yield Tag(Tag.START, token.name, kept, token.self_closing)
            elif rules.tag_ok(token.name):
                yield token
        else:
            raise TypeError(f"Unsupported token: {token!r}")


def filter_html(text, *, allow=None, deny=None, rules=None):
    """Filter a complete document in one call."""
    tag_filter = TagFilter(allow, deny, rules=rules)
    tag_filter.parse(text)
    return tag_filter.output()
