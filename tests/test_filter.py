from __future__ import annotations

import unittest

from tagfilter import (
    DEFAULT_ALLOW,
    DEFAULT_DENY,
    CharacterTokens,
    FilterClosedError,
    RuleSet,
    Tag,
    TagFilter,
    filter_html,
    filter_tokens,
)


class TestDecisionPolicy(unittest.TestCase):
    def test_empty_rules_strip_every_tag(self) -> None:
        assert filter_html("<p>hi</p>", rules=RuleSet()) == "hi"
        assert filter_html('<a href="x"><b>hi</b></a>', allow={}, deny={}) == "hi"

    def test_deny_takes_precedence(self) -> None:
        out = filter_html(
            '<a href="x" onClick="y">t</a>',
            allow={"a": ["any"]},
            deny={"a": ["onClick"]},
        )
        assert out == '<a href="x">t</a>'

    def test_whole_tag_deny(self) -> None:
        html = '<p class="x">t</p>'
        assert filter_html(html, allow={"p": ["any"]}, deny={"p": ["all"]}) == "t"

    def test_attribute_deny_keeps_tag(self) -> None:
        html = '<p class="x">t</p>'
        assert filter_html(html, allow={"p": ["any"]}, deny={"p": ["any"]}) == "<p>t</p>"

    def test_value_restricted_allow(self) -> None:
        html = '<a class="big">x</a><a class="huge">y</a>'
        out = filter_html(html, allow={"a": {"class": ["big", "small"]}}, deny={})
        assert out == '<a class="big">x</a><a>y</a>'

    def test_cross_tag_attribute_rule(self) -> None:
        allow = {
            "p": ["none"],
            "div": ["none"],
            "any": {"align": ["left", "right", "center"]},
        }
        html = '<p align="left">a</p><div align="CENTER" id="d">b</div><p align="justify">c</p>'
        out = filter_html(html, allow=allow, deny={})
        assert out == '<p align="left">a</p><div align="CENTER">b</div><p>c</p>'
        # Attribute rules never admit a tag on their own.
        assert filter_html('<span align="left">s</span>', allow=allow, deny={}) == "s"

    def test_deny_only_rules_remove_every_tag(self) -> None:
        assert filter_html("<p>x<img src='a.png'></p>", allow={}, deny={"img": ["all"]}) == "x"

    def test_merge_replaces_tag_rules(self) -> None:
        tag_filter = TagFilter(allow={"p": {"class": ["big"]}}, deny={})
        tag_filter.allow_tags({"p": {"align": ["left"]}})
        tag_filter.parse('<p class="big" align="left">t</p>')
        assert tag_filter.output() == '<p align="left">t</p>'

    def test_rules_are_case_insensitive(self) -> None:
        assert filter_html('<A HREF="x">t</A>', allow={"a": ["href"]}, deny={}) == '<a href="x">t</a>'
        assert filter_html('<a href="x">t</a>', allow={"A": ["HREF"]}, deny={}) == '<a href="x">t</a>'

    def test_end_tags_follow_tag_decision(self) -> None:
        rules = RuleSet(allow={"p": ["none"], "img": ["any"]}, deny={"img": ["all"]})
        assert filter_html("</p></img></div>", rules=rules) == "</p>"


class TestDefaults(unittest.TestCase):
    def test_default_rules_loaded(self) -> None:
        tag_filter = TagFilter()
        assert tag_filter.allows() == RuleSet(DEFAULT_ALLOW).allows()
        assert tag_filter.denies() == RuleSet(deny=DEFAULT_DENY).denies()

    def test_default_filtering(self) -> None:
        html = '<p class="c" onclick="e()" align="left">hi <img src="x.png"><blink>!</blink><b>b</b></p>'
        assert filter_html(html) == '<p align="left">hi !<b>b</b></p>'

    def test_default_links_and_breaks(self) -> None:
        html = '<a href="http://x" target="_blank" title="t">l</a><br clear="all"><br clear="none">'
        assert filter_html(html) == '<a href="http://x" target="_blank">l</a><br clear="all"><br>'

    def test_default_strips_unknown_tags(self) -> None:
        assert filter_html("<table><tr><td>1</td></tr></table><marquee>m</marquee>") == "1m"

    def test_each_kind_defaults_independently(self) -> None:
        # Only allow is supplied: the default deny rules still strip class.
        out = filter_html('<div class="x" id="y">d</div>', allow={"div": ["any"]})
        assert out == '<div id="y">d</div>'
        # Only deny is supplied: the default allow rules admit images again.
        assert filter_html('<b>b</b><img src="a.png">', deny={}) == '<b>b</b><img src="a.png">'

    def test_rules_and_fragments_are_exclusive(self) -> None:
        with self.assertRaises(TypeError):
            TagFilter(allow={}, rules=RuleSet())


class TestTextHandling(unittest.TestCase):
    def test_script_body_is_text(self) -> None:
        assert filter_html("<script>alert(1)</script>") == "alert(1)"

    def test_comments_and_declarations_pass_through(self) -> None:
        html = "<!DOCTYPE html><!-- note --><p>x</p>"
        assert filter_html(html) == "<!DOCTYPE html><!-- note --><p>x</p>"

    def test_character_references_are_not_decoded(self) -> None:
        html = "a &amp; b &lt;c&gt; &#169;"
        assert filter_html(html) == html

    def test_attribute_values_are_reescaped(self) -> None:
        allow = {"a": ["href", "title"]}
        html = "<a href=\"?a=1&amp;b=2\" title='say \"hi\"'>x</a>"
        out = filter_html(html, allow=allow, deny={})
        assert out == '<a href="?a=1&amp;b=2" title="say &quot;hi&quot;">x</a>'

    def test_valueless_attribute(self) -> None:
        assert filter_html("<input disabled>", allow={"input": ["disabled"]}, deny={}) == "<input disabled>"

    def test_self_closing_tag(self) -> None:
        assert filter_html("a<br/>b", allow={"br": ["none"]}, deny={}) == "a<br />b"

    def test_attribute_order_is_kept(self) -> None:
        html = '<img width="1" src="a" alt="b" height="2">'
        out = filter_html(html, allow={"img": ["any"]}, deny={"img": ["width"]})
        assert out == '<img src="a" alt="b" height="2">'

    def test_filtering_is_idempotent(self) -> None:
        html = (
            '<h1 align="center" class="t">Title</h1>'
            '<p onclick="x()">Some <b>bold</b> &amp; <i style="c">it</i> <img src="x"></p>'
            "<ul type='disc'><li>one<li>two</ul>"
            '<a href="/x?a=1&amp;b=2" target="_new" onMouseOver="y()">link</a>'
            "<script>alert('x')</script><!-- c -->"
        )
        once = filter_html(html)
        assert filter_html(once) == once

    def test_dropped_script_and_style_bodies_are_filtered(self) -> None:
        cases = {
            "<script><img src=x onerror=alert(1)></script>": "",
            "<style><img src=x onerror=alert(1)>p { color: red }</style>": "p { color: red }",
            "<script>if (a < b && c) go()</script>": "if (a &lt; b &amp;&amp; c) go()",
        }
        for html, expected in cases.items():
            once = filter_html(html)
            assert once == expected, html
            assert filter_html(once) == once, html

    def test_allowed_script_body_is_raw_text(self) -> None:
        html = "<script>if (a < b) go('<b>')</script>"
        out = filter_html(html, allow={"script": ["none"]}, deny={})
        assert out == html

    def test_stray_markup_characters_are_escaped(self) -> None:
        cases = {
            "<<t>I>": "&lt;I>",
            "&<l>P": "&amp;P",
            "<<x>img src=x onerror=alert(1)>": "&lt;img src=x onerror=alert(1)>",
            "a & b < c": "a &amp; b &lt; c",
        }
        for html, expected in cases.items():
            once = filter_html(html)
            assert once == expected, html
            assert filter_html(once) == once, html

    def test_marked_sections_are_stable(self) -> None:
        for html in ("<![CDATA[a]b]]>x", "<![if !IE]>x<![endif]>"):
            once = filter_html(html)
            assert "x" in once, html
            assert filter_html(once) == once, html

    def test_text_events_are_not_escaped(self) -> None:
        tag_filter = TagFilter()
        tag_filter.on_text("a & b < c")
        assert tag_filter.output() == "a & b < c"


class TestStreaming(unittest.TestCase):
    def test_chunked_input(self) -> None:
        tag_filter = TagFilter(allow={"p": ["none"]}, deny={})
        tag_filter.parse("<p cla")
        tag_filter.parse("ss='x'>h")
        tag_filter.parse("i</p>")
        assert tag_filter.output() == "<p>hi</p>"

    def test_finish_flushes_pending_text(self) -> None:
        tag_filter = TagFilter(allow={}, deny={})
        tag_filter.parse("tail <")
        tag_filter.finish()
        assert tag_filter.closed
        assert tag_filter.output() == "tail &lt;"

    def test_events_after_finish_are_rejected(self) -> None:
        tag_filter = TagFilter()
        tag_filter.parse("<b>x</b>")
        tag_filter.output()
        with self.assertRaises(FilterClosedError):
            tag_filter.on_text("y")
        with self.assertRaises(FilterClosedError):
            tag_filter.on_start("b", [])

    def test_parse_after_output_starts_new_document(self) -> None:
        tag_filter = TagFilter()
        tag_filter.parse("<b>one</b>")
        assert tag_filter.output() == "<b>one</b>"
        tag_filter.parse("<i>two</i>")
        assert not tag_filter.closed
        assert tag_filter.output() == "<b>one</b><i>two</i>"

    def test_clear_empties_buffer(self) -> None:
        tag_filter = TagFilter()
        tag_filter.parse("<b>one</b>")
        tag_filter.output()
        tag_filter.clear()
        tag_filter.parse("<i>two</i>")
        assert tag_filter.output() == "<i>two</i>"

    def test_handlers_cannot_be_installed(self) -> None:
        tag_filter = TagFilter()
        with self.assertRaises(AttributeError):
            tag_filter.handler = lambda *args: None


class TestEvents(unittest.TestCase):
    def test_event_api_keeps_original_casing(self) -> None:
        tag_filter = TagFilter(allow={"a": ["href"]}, deny={})
        tag_filter.on_start("A", [("HREF", "X"), ("Title", "t")])
        tag_filter.on_text("t")
        tag_filter.on_end("A")
        assert tag_filter.output() == '<A HREF="X">t</A>'

    def test_event_api_accepts_mapping(self) -> None:
        tag_filter = TagFilter(allow={"p": ["align"]}, deny={})
        tag_filter.on_start("p", {"align": "left", "class": "x"})
        tag_filter.on_end("p")
        assert tag_filter.output() == '<p align="left"></p>'

    def test_process_token(self) -> None:
        tag_filter = TagFilter(allow={"b": ["none"]}, deny={})
        for token in (
            Tag(Tag.START, "b", {"class": "x"}),
            CharacterTokens("x"),
            Tag(Tag.END, "b"),
            Tag(Tag.START, "i"),
        ):
            tag_filter.process_token(token)
        assert tag_filter.output() == "<b>x</b>"

    def test_process_token_rejects_unknown(self) -> None:
        with self.assertRaises(TypeError):
            TagFilter().process_token("<b>")

    def test_filter_tokens(self) -> None:
        rules = RuleSet(allow={"a": ["href"], "br": ["none"]}, deny={})
        tokens = [
            Tag(Tag.START, "a", [("href", "x"), ("onclick", "y")]),
            CharacterTokens("t"),
            Tag(Tag.END, "a"),
            Tag(Tag.START, "br", [("clear", "all")], self_closing=True),
            Tag(Tag.START, "img", [("src", "x")]),
        ]
        assert list(filter_tokens(tokens, rules)) == [
            Tag(Tag.START, "a", [("href", "x")]),
            CharacterTokens("t"),
            Tag(Tag.END, "a"),
            Tag(Tag.START, "br", [], self_closing=True),
        ]

    def test_filter_tokens_uses_defaults(self) -> None:
        tokens = [Tag(Tag.START, "img", [("src", "x")]), CharacterTokens("x")]
        assert list(filter_tokens(tokens)) == [CharacterTokens("x")]

    def test_dropped_markup_is_logged(self) -> None:
        with self.assertLogs("tagfilter.filter", level="DEBUG") as logs:
            filter_html('<x>t</x><p class="c">', allow={"p": ["none"]}, deny={})
        messages = "\n".join(logs.output)
        assert "dropped <x>" in messages
        assert "dropped attribute class of <p>" in messages


if __name__ == "__main__":
    unittest.main()
