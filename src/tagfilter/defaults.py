"""Rules loaded by a `TagFilter` created without explicit ones.

The defaults keep inline text formatting, headings, lists, quotes and links,
and remove images, blinking text, presentation hooks and inline event
handlers.
"""

from __future__ import annotations

from .rules import Fragment

DEFAULT_ALLOW: Fragment = {
    # Headings and blocks
    "h1": ["none"],
    "h2": ["none"],
    "h3": ["none"],
    "h4": ["none"],
    "h5": ["none"],
    "p": ["none"],
    "blockquote": ["none"],
    # Links
    "a": {"href": [], "name": [], "target": []},
    # Line breaks
    "br": {"clear": ["left", "right", "all"]},
    # Lists
    "ul": ["type"],
    "li": ["type"],
    "ol": ["none"],
    # Text formatting
    "em": ["none"],
    "i": ["none"],
    "b": ["none"],
    "tt": ["none"],
    "code": ["none"],
    # Denied below; listed so that removing the deny rule is enough to let images through.
    "img": ["any"],
    "any": {"align": ["left", "right", "center"]},
}

DEFAULT_DENY: Fragment = {
    "blink": ["all"],
    "marquee": ["all"],
    "img": ["all"],
    "any": {
        "style": [],
        "class": [],
        "onMouseover": [],
        "onClick": [],
        "onMouseout": [],
    },
}
