"""Markup events passed between the tokenizer, the filter and its callers."""


class Tag:
    __slots__ = ("attrs", "kind", "name", "self_closing")

    START = 0
    END = 1

    def __init__(self, kind, name, attrs=None, self_closing=False):
        self.kind = kind
        self.name = name
        # Either a mapping or a sequence of (name, value) pairs; order is kept.
        self.attrs = attrs if attrs is not None else []
        self.self_closing = bool(self_closing)

    def __repr__(self):
        attrs = " ".join(f"{name}={value!r}" for name, value in attr_items(self.attrs))
        closing = " /" if self.self_closing else ""
        kind_str = "start" if self.kind == self.START else "end"
        return f"<{kind_str}:{self.name}{closing} {attrs}>"

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.name == other.name
            and attr_items(self.attrs) == attr_items(other.attrs)
            and self.self_closing == other.self_closing
        )

    __hash__ = None  # Unhashable since we define __eq__


class CharacterTokens:
    """Raw text, passed through untouched. Also carries comments and declarations."""

    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data

    def __repr__(self):
        return f"CharacterTokens({self.data!r})"

    def __eq__(self, other):
        if not isinstance(other, CharacterTokens):
            return NotImplemented
        return self.data == other.data

    __hash__ = None


def attr_items(attrs):
    """Return attributes as a list of (name, value) pairs in document order."""
    if not attrs:
        return []
    if hasattr(attrs, "items"):
        return list(attrs.items())
    return list(attrs)
