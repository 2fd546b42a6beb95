from .defaults import DEFAULT_ALLOW, DEFAULT_DENY
from .errors import FilterClosedError, RuleError, RuleStoreError, TagFilterError
from .filter import TagFilter, filter_html, filter_tokens
from .rules import ALL, ANY, NONE, RuleSet, RuleTable
from .tokens import CharacterTokens, Tag

__all__ = [
    "ALL",
    "ANY",
    "DEFAULT_ALLOW",
    "DEFAULT_DENY",
    "NONE",
    "CharacterTokens",
    "FilterClosedError",
    "RuleError",
    "RuleSet",
    "RuleStoreError",
    "RuleTable",
    "Tag",
    "TagFilter",
    "TagFilterError",
    "filter_html",
    "filter_tokens",
]
