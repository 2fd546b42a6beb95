"""Render filtered tags back into markup."""

from .tokens import attr_items


def escape_attr_value(value):
    return str(value).replace("&", "&amp;").replace('"', "&quot;")


def start_tag_to_html(name, attrs=None, self_closing=False):
    """Render a start tag. Attributes without a value are written bare."""
    attr_parts = []
    for key, value in attr_items(attrs):
        if value is None:
            attr_parts.append(f" {key}")
        else:
            attr_parts.append(f' {key}="{escape_attr_value(value)}"')
    closing = " /" if self_closing else ""
    return f"<{name}{''.join(attr_parts)}{closing}>"


def end_tag_to_html(name):
    return f"</{name}>"

