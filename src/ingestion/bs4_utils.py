"""BeautifulSoup helpers for attribute and text access."""

from typing import Any


def get_attr_str(tag: Any, attr: str, default: str = "") -> str:
    """
    Get a tag attribute as a string, even if BeautifulSoup returns a list.

    Args:
        tag: BeautifulSoup Tag object
        attr: Attribute name
        default: Default value if attribute is missing

    Returns:
        Attribute value as a string
    """
    val = tag.get(attr)
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(val)
    return str(val)


def select_text(tag: Any, selector: str, default: str = "") -> str:
    """Stripped text of the first element matching `selector`, or `default`."""
    found = tag.select_one(selector)
    if found is None:
        return default
    return found.get_text().strip() or default
