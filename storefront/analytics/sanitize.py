import re

from bs4 import BeautifulSoup

_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_INLINE_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)


def strip_markup(value: str) -> str:
    if "<" not in value:
        return value
    soup = BeautifulSoup(value, "html.parser")
    for node in soup(["script", "style"]):
        node.decompose()
    return soup.get_text()


def sanitize_input(value: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"Expected a string, got {type(value).__name__}")
    cleaned = strip_markup(value)
    cleaned = cleaned.replace("<", "").replace(">", "")
    cleaned = _JS_PROTOCOL.sub("", cleaned)
    cleaned = _INLINE_HANDLER.sub("", cleaned)
    return cleaned.strip()
