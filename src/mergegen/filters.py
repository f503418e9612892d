"""Case-conversion and identifier filters registered on every template engine."""

from __future__ import annotations

import re
import uuid

# Namespace for name-based (v5) UUIDs
MERGEGEN_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_DNS, "mergegen.generator")

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z0-9]|\b|_|[^A-Za-z0-9])|[A-Z]?[a-z0-9]+|[A-Z]+")


def split_words(value: object) -> list[str]:
    """Split *value* into words on case changes, digits boundaries and separators.

    >>> split_words("HTTPServer_config-name")
    ['HTTP', 'Server', 'config', 'name']
    """
    text = str(value)
    words: list[str] = []
    for chunk in re.split(r"[^A-Za-z0-9]+", text):
        if chunk:
            words.extend(_WORD_RE.findall(chunk))
    return words


def camelcase(value: object) -> str:
    words = split_words(value)
    if not words:
        return ""
    head, *rest = words
    return head.lower() + "".join(w.capitalize() for w in rest)


def pascalcase(value: object) -> str:
    return "".join(w.capitalize() for w in split_words(value))


def snakecase(value: object) -> str:
    return "_".join(w.lower() for w in split_words(value))


def kebabcase(value: object) -> str:
    return "-".join(w.lower() for w in split_words(value))


def screamingsnakecase(value: object) -> str:
    return "_".join(w.upper() for w in split_words(value))


def uuid_generate(value: object = None) -> str:
    """UUIDv5 of *value* in the mergegen namespace, or a random UUIDv4 if empty."""
    if value is None or str(value) == "":
        return str(uuid.uuid4())
    return str(uuid.uuid5(MERGEGEN_NAMESPACE, str(value)))


FILTERS = {
    "camelcase": camelcase,
    "pascalcase": pascalcase,
    "snakecase": snakecase,
    "kebabcase": kebabcase,
    "screamingsnakecase": screamingsnakecase,
    "uuid_generate": uuid_generate,
}
