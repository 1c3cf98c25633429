"""YAML frontmatter splitting, parsing and re-rendering."""

from __future__ import annotations

import base64
import logging
import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Optional

import yaml
from frontmatter.default_handlers import YAMLHandler

from markdown_vault.constants import FRONTMATTER_DELIMITER
from markdown_vault.data_models import FrontmatterValue

logger = logging.getLogger(__name__)

_DELIMITER_LENGTH = len(FRONTMATTER_DELIMITER)


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


class _UntaggedSafeLoader(yaml.SafeLoader):
    """Safe loader with YAML 1.2 core-schema scalars that unwraps unknown tags.

    Only ``true`` and ``false`` are booleans, integers have no sexagesimal or
    leading-zero forms and timestamps stay strings, so ``title: No`` or
    ``time: 12:30`` keep their text.
    """


_BOOL_TAG = "tag:yaml.org,2002:bool"
_INT_TAG = "tag:yaml.org,2002:int"
_FLOAT_TAG = "tag:yaml.org,2002:float"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"

_UntaggedSafeLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag not in (_BOOL_TAG, _INT_TAG, _FLOAT_TAG, _TIMESTAMP_TAG)
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_UntaggedSafeLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
_UntaggedSafeLoader.add_implicit_resolver(
    _INT_TAG,
    re.compile(r"^[-+]?(?:0|[1-9][0-9]*|0x[0-9a-fA-F]+|0o[0-7]+|0b[01]+)$"),
    list("-+0123456789"),
)
_UntaggedSafeLoader.add_implicit_resolver(
    _FLOAT_TAG,
    re.compile(
        r"""^(?:[-+]?(?:(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|[0-9]+[eE][-+]?[0-9]+)
        |[-+]?\.(?:inf|Inf|INF)
        |\.(?:nan|NaN|NAN))$""",
        re.X,
    ),
    list("-+.0123456789"),
)


def _construct_int(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> int:
    value = loader.construct_scalar(node)
    sign = -1 if value.startswith("-") else 1
    digits = value.lstrip("+-")
    for prefix, base in (("0x", 16), ("0o", 8), ("0b", 2)):
        if digits.startswith(prefix):
            return sign * int(digits[len(prefix):], base)
    return sign * int(digits)


_UntaggedSafeLoader.add_constructor(_INT_TAG, _construct_int)


def _construct_untagged(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        implicit = (node.style is None, node.style is not None)
        tag = loader.resolve(yaml.ScalarNode, node.value, implicit)
        plain = yaml.ScalarNode(tag, node.value, node.start_mark, node.end_mark, node.style)
    elif isinstance(node, yaml.SequenceNode):
        plain = yaml.SequenceNode(
            loader.DEFAULT_SEQUENCE_TAG, node.value, node.start_mark, node.end_mark, node.flow_style
        )
    else:
        plain = yaml.MappingNode(
            loader.DEFAULT_MAPPING_TAG, node.value, node.start_mark, node.end_mark, node.flow_style
        )
    return loader.construct_object(plain, deep=True)


# A ``None`` prefix catches every tag the safe constructor does not know.
_UntaggedSafeLoader.add_multi_constructor(None, _construct_untagged)

_YAML_HANDLER = YAMLHandler()


def to_structured(value: Any) -> FrontmatterValue:
    """Convert a PyYAML object into a :data:`FrontmatterValue`.

    Mapping keys that are not strings are dropped. Dates become ISO strings,
    non-finite floats become ``None``, sets become ``{member: None}`` maps and
    binary values become base64 text.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, Mapping):
        return {key: to_structured(item) for key, item in value.items() if isinstance(key, str)}
    if isinstance(value, (set, frozenset)):
        return {member: None for member in value if isinstance(member, str)}
    if isinstance(value, (list, tuple)):
        return [to_structured(item) for item in value]
    return str(value)


# ==============================================================================
# FRONTMATTER OPERATIONS
# ==============================================================================


def split_frontmatter(text: str) -> tuple[Optional[str], str]:
    """Split raw note text into ``(frontmatter_text, body)``.

    The block opens with ``---`` at the very start of the text and closes at the
    next ``---`` found after it. The frontmatter is trimmed; the body has its
    leading whitespace removed. When there is no opening delimiter, no closing
    delimiter, or nothing after the closing one, the whole text is the body and
    the frontmatter is ``None``.

    Examples:
        >>> split_frontmatter("---\\ntitle: A\\n---\\nBody")
        ('title: A', 'Body')
        >>> split_frontmatter("No metadata")
        (None, 'No metadata')
    """
    if not text.startswith(FRONTMATTER_DELIMITER):
        return None, text

    end_index = text.find(FRONTMATTER_DELIMITER, _DELIMITER_LENGTH)
    if end_index == -1:
        return None, text

    content_start = end_index + _DELIMITER_LENGTH
    if content_start >= len(text):
        return None, text

    frontmatter_text = text[_DELIMITER_LENGTH:end_index].strip()
    return frontmatter_text, text[content_start:].lstrip()


def parse_frontmatter(frontmatter_text: str) -> FrontmatterValue:
    """Parse frontmatter text into a structured value.

    Invalid YAML degrades to an empty mapping instead of raising.
    """
    try:
        loaded = _YAML_HANDLER.load(frontmatter_text, Loader=_UntaggedSafeLoader)
    except (yaml.YAMLError, ValueError) as exc:
        # ValueError: implicit timestamps such as 2024-13-45
        logger.debug("Frontmatter is not valid YAML, treating it as empty: %s", exc)
        return {}
    return to_structured(loaded)


def render_frontmatter(frontmatter_text: Optional[str], body: str) -> str:
    """Join a frontmatter block and a body back into note text.

    Without frontmatter the body is returned verbatim; metadata is only ever
    carried over, never created.
    """
    if frontmatter_text is None:
        return body
    return f"{FRONTMATTER_DELIMITER}\n{frontmatter_text}\n{FRONTMATTER_DELIMITER}\n\n{body}"
