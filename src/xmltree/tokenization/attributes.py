"""Attribute string parsing.

Namespace declarations are reported first, in match order, under their
literal ``xmlns``/``xmlns:PREFIX`` name. All other attributes follow in
document order with any namespace prefix folded away, so ``xlink:href``
becomes ``href``. Values are returned exactly as written; entity references
are not decoded.
"""

import re
from typing import List, Tuple

_ATTRIBUTE_PATTERN = re.compile(
    r"(?<![\w.:-])"
    r"(?:([\w.-]+):)?([\w.-]+)"
    r"\s*=\s*"
    r"(?:\"([^\"]*)\"|'([^']*)')"
)

NAMESPACE_ATTRIBUTE = "xmlns"


def parse_attributes(attribute_string: str) -> List[Tuple[str, str]]:
    """Split a raw attribute string into ``(name, value)`` pairs.

    Args:
        attribute_string: Text between the tag name and the closing ``>``

    Returns:
        Namespace declarations first, then the remaining attributes

    Examples:
        >>> parse_attributes('a="1" xmlns:x="urn:x" x:b=\\'2\\'')
        [('xmlns:x', 'urn:x'), ('a', '1'), ('b', '2')]
    """
    namespaces: List[Tuple[str, str]] = []
    attributes: List[Tuple[str, str]] = []

    for match in _ATTRIBUTE_PATTERN.finditer(attribute_string):
        prefix, local_name, double_quoted, single_quoted = match.groups()
        value = double_quoted if double_quoted is not None else single_quoted

        if prefix == NAMESPACE_ATTRIBUTE:
            namespaces.append((f"{prefix}:{local_name}", value))
        elif prefix is None and local_name == NAMESPACE_ATTRIBUTE:
            namespaces.append((local_name, value))
        elif (prefix or local_name).startswith(NAMESPACE_ATTRIBUTE):
            # Reserved xmlns* names that are not declarations are dropped
            continue
        else:
            attributes.append((local_name, value))

    return namespaces + attributes
