"""Escaping of reserved XML characters.

Only the serializer escapes; the parser keeps entity references as literal
text, so ``&amp;`` read from a document stays ``&amp;`` in the tree.
"""

from typing import Optional

# "&" must stay first or the entities inserted afterwards get escaped again.
_REPLACEMENTS = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(value: Optional[str]) -> Optional[str]:
    """Escape the five reserved XML characters in ``value``.

    Returns None unchanged.

    >>> escape_xml("<a & b>")
    '&lt;a &amp; b&gt;'
    """
    if value is None:
        return None
    for char, entity in _REPLACEMENTS:
        value = value.replace(char, entity)
    return value
