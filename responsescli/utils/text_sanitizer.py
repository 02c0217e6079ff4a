"""
Text Sanitizing Utilities

Cleans streamed model text before it reaches a display sink.
"""

import re

NBSP = "\u00a0"

# Control characters below U+0020, keeping tab, line feed and carriage return
CONTROL_RE = re.compile(r"[\x00-\x08\x0B-\x0C\x0E-\x1F]")


def _is_dropped_code_point(ch: str) -> bool:
    cp = ord(ch)
    # Isolated surrogates
    if 0xD800 <= cp <= 0xDFFF:
        return True
    # Unicode noncharacters
    return cp in (0xFFFE, 0xFFFF)


def clean_text(text: str) -> str:
    """
    Sanitize a chunk of streamed text.

    - Replaces non-breaking spaces with regular spaces
    - Removes control characters (except \\t, \\n, \\r)
    - Drops isolated surrogates and the U+FFFE/U+FFFF noncharacters

    Args:
        text: Raw text, possibly None

    Returns:
        Sanitized text (empty string for None)
    """
    if not text:
        return ""

    text = text.replace(NBSP, " ")
    text = CONTROL_RE.sub("", text)
    return "".join(ch for ch in text if not _is_dropped_code_point(ch))
