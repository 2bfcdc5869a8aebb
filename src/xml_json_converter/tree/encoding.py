"""Character encoding detection for XML byte input.

Only used when the builder has to re-read part of a document itself; the
XML decoder handles encodings on its own everywhere else.
"""

import codecs
import re
from typing import List, Tuple

DEFAULT_ENCODING = "utf-8"

# Longer marks first so UTF-32 LE is not mistaken for UTF-16 LE
BOM_ENCODINGS: List[Tuple[bytes, str]] = [
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
]

XML_DECLARATION_PATTERN = re.compile(
    rb'<\?xml\s+[^>]*?encoding\s*=\s*["\']([A-Za-z0-9._:-]+)["\']',
    re.IGNORECASE
)


def detect_encoding(data: bytes) -> str:
    """Detect the codec for a document from its byte order mark or declaration.

    Returns a Python codec name. BOM codecs strip the mark while decoding.
    Unknown declared encodings fall back to UTF-8.

    Examples:
        >>> detect_encoding(b'<?xml version="1.0" encoding="ISO-8859-1"?><a/>')
        'iso8859-1'
        >>> detect_encoding(b"<a/>")
        'utf-8'
    """
    for bom, encoding in BOM_ENCODINGS:
        if data.startswith(bom):
            return encoding

    match = XML_DECLARATION_PATTERN.match(data[:1024].lstrip())
    if not match:
        return DEFAULT_ENCODING

    try:
        return codecs.lookup(match.group(1).decode("ascii")).name
    except LookupError:
        return DEFAULT_ENCODING
