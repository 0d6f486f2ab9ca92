import codecs

import chardet


def detect_encoding(data):
    """
    Guess the encoding of a byte string using chardet.
    Returns None if no guess could be made.
    """
    detector = chardet.universaldetector.UniversalDetector()
    detector.feed(data)
    detector.close()
    return detector.result["encoding"]


# Order matters: the UTF-32 little-endian mark starts with the UTF-16 one.
_byte_order_marks = [
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
]

_wide_encodings = {
    "utf-16le": "utf-16-le",
    "utf-16be": "utf-16-be",
    "utf-32le": "utf-32-le",
    "utf-32be": "utf-32-be",
}


def wide_encoding(data):
    """
    Detect whether a byte string is text in a non-ASCII-compatible Unicode encoding.

    Text in any ASCII-compatible encoding can be processed line by line as bytes.
    UTF-16 and UTF-32 cannot, so such text has to be decoded first.

    Returns a pair (bom, codec) where bom is the byte order mark found
    at the start of data (possibly empty) and codec is an explicit-endian codec name.
    Returns None if data is not recognized as UTF-16 or UTF-32.

    Chardet is only consulted for data without byte order mark that contains NUL bytes.
    Text in an ASCII-compatible encoding never does.
    """
    for bom, codec in _byte_order_marks:
        if data.startswith(bom):
            return (bom, codec)

    if b"\0" not in data:
        return None

    encoding = detect_encoding(data)
    if encoding is None:
        return None
    codec = _wide_encodings.get(encoding.lower())
    if codec is None:
        return None
    return (b"", codec)
