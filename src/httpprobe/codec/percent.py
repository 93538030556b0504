"""
=============================================================================
PERCENT-ENCODING (RFC 3986 section 2.1)
=============================================================================

Makes arbitrary text safe to carry in URLs, header values and form bodies.

    "Hello Günter"  ──encode──►  "Hello%20G%C3%BCnter"
                    ◄──decode──

Unreserved characters (RFC 3986 section 2.3) are copied as-is. Every other
character is converted to its UTF-8 bytes and each byte is written as
'%' followed by two uppercase hex digits:

    ' '  →  0x20            →  %20
    'ü'  →  0xC3 0xBC       →  %C3%BC
    '\\n' →  0x0A            →  %0A     (always two digits)

Decoding reverses this. A byte >= 0x80 starts a multi-byte UTF-8 sequence,
so the decoder keeps consuming %XX escapes until the code point is
complete, then validates it:

    lead byte      sequence length
    ──────────     ───────────────
    110xxxxx       2 bytes
    1110xxxx       3 bytes
    11110xxx       4 bytes

=============================================================================
"""

import string
from typing import Dict, Mapping

from ..errors import DecodeError


UNRESERVED_CHARACTERS = frozenset(string.ascii_letters + string.digits + "-._~")
HEX_DIGITS = frozenset(string.hexdigits)


def encode(text: str) -> str:
    """
    Percent-encode text.

    Args:
        text: Any Unicode text.

    Returns:
        The encoded text, using only unreserved characters and %XX escapes.
    """
    result = []
    for character in text:
        if character in UNRESERVED_CHARACTERS:
            result.append(character)
        else:
            for byte in character.encode("utf-8"):
                result.append(f"%{byte:02X}")
    return "".join(result)


def decode(text: str) -> str:
    """
    Decode percent-encoded text.

    Args:
        text: Text containing literal characters and %XX escapes.

    Returns:
        The decoded text.

    Raises:
        DecodeError: On a truncated or non-hex escape, or when the escaped
            bytes are not valid UTF-8.
    """
    result = []
    position = 0
    length = len(text)

    while position < length:
        character = text[position]
        if character != "%":
            result.append(character)
            position += 1
            continue

        byte, position = _read_escape(text, position)
        if byte < 0x80:
            result.append(chr(byte))
            continue

        # Multi-byte UTF-8 sequence: gather the continuation bytes
        sequence = bytearray([byte])
        for _ in range(_sequence_length(byte) - 1):
            if position >= length or text[position] != "%":
                raise DecodeError(
                    f"Incomplete UTF-8 sequence before position {position}"
                )
            continuation, position = _read_escape(text, position)
            sequence.append(continuation)

        try:
            result.append(sequence.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid UTF-8 sequence {bytes(sequence)!r}: {e}") from e

    return "".join(result)


def _read_escape(text: str, position: int) -> tuple[int, int]:
    """Read the %XX escape at position. Returns (byte, next_position)."""
    digits = text[position + 1:position + 3]
    if len(digits) < 2:
        raise DecodeError(f"Input ends inside escape at position {position}")
    if not all(digit in HEX_DIGITS for digit in digits):
        raise DecodeError(f"Invalid escape '%{digits}' at position {position}")
    return int(digits, 16), position + 3


def _sequence_length(lead_byte: int) -> int:
    if 0xC0 <= lead_byte <= 0xDF:
        return 2
    if 0xE0 <= lead_byte <= 0xEF:
        return 3
    if 0xF0 <= lead_byte <= 0xF7:
        return 4
    raise DecodeError(f"Invalid UTF-8 lead byte 0x{lead_byte:02X}")


# =============================================================================
# FORM BODIES (application/x-www-form-urlencoded)
# =============================================================================

def encode_form(fields: Mapping[str, str]) -> str:
    """
    Build a form body from name/value pairs.

    Example:
        encode_form({"q": "a b", "lang": "en"})  # "q=a%20b&lang=en"
    """
    return "&".join(
        f"{encode(name)}={encode(value)}" for name, value in fields.items()
    )


def decode_form(text: str) -> Dict[str, str]:
    """Parse a form body. A pair without '=' maps to an empty value."""
    fields: Dict[str, str] = {}
    for pair in text.split("&"):
        if not pair:
            continue
        name, _, value = pair.partition("=")
        fields[decode(name)] = decode(value)
    return fields
