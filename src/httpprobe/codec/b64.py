"""
=============================================================================
BASE64 ENCODER
=============================================================================

Encodes bytes with the standard 64-symbol alphabet (RFC 4648 section 4).

=============================================================================
BIT PACKING
=============================================================================

Base64 reads the input as one long bit string and cuts it into 6-bit
groups. Groups do not line up with byte boundaries, so the encoder carries
left-over bits from one byte into the next:

    Input:   'M'        'a'        'n'
    Bytes:   01001101   01100001   01101110
             ──────┬───────┬───────┬──────
    Groups:  010011 010110 000101 101110
               T      W      F      u

    3 bytes = 24 bits = exactly 4 characters.

When the input length is not a multiple of 3, the last group is filled
with zero bits and the output is padded with '=' to a multiple of 4:

    len % 3 == 1  →  2 characters + "=="
    len % 3 == 2  →  3 characters + "="

=============================================================================
"""

from typing import Union


ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PAD = "="


def encode(data: Union[bytes, str]) -> str:
    """
    Encode bytes as a Base64 string.

    Args:
        data: Bytes to encode. Strings are UTF-8 encoded first.

    Returns:
        The padded Base64 text. Empty input gives an empty string.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    output = []
    bit_storage = 0      # Bits not yet emitted, right-aligned
    bits_stored = 0      # How many bits bit_storage holds (always < 6 between bytes)

    for byte in data:
        bit_storage = (bit_storage << 8) | byte
        bits_stored += 8

        # Emit every complete 6-bit group now held in storage
        while bits_stored >= 6:
            bits_stored -= 6
            output.append(ALPHABET[(bit_storage >> bits_stored) & 0x3F])

        # Keep only the bits that have not been emitted yet
        bit_storage &= (1 << bits_stored) - 1

    # Trailing partial group, zero-filled on the right
    if bits_stored:
        output.append(ALPHABET[(bit_storage << (6 - bits_stored)) & 0x3F])

    output.append(PAD * ((3 - len(data) % 3) % 3))
    return "".join(output)
