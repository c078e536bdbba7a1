"""Byte <-> word conversion for the Storm block cipher.

Words are read in the configured byte order but always written back
little-endian, and the 0-3 bytes that do not fill a whole word are carried
over byte-reversed. Existing archives were written this way.
"""
import enum
import struct

WORD_SIZE = 4

class Endian(enum.Enum):
    LITTLE = "little"
    BIG    = "big"

    @classmethod
    def _missing_(cls, value):
        if value is None:
            return cls.LITTLE
        if isinstance(value, str):
            return _endian_aliases.get(value.strip().lower())
        return None

    @property
    def struct_char(self):
        return "<" if self is Endian.LITTLE else ">"

_endian_aliases = {
    "little" : Endian.LITTLE,
    "le"     : Endian.LITTLE,
    "<"      : Endian.LITTLE,
    "big"    : Endian.BIG,
    "be"     : Endian.BIG,
    ">"      : Endian.BIG,
}

def split_words(data, endian=Endian.LITTLE):
    """Split a byte string into (words, tail).

    `words` holds every whole 32-bit word decoded with `endian`, `tail` the
    0-3 leftover bytes in reverse order.
    """
    # memoryview rejects ints, which bytes() would take as a length
    data = memoryview(data).tobytes()
    n_words = len(data) // WORD_SIZE
    whole = n_words * WORD_SIZE

    # leftover bytes are picked up from the end of the buffer backwards
    tail = data[whole:][::-1]

    fmt = "%s%dI" % (Endian(endian).struct_char, n_words)
    words = list(struct.unpack(fmt, data[:whole]))

    return words, tail

def join_words(words, tail=b""):
    # always little-endian, whatever order the words were read in
    buf = struct.pack("<%dI" % len(words), *[w & 0xFFFFFFFF for w in words])
    return buf + bytes(tail)
