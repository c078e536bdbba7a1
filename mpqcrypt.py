from ctypes import *
import enum
import logging

from mpqcodec import Endian, split_words, join_words

log = logging.getLogger(__name__)

STORM_BUFFER_SIZE = 0x500

class InvalidArgumentError(ValueError):
    pass

class HashKind(enum.IntEnum):
    TABLE_OFFSET = 0
    NAME_A       = 1
    NAME_B       = 2
    FILE_KEY     = 3

def build_encryption_table():
    table = [0] * STORM_BUFFER_SIZE
    dwSeed = 0x00100001

    # Fills column-wise: each index1 writes one entry in every 0x100 block
    for index1 in range(0x100):
        for index2 in range(index1, index1 + STORM_BUFFER_SIZE, 0x100):
            dwSeed = (dwSeed * 125 + 3) % 0x2AAAAB
            temp1  = (dwSeed & 0xFFFF) << 0x10

            dwSeed = (dwSeed * 125 + 3) % 0x2AAAAB
            temp2  = (dwSeed & 0xFFFF)

            table[index2] = temp1 | temp2

    return tuple(table)

log.debug("Creating the crypt table")

# Shared by every MpqCrypt; a tuple so it can't change after import
ENCRYPTION_TABLE = build_encryption_table()

def _upper_bytes(name):
    if isinstance(name, str):
        # one low byte per UTF-16 code unit, so astral characters give two
        return name.upper().encode("utf-16-le", "surrogatepass")[::2]
    if isinstance(name, (bytes, bytearray, memoryview)):
        return bytes(name).upper()
    raise InvalidArgumentError("Cannot hash object of type %s" % type(name).__name__)

class MpqCrypt():
    """Storm hashing and block encryption as used by MPQ archives.

    This is obfuscation, not security. It only exists to read and write
    data that other MPQ tools produced.
    """

    # Decryption keys for MPQ tables
    MPQ_KEY_HASH_TABLE   =   0xC3AF3770  # Obtained by hash("(hash table)", MPQ_HASH_FILE_KEY)
    MPQ_KEY_BLOCK_TABLE  =   0xEC83B3A3  # Obtained by hash("(block table)", MPQ_HASH_FILE_KEY)
    MPQ_HASH_TABLE_INDEX =   HashKind.TABLE_OFFSET
    MPQ_HASH_NAME_A      =   HashKind.NAME_A
    MPQ_HASH_NAME_B      =   HashKind.NAME_B
    MPQ_HASH_FILE_KEY    =   HashKind.FILE_KEY
    MPQ_HASH_KEY2_MIX    =   0x400

    INITIAL_HASH_SEED1   =   0x7FED7FED
    INITIAL_SEED         =   0xEEEEEEEE

    def __init__(self, endian=Endian.LITTLE):
        try:
            self.endian = Endian(endian)
        except ValueError:
            raise InvalidArgumentError("Unknown byte order: %r" % (endian,)) from None

        self.table = ENCRYPTION_TABLE
        log.debug("MpqCrypt created with %s endian word decoding", self.endian.value)

    @staticmethod
    def _hash_region(kind):
        if isinstance(kind, bool) or not isinstance(kind, int):
            raise InvalidArgumentError("Invalid hash type: %r" % (kind,))
        try:
            return HashKind(kind) << 8
        except ValueError:
            raise InvalidArgumentError("Invalid hash type: %r" % (kind,)) from None

    #
    # Note: storm.dll treats the character as signed, so names with bytes
    # >= 0x80 index before the start of the table and hash differently between
    # game versions. Here every UTF-16 code unit is reduced to its low byte, which
    # always stays inside the 256 entry region of the hash kind.
    #
    def hash(self, name, kind):
        if name is None:
            raise InvalidArgumentError("Cannot hash None")
        region = self._hash_region(kind)
        chars = _upper_bytes(name)

        dwSeed1 = self.INITIAL_HASH_SEED1
        dwSeed2 = self.INITIAL_SEED

        for ch in chars:
            dwSeed1 = self.table[region + ch] ^ ((dwSeed1 + dwSeed2) & 0xFFFFFFFF)
            dwSeed2 = (ch + dwSeed1 + dwSeed2 + (dwSeed2 << 5) + 3) & 0xFFFFFFFF

        return dwSeed1

    # Older callers asked for the hash "as int"; it is the same 32-bit value
    hash_as_int = hash

    def file_hashes(self, name):
        """Return the (table offset, name A, name B) hashes used to look up `name`."""
        return (
            self.hash(name, HashKind.TABLE_OFFSET),
            self.hash(name, HashKind.NAME_A),
            self.hash(name, HashKind.NAME_B),
        )

    def _key2_mix_index(self, dwKey1):
        return (self.MPQ_HASH_KEY2_MIX + (dwKey1 & 0xFF)) % len(self.table)

    def _crypt_block(self, ui32_arr, dwKey1, decrypt):
        dwKey1 &= 0xFFFFFFFF
        dwKey2 = self.INITIAL_SEED

        for i in range(len(ui32_arr)):
            # Modify the second key
            dwKey2 += self.table[self._key2_mix_index(dwKey1)]
            dwKey2 &= 0xFFFFFFFF

            dwInput = ui32_arr[i] & 0xFFFFFFFF
            dwOutput = dwInput ^ ((dwKey1 + dwKey2) & 0xFFFFFFFF)
            ui32_arr[i] = dwOutput

            # The second key always follows the plaintext word
            dwValue32 = dwOutput if decrypt else dwInput

            dwKey1 = (((~dwKey1 << 0x15) + 0x11111111) & 0xFFFFFFFF) | (dwKey1 >> 0x0B)
            dwKey2 = dwValue32 + dwKey2 + (dwKey2 << 5) + 3
            dwKey2 &= 0xFFFFFFFF

        return ui32_arr

    def encrypt_block(self, ui32_arr, key):
        """Encrypt a mutable sequence of 32-bit words in place and return it."""
        return self._crypt_block(ui32_arr, key, decrypt=False)

    def decrypt_block(self, ui32_arr, key):
        """Decrypt a mutable sequence of 32-bit words in place and return it."""
        return self._crypt_block(ui32_arr, key, decrypt=True)

    def encrypt_words(self, words, key):
        if words is None:
            return None
        return self.encrypt_block(list(words), key)

    def decrypt_words(self, words, key):
        if words is None:
            return None
        return self.decrypt_block(list(words), key)

    def encrypt_word(self, value, key):
        return self.encrypt_words([value], key)[0]

    def decrypt_word(self, value, key):
        return self.decrypt_words([value], key)[0]

    def _crypt_bytes(self, data, key, decrypt):
        if data is None:
            return None

        words, tail = split_words(data, self.endian)
        self._crypt_block(words, key, decrypt)

        return join_words(words, tail)

    def encrypt_bytes(self, data, key):
        """Encrypt a byte string.

        Whole words are decoded with the configured byte order and written
        back little-endian; the last len(data) % 4 bytes are appended
        unencrypted and reversed.
        """
        return self._crypt_bytes(data, key, decrypt=False)

    def decrypt_bytes(self, data, key):
        return self._crypt_bytes(data, key, decrypt=True)

    def _crypt_buffer(self, buf, key, decrypt):
        if buf is None:
            return None

        data = self._crypt_bytes(memoryview(buf).tobytes(), key, decrypt)
        if data:
            # raises TypeError for read-only buffers
            dest = (c_char * len(data)).from_buffer(buf)
            memmove(dest, data, len(data))

        return buf

    def encrypt_buffer(self, buf, key):
        """Encrypt a writable buffer (bytearray, memoryview, ctypes array) in place.

        The caller's buffer is overwritten with the ciphertext and returned.
        """
        return self._crypt_buffer(buf, key, decrypt=False)

    def decrypt_buffer(self, buf, key):
        """Decrypt a writable buffer in place, overwriting it with the plaintext."""
        return self._crypt_buffer(buf, key, decrypt=True)

def new_security(endian=Endian.LITTLE):
    return MpqCrypt(endian)
