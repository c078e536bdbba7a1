import pytest

from mpqcrypt import HashKind, InvalidArgumentError, MpqCrypt


def test_well_known_table_keys(crypt):
    assert crypt.hash("(hash table)", HashKind.FILE_KEY) == MpqCrypt.MPQ_KEY_HASH_TABLE == 0xC3AF3770
    assert crypt.hash("(block table)", HashKind.FILE_KEY) == MpqCrypt.MPQ_KEY_BLOCK_TABLE == 0xEC83B3A3


def test_empty_string_returns_initial_seed(crypt):
    for kind in HashKind:
        assert crypt.hash("", kind) == 0x7FED7FED


def test_single_character(crypt):
    # seed1 = table[kind * 256 + ch] ^ (0x7FED7FED + 0xEEEEEEEE)
    ch = ord("A")
    for kind in HashKind:
        expected = crypt.table[kind * 256 + ch] ^ ((0x7FED7FED + 0xEEEEEEEE) & 0xFFFFFFFF)
        assert crypt.hash("a", kind) == expected


@pytest.mark.parametrize("kind", list(HashKind) + [0, 1, 2, 3])
def test_case_insensitive(crypt, kind):
    assert crypt.hash("foo", kind) == crypt.hash("FOO", kind) == crypt.hash("Foo", kind)


def test_kinds_give_different_hashes(crypt):
    name = "war3map.j"
    assert len({crypt.hash(name, kind) for kind in HashKind}) == 4


def test_bytes_and_str_agree(crypt):
    name = "Scripts\\war3map.j"
    for kind in HashKind:
        assert crypt.hash(name, kind) == crypt.hash(name.encode("ascii"), kind)
        assert crypt.hash(name, kind) == crypt.hash(bytearray(name, "ascii"), kind)


def test_result_is_unsigned_32_bit(crypt):
    for kind in HashKind:
        value = crypt.hash("units\\human\\footman\\footman.mdx", kind)
        assert 0 <= value <= 0xFFFFFFFF


def test_hash_as_int_matches_hash(crypt):
    assert crypt.hash_as_int("(listfile)", HashKind.NAME_A) == crypt.hash("(listfile)", HashKind.NAME_A)


def test_file_hashes(crypt):
    name = "(listfile)"
    assert crypt.file_hashes(name) == (
        crypt.hash(name, HashKind.TABLE_OFFSET),
        crypt.hash(name, HashKind.NAME_A),
        crypt.hash(name, HashKind.NAME_B),
    )


@pytest.mark.parametrize("kind", [-1, 4, 0x100, 0x300, 1.0, "1", None, True])
def test_invalid_kind(crypt, kind):
    with pytest.raises(InvalidArgumentError):
        crypt.hash("foo", kind)


def test_none_string(crypt):
    with pytest.raises(InvalidArgumentError):
        crypt.hash(None, HashKind.NAME_A)


def test_unhashable_type(crypt):
    with pytest.raises(InvalidArgumentError):
        crypt.hash(1234, HashKind.NAME_A)


def test_invalid_argument_is_value_error():
    assert issubclass(InvalidArgumentError, ValueError)


def test_listfile_hashes(crypt):
    assert crypt.hash("(listfile)", HashKind.TABLE_OFFSET) == 0x5F3DE859
    assert crypt.hash("(listfile)", HashKind.NAME_A) == 0xFD657910
    assert crypt.hash("(listfile)", HashKind.NAME_B) == 0x4E9B98A7


def test_astral_character_hashes_both_utf16_units(crypt):
    # U+1F600 is the surrogate pair D83D DE00, low bytes 3D 00
    assert crypt.hash("\U0001F600", HashKind.NAME_A) == crypt.hash(b"\x3d\x00", HashKind.NAME_A) == 0xDC95F951


def test_bmp_character_uses_low_byte(crypt):
    # U+0141 uppercases to itself and hashes as byte 0x41
    assert crypt.hash("Ł", HashKind.NAME_B) == crypt.hash(b"A", HashKind.NAME_B)
