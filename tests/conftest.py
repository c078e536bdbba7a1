import pytest

from mpqcodec import Endian
from mpqcrypt import MpqCrypt


@pytest.fixture
def crypt():
    return MpqCrypt()


@pytest.fixture
def crypt_be():
    return MpqCrypt(Endian.BIG)
