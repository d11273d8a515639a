import zlib

import pytest

from PngStamp.Png.Crc32 import CRC_TABLE, crc32, update_crc32

def test_empty_data_has_zero_crc():
    assert crc32(b'') == 0x00000000

def test_standard_check_value():
    # The check value published for CRC-32.
    assert crc32(b'123456789') == 0xcbf43926

@pytest.mark.parametrize('data', [b'\x00', b'IEND', b'The quick brown fox jumps over the lazy dog', bytes(range(256)) * 3])
def test_matches_zlib(data):
    assert crc32(data) == zlib.crc32(data)

def test_running_crc_matches_single_pass():
    assert update_crc32(b'IDAT-data', crc32(b'IDAT')) == crc32(b'IDATIDAT-data')

def test_accepts_bytes_like_objects():
    assert crc32(bytearray(b'IEND')) == crc32(memoryview(b'IEND')) == 0xae426082

def test_table_is_read_only():
    assert len(CRC_TABLE) == 256
    with pytest.raises(TypeError):
        CRC_TABLE[0] = 1
