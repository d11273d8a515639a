from datetime import datetime
import os

import pytest

from PngStamp.Png.Metadata import MalformedTextChunkError
from PngStamp.Rewriter import InvalidSignatureError, RewriteOptions
from PngStamp.Screenshot import Screenshot, get_temporary_filepath, parse_screenshot_timestamp

from png_fixtures import make_chunk, make_png, split_chunks

SCREENSHOT_FILENAME = 'VRChat_1920x1080_2022-03-04_21-45-19.123.png'
SCREENSHOT_TIME = datetime(2022, 3, 4, 21, 45, 19, 123000)
ALL_OPTIONS = RewriteOptions(creation_time_format = '%Y:%m:%d %H:%M:%S.%L', add_time_chunk = True)

def test_parse_screenshot_timestamp():
    assert parse_screenshot_timestamp(SCREENSHOT_FILENAME) == SCREENSHOT_TIME

@pytest.mark.parametrize('filename', [
    'VRChat_1920x1080_2022-03-04_21-45-19.123.jpg',
    'VRChat_2022-03-04_21-45-19.123.png',
    'VRChat_1920x1080_2022-03-04_21-45-19.123.tmp.png',
    'copy of VRChat_1920x1080_2022-03-04_21-45-19.123.png',
    'screenshot.png'])
def test_other_filenames_are_not_screenshots(filename):
    assert parse_screenshot_timestamp(filename) is None

def test_invalid_dates_are_rejected():
    with pytest.raises(ValueError):
        parse_screenshot_timestamp('VRChat_1920x1080_2022-13-04_21-45-19.123.png')

def test_custom_filename_regex():
    regex = r'^shot_(\d{4})(\d{2})(\d{2})_(\d{2})(\d{2})(\d{2})_(\d{3})\.png$'
    assert parse_screenshot_timestamp('shot_20220304_214519_123.png', regex) == SCREENSHOT_TIME

def test_regex_without_enough_groups_never_matches():
    assert parse_screenshot_timestamp('screenshot.png', r'^(screenshot)\.png$') is None

def test_temporary_filepath():
    assert get_temporary_filepath(os.path.join('shots', 'a.png')) == os.path.join('shots', 'a.tmp.png')

def test_add_metadata_replaces_file(tmp_path):
    filepath = tmp_path / SCREENSHOT_FILENAME
    filepath.write_bytes(make_png())

    session = Screenshot(str(filepath), SCREENSHOT_TIME).add_metadata(ALL_OPTIONS)

    assert [chunk.type for chunk in session.added_chunks] == ['tEXt', 'tIME']
    chunk_types = [chunk_type for chunk_type, _, _ in split_chunks(filepath.read_bytes())]
    assert chunk_types == [b'IHDR', b'IDAT', b'tEXt', b'tIME', b'IEND']
    # The modification time is the time the screenshot was taken.
    assert os.path.getmtime(filepath) == pytest.approx(SCREENSHOT_TIME.timestamp())
    assert os.listdir(tmp_path) == [SCREENSHOT_FILENAME]

def test_failure_keeps_original(tmp_path):
    filepath = tmp_path / SCREENSHOT_FILENAME
    original = make_png(make_chunk(b'tEXt', b'no separator'))
    filepath.write_bytes(original)

    with pytest.raises(MalformedTextChunkError):
        Screenshot(str(filepath), SCREENSHOT_TIME).add_metadata(ALL_OPTIONS)

    assert filepath.read_bytes() == original
    assert os.listdir(tmp_path) == [SCREENSHOT_FILENAME]

def test_empty_screenshot_has_invalid_signature(tmp_path):
    filepath = tmp_path / SCREENSHOT_FILENAME
    filepath.write_bytes(b'')
    with pytest.raises(InvalidSignatureError):
        Screenshot(str(filepath), SCREENSHOT_TIME)
    assert filepath.read_bytes() == b''

def test_short_screenshot_has_invalid_signature(tmp_path):
    filepath = tmp_path / SCREENSHOT_FILENAME
    filepath.write_bytes(b'\x89PNG')
    with pytest.raises(InvalidSignatureError):
        Screenshot(str(filepath), SCREENSHOT_TIME).add_metadata(ALL_OPTIONS)
    assert os.listdir(tmp_path) == [SCREENSHOT_FILENAME]
