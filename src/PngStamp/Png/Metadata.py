from datetime import datetime

from .Chunk import Chunk, ChunkKind

## The predefined tEXt keyword for the time the original image was created.
CREATION_TIME_KEYWORD = 'Creation Time'

## tEXt keywords and values are Latin-1, never UTF-8.
TEXT_ENCODING = 'latin-1'
KEYWORD_SEPARATOR = b'\x00'
MAXIMUM_KEYWORD_LENGTH = 79

## The strftime-style directive for three-digit milliseconds.
## Python's own %f gives six-digit microseconds instead.
MILLISECOND_DIRECTIVE = '%L'

## Raised when a tEXt chunk has no separator between the keyword and the text,
## so the keyword cannot be found.
class MalformedTextChunkError(Exception):
    pass

## Creates a tEXt chunk. The data is the keyword, a NUL separator,
## and then the text. There is no NUL after the text.
## \param[in] keyword - The keyword. It must be 1-79 characters and contain no NUL.
## \param[in] text - The text.
## Both strings must be encodable as Latin-1, or a UnicodeEncodeError is raised.
def build_text_chunk(keyword: str, text: str) -> Chunk:
    # VERIFY THE KEYWORD.
    encoded_keyword = keyword.encode(TEXT_ENCODING)
    if KEYWORD_SEPARATOR in encoded_keyword:
        raise ValueError(f'tEXt keywords cannot contain NUL: {keyword!r}')
    if not (1 <= len(encoded_keyword) <= MAXIMUM_KEYWORD_LENGTH):
        raise ValueError(f'tEXt keywords must be 1-{MAXIMUM_KEYWORD_LENGTH} characters, not {len(encoded_keyword)}: {keyword!r}')

    data = encoded_keyword + KEYWORD_SEPARATOR + text.encode(TEXT_ENCODING)
    return Chunk(ChunkKind.TEXT.value, data)

## Creates a tIME chunk, which always holds exactly seven bytes:
##  Year (big-endian)
##  |     Month (1-12)
##  |     |  Day (1-31)
##  |     |  |  Hour (0-23)
##  |     |  |  |  Minute (0-59)
##  |     |  |  |  |  Second (0-60)
##  |     |  |  |  |  |
##  xx xx xx xx xx xx xx
## Milliseconds cannot be represented and are dropped.
## A datetime cannot hold a leap second, so this never writes a second of 60
## even though the tIME chunk allows it.
def build_time_chunk(timestamp: datetime) -> Chunk:
    data = b''.join((
        timestamp.year.to_bytes(2, 'big'),
        bytes((timestamp.month, timestamp.day, timestamp.hour, timestamp.minute, timestamp.second))))
    return Chunk(ChunkKind.TIME.value, data)

## \return The keyword of a tEXt chunk, given the chunk's data.
def extract_text_key(data: bytes) -> str:
    separator_index = data.find(KEYWORD_SEPARATOR)
    if separator_index == -1:
        raise MalformedTextChunkError(f'tEXt chunk has no NUL separator after its keyword: {bytes(data[:MAXIMUM_KEYWORD_LENGTH + 1])!r}')
    return data[:separator_index].decode(TEXT_ENCODING)

## Renders a timestamp for the "Creation Time" text.
## \param[in] format - A strftime format string. In addition to the usual
##            directives, %L is replaced with the three-digit millisecond.
def format_creation_time(timestamp: datetime, format: str) -> str:
    # REPLACE THE MILLISECOND DIRECTIVE.
    # An escaped percent sign ("%%L") must stay a literal "%L", so the
    # format is split on the escapes first.
    milliseconds = f'{timestamp.microsecond // 1000:03d}'
    pieces = [piece.replace(MILLISECOND_DIRECTIVE, milliseconds) for piece in format.split('%%')]
    return timestamp.strftime('%%'.join(pieces))
