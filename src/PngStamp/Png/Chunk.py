from enum import Enum
import io

import self_documenting_struct as struct
from asset_extraction_framework.Exceptions import BinaryParsingError

from .Crc32 import crc32, update_crc32

## DEFINE CHUNK-RELATED ERRORS.
## Raised when the stream ends before a chunk that it declares is complete.
## The stream ending before the terminal chunk is also reported this way,
## since the next chunk's length and type are then missing.
class TruncatedStreamError(BinaryParsingError):
    pass

## BinaryParsingError shows a hexdump of the bytes before the current position,
## which needs a seekable stream with at least this many bytes already read.
HEXDUMP_CONTEXT_LENGTH = 0x20

## Creates a parsing error, attaching the stream for a hexdump only when
## the stream can provide one. Otherwise the hexdump itself would fail
## and hide the real error.
## \param[in] error_class - A BinaryParsingError subclass.
def create_parsing_error(error_class, message: str, stream):
    try:
        seekable = stream.seekable() if hasattr(stream, 'seekable') else hasattr(stream, 'seek')
        has_context = seekable and (stream.tell() >= HEXDUMP_CONTEXT_LENGTH)
    except (OSError, ValueError):
        has_context = False

    if has_context:
        return error_class(message, stream)
    return error_class(message)

## PNG chunks are the only structure in a PNG file after the signature.
## Each chunk is laid out as follows, with all integers big-endian:
##  Length (of the data only)
##  |           Type
##  |           |           Data (Length bytes)
##  |           |           |        CRC (of type and data)
##  |           |           |        |
##  xx xx xx xx xx xx xx xx .. .. .. xx xx xx xx
##
## Only a handful of chunk types matter for adding metadata.
## Everything else is carried along as opaque bytes, so there is
## no need to know the full vocabulary of chunk types.
class ChunkKind(Enum):
    TEXT = 'tEXt'
    TIME = 'tIME'
    END = 'IEND'
    PASS_THROUGH = None

    ## \return The kind for the given four-character chunk type.
    ## Unknown and uninteresting types are PASS_THROUGH.
    @classmethod
    def for_type(cls, chunk_type: str):
        for kind in cls:
            if kind.value == chunk_type:
                return kind
        return cls.PASS_THROUGH

## A single PNG chunk. Chunks read from a file keep the CRC that was stored
## in the file, but it is never trusted. A fresh CRC is always computed
## when the chunk is written back out.
class Chunk:
    TYPE_LENGTH = 4
    ## The length field is a 31-bit value in the PNG format, but this
    ## code only relies on it fitting in an unsigned 32-bit integer.
    MAXIMUM_DATA_LENGTH = 0xffffffff

    ## \param[in] type - The four-character chunk type, like "IHDR".
    ##            Type characters are stored as Latin-1 so any byte survives
    ##            a round trip, even in malformed types.
    ## \param[in] data - The chunk data, not including length, type, or CRC.
    ## \param[in] stored_crc - The CRC as read from a file, if the chunk was read.
    def __init__(self, type: str, data: bytes, stored_crc: int = None):
        if len(type) != Chunk.TYPE_LENGTH:
            raise ValueError(f'Chunk types must be exactly {Chunk.TYPE_LENGTH} characters, not {type!r}.')
        if len(data) > Chunk.MAXIMUM_DATA_LENGTH:
            raise ValueError(f'Chunk "{type}" has {len(data)} data bytes, more than a chunk can hold.')
        self.type = type
        self.data = bytes(data)
        self.stored_crc = stored_crc

    ## \return The number of data bytes in this chunk, as recorded in the length field.
    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def kind(self) -> ChunkKind:
        return ChunkKind.for_type(self.type)

    @property
    def type_bytes(self) -> bytes:
        return self.type.encode('latin-1')

    ## \return The CRC over the type and data, as it must be written.
    @property
    def crc(self) -> int:
        return update_crc32(self.data, crc32(self.type_bytes))

    ## \return True if this chunk was read from a file and the stored CRC matches
    ## the chunk contents. Chunks created in memory have no stored CRC to check.
    @property
    def stored_crc_is_valid(self) -> bool:
        return self.stored_crc == self.crc

    ## \return The complete chunk as it would appear in a file.
    def to_bytes(self) -> bytes:
        return b''.join((
            self.length.to_bytes(4, 'big'),
            self.type_bytes,
            self.data,
            self.crc.to_bytes(4, 'big')))

    def __repr__(self) -> str:
        return f'<Chunk {self.type} ({self.length} bytes)>'

## Reads exactly the given number of bytes from the stream, or throws
## an error if the stream ends first.
## \param[in] description - What is being read, for the error message.
def read_exactly(stream, number_of_bytes: int, description: str) -> bytes:
    data = stream.read(number_of_bytes)
    if len(data) < number_of_bytes:
        raise create_parsing_error(
            TruncatedStreamError,
            f'Expected {number_of_bytes} bytes for {description} but the stream ended after {len(data)}.',
            stream)
    return data

## Reads one chunk from the binary stream at its current position.
## The stream is left at the start of the next chunk.
## The stored CRC is kept but NOT verified here;
## see Chunk.stored_crc_is_valid.
## \param[in] stream - A binary stream that supports the read method.
def read_chunk(stream) -> Chunk:
    # READ THE LENGTH AND TYPE.
    header = io.BytesIO(read_exactly(stream, 8, 'a chunk length and type'))
    length = struct.unpack.uint32_be(header)
    type = header.read(Chunk.TYPE_LENGTH).decode('latin-1')

    # READ THE DATA.
    data = read_exactly(stream, length, f'the data of chunk "{type}"')

    # READ THE STORED CRC.
    stored_crc = struct.unpack.uint32_be(io.BytesIO(read_exactly(stream, 4, f'the CRC of chunk "{type}"')))
    return Chunk(type, data, stored_crc)

## Writes one complete chunk to the binary stream at its current position.
## The CRC is always recomputed from the type and data.
## \param[in] stream - A binary stream that supports the write method.
def write_chunk(stream, chunk: Chunk):
    stream.write(chunk.to_bytes())
