from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
import io
import logging

from asset_extraction_framework.Exceptions import BinaryParsingError

from .Png.Chunk import Chunk, ChunkKind, create_parsing_error, read_chunk, write_chunk
from .Png.Metadata import CREATION_TIME_KEYWORD, build_text_chunk, build_time_chunk, extract_text_key, format_creation_time
from .Png.Signature import PNG_SIGNATURE, has_png_signature

## Raised when the input does not start with the PNG signature.
class InvalidSignatureError(BinaryParsingError):
    pass

## Controls which metadata chunks are added to a PNG.
@dataclass
class RewriteOptions:
    # The format used to render the "Creation Time" tEXt chunk (see format_creation_time).
    # None or an empty string means that chunk is not added.
    creation_time_format: Optional[str] = None
    # Whether to add a tIME chunk.
    add_time_chunk: bool = False

    @property
    def adds_creation_time(self) -> bool:
        return bool(self.creation_time_format)

## Tracks one pass over one PNG. A session is used exactly once;
## create a new one for each file.
##
## Chunks are copied through one at a time, in order. Right before
## the IEND chunk, the requested metadata chunks are added unless
## the file already has them:
##  - A tEXt chunk with the "Creation Time" keyword,
##  - A tIME chunk.
## So running the same file through twice gives the same result as
## running it through once.
class RewriteSession:
    class State(Enum):
        EXPECT_SIGNATURE = 'expect signature'
        STREAMING_CHUNKS = 'streaming chunks'
        DONE = 'done'
        # Any error stops the session for good.
        FAILED = 'failed'

    ## \param[in] options - Which metadata chunks to add.
    ## \param[in] creation_time - The time used for all added metadata chunks.
    def __init__(self, options: RewriteOptions, creation_time: datetime):
        self.options = options
        self.creation_time = creation_time
        self.state = RewriteSession.State.EXPECT_SIGNATURE
        self.seen_text_creation_time = False
        self.seen_time = False
        self.added_chunks = []

    ## Copies the PNG from the source stream to the destination stream,
    ## adding metadata chunks as needed. Reading stops after the IEND chunk;
    ## anything after it in the source is not copied.
    ##
    ## If an error is raised, whatever was written to the destination
    ## is incomplete and must be thrown away.
    ## \param[in] source - A binary stream positioned at the start of the PNG.
    ## \param[in] destination - A binary stream that supports the write method.
    def run(self, source, destination):
        if self.state != RewriteSession.State.EXPECT_SIGNATURE:
            raise RuntimeError(f'A rewrite session can only be run once, but this one is already in the "{self.state.value}" state.')

        try:
            self.copy_signature(source, destination)
            while self.state == RewriteSession.State.STREAMING_CHUNKS:
                chunk = read_chunk(source)
                logging.debug(f'Read chunk {chunk.type} (0x{chunk.length:04x} bytes)')
                self.process_chunk(chunk, destination)
        except Exception:
            self.state = RewriteSession.State.FAILED
            raise

    ## Verifies the PNG signature and copies it to the destination.
    ## Nothing is written if the signature is wrong.
    def copy_signature(self, source, destination):
        signature = source.read(len(PNG_SIGNATURE))
        if not has_png_signature(signature):
            raise create_parsing_error(
                InvalidSignatureError,
                f'Invalid PNG signature: {signature.hex(" ")}',
                source)

        destination.write(PNG_SIGNATURE)
        self.state = RewriteSession.State.STREAMING_CHUNKS

    ## Notes whether the chunk is one of the metadata chunks that would be added,
    ## adds any missing metadata chunks if this is the IEND chunk, and then copies
    ## the chunk itself.
    def process_chunk(self, chunk: Chunk, destination):
        kind = chunk.kind
        if kind == ChunkKind.TEXT:
            # CHECK FOR AN EXISTING CREATION TIME.
            # A tEXt chunk without a keyword separator is malformed, so this throws.
            if extract_text_key(chunk.data) == CREATION_TIME_KEYWORD:
                self.seen_text_creation_time = True

        elif kind == ChunkKind.TIME:
            self.seen_time = True

        elif kind == ChunkKind.END:
            # ADD THE MISSING METADATA.
            # These must come before IEND, since IEND is always the last chunk.
            for metadata_chunk in self.build_missing_metadata_chunks():
                logging.debug(f'Adding chunk {metadata_chunk.type} (0x{metadata_chunk.length:04x} bytes)')
                write_chunk(destination, metadata_chunk)
                self.added_chunks.append(metadata_chunk)

        write_chunk(destination, chunk)
        if kind == ChunkKind.END:
            self.state = RewriteSession.State.DONE

    ## \return The metadata chunks that should be added before IEND, in order:
    ## the "Creation Time" tEXt chunk first, then the tIME chunk.
    def build_missing_metadata_chunks(self) -> list:
        missing_chunks = []
        if self.options.adds_creation_time and not self.seen_text_creation_time:
            creation_time_text = format_creation_time(self.creation_time, self.options.creation_time_format)
            missing_chunks.append(build_text_chunk(CREATION_TIME_KEYWORD, creation_time_text))

        if self.options.add_time_chunk and not self.seen_time:
            missing_chunks.append(build_time_chunk(self.creation_time))
        return missing_chunks

## Copies a PNG from one stream to another, adding a "Creation Time" tEXt
## chunk and/or a tIME chunk before IEND if they are requested but missing.
## \return The session, which records the chunks that were added.
def add_additional_chunks(source, destination, options: RewriteOptions, creation_time: datetime) -> RewriteSession:
    session = RewriteSession(options, creation_time)
    session.run(source, destination)
    return session

## Like add_additional_chunks, but for a PNG that is already in memory.
## \return The modified PNG data.
def add_additional_chunks_to_bytes(png_data: bytes, options: RewriteOptions, creation_time: datetime) -> bytes:
    destination = io.BytesIO()
    add_additional_chunks(io.BytesIO(png_data), destination, options, creation_time)
    return destination.getvalue()
