from datetime import datetime
from typing import Optional
import os
import re

from asset_extraction_framework.File import File

from .Rewriter import InvalidSignatureError, RewriteOptions, RewriteSession, add_additional_chunks

## VRChat names screenshots after the time they were taken, like this:
##  VRChat_1920x1080_2022-03-04_21-45-19.123.png
## That is the only record of the capture time once a screenshot is copied
## around, since the copies get new modification times.
SCREENSHOT_FILENAME_REGEX = r'^VRChat_\d+x\d+_(\d+)-(\d+)-(\d+)_(\d+)-(\d+)-(\d+)\.(\d+)\.png$'
TIMESTAMP_GROUP_COUNT = 7

## \return The time encoded in the screenshot filename, or None if the filename
## is not a screenshot filename.
## \param[in] filename_regex - Must have seven groups, in order: year, month, day,
##            hour, minute, second, millisecond.
def parse_screenshot_timestamp(filename: str, filename_regex: str = SCREENSHOT_FILENAME_REGEX) -> Optional[datetime]:
    match = re.match(filename_regex, filename)
    if match is None or len(match.groups()) < TIMESTAMP_GROUP_COUNT:
        return None

    year, month, day, hour, minute, second, millisecond = (int(group) for group in match.groups()[:TIMESTAMP_GROUP_COUNT])
    return datetime(year, month, day, hour, minute, second, millisecond * 1000)

## \return The path where the modified screenshot is written before it replaces
## the original, like "shot.tmp.png" for "shot.png".
def get_temporary_filepath(filepath: str) -> str:
    stem, extension = os.path.splitext(filepath)
    return f'{stem}.tmp{extension}'

## A screenshot PNG on the filesystem that metadata can be added to in place.
class Screenshot(File):
    ## \param[in] filepath - The path of the screenshot.
    ## \param[in] creation_time - The time the screenshot was taken.
    def __init__(self, filepath: str, creation_time: datetime):
        # VERIFY THE FILE IS NOT EMPTY.
        # An empty file cannot be opened for reading at all,
        # but it is really just a PNG without a signature.
        if os.path.getsize(filepath) == 0:
            raise InvalidSignatureError(f'Invalid PNG signature: {filepath} is empty.')

        super().__init__(filepath)
        self.creation_time = creation_time

    ## Adds metadata chunks to the screenshot. The modified PNG is written to a
    ## temporary file, which gets the creation time as its modification time and
    ## then replaces the original in one step. If anything fails, the temporary
    ## file is deleted and the original is left as it was.
    ## \return The session that did the rewrite.
    def add_metadata(self, options: RewriteOptions) -> RewriteSession:
        temporary_filepath = get_temporary_filepath(self.filepath)
        try:
            # WRITE THE MODIFIED PNG.
            with open(temporary_filepath, 'wb') as destination:
                session = add_additional_chunks(self.stream, destination, options, self.creation_time)
            self.stream.close()

            # SET THE MODIFICATION TIME.
            # The access time is left alone.
            modification_time = self.creation_time.timestamp()
            os.utime(temporary_filepath, (os.stat(temporary_filepath).st_atime, modification_time))

            # REPLACE THE ORIGINAL.
            os.replace(temporary_filepath, self.filepath)
            return session
        except Exception:
            self.stream.close()
            if os.path.exists(temporary_filepath):
                os.remove(temporary_filepath)
            raise
