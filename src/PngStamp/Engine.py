#! python3

## This program adds the capture time to VRChat screenshots as PNG metadata,
## so photo managers sort them correctly even after the files are copied.
## Overall Design:
##  - The capture time is taken from the screenshot's filename.
##  - A "Creation Time" tEXt chunk and a tIME chunk are added right before
##    the IEND chunk, unless the screenshot already has them. All other
##    chunks are copied through unchanged.
##  - Each screenshot is rewritten to a temporary file that then replaces
##    the original, so a failure never leaves a half-written screenshot.

from typing import List, Optional
import argparse
import logging
import os

from .Rewriter import RewriteOptions
from .Screenshot import SCREENSHOT_FILENAME_REGEX, Screenshot, parse_screenshot_timestamp

## Renders like "2022:03:04 21:45:19.123".
DEFAULT_CREATION_TIME_FORMAT = '%Y:%m:%d %H:%M:%S.%L'

## Adds metadata to every screenshot directly inside the given directory.
## Files that don't look like screenshots are skipped. A failure on one
## screenshot is logged and does not stop the others.
## \return The paths of the screenshots that could not be modified.
def process_directory(directory: str, options: RewriteOptions, filename_regex: str = SCREENSHOT_FILENAME_REGEX) -> List[str]:
    failed_filepaths = []
    for filename in sorted(os.listdir(directory)):
        # CHECK WHETHER THIS IS A SCREENSHOT.
        filepath = os.path.join(directory, filename)
        if not os.path.isfile(filepath):
            continue
        try:
            creation_time = parse_screenshot_timestamp(filename, filename_regex)
        except ValueError:
            # The filename matched but holds an impossible time, like month 13.
            logging.exception(f'Failed to read the capture time from {filepath}')
            failed_filepaths.append(filepath)
            continue
        if creation_time is None:
            continue

        # ADD THE METADATA.
        logging.info(f'Modify {filepath} ...')
        try:
            session = Screenshot(filepath, creation_time).add_metadata(options)
        except Exception:
            logging.exception(f'Failed to modify {filepath}')
            failed_filepaths.append(filepath)
            continue

        added_chunk_types = ', '.join(chunk.type for chunk in session.added_chunks) or 'nothing'
        logging.info(f'Modify {filepath} done (added {added_chunk_types})')
    return failed_filepaths

def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog = 'PngStamp', description = 'Add the capture time of VRChat screenshots to their PNG metadata.')

    parser.add_argument(
        'input', help = 'The directory that holds the screenshots. Subdirectories are not searched.')

    parser.add_argument(
        '--creation-time-format', default = DEFAULT_CREATION_TIME_FORMAT,
        help = 'The strftime format for the "Creation Time" text. %%L is the three-digit millisecond. (default: %(default)s)')

    parser.add_argument(
        '--no-creation-time', action = 'store_true',
        help = 'Do not add a "Creation Time" tEXt chunk.')

    parser.add_argument(
        '--no-time-chunk', action = 'store_true',
        help = 'Do not add a tIME chunk.')

    parser.add_argument(
        '--filename-regex', default = SCREENSHOT_FILENAME_REGEX,
        help = 'Which files to modify. Must have seven groups: year, month, day, hour, minute, second, millisecond.')

    parser.add_argument(
        '--verbose', action = 'store_true',
        help = 'Log every chunk that is read or added.')

    return parser.parse_args(argv)

def main(argv: Optional[List[str]] = None) -> int:
    # PARSE THE COMMAND-LINE ARGUMENTS.
    arguments = parse_arguments(argv)
    logging.basicConfig(level = logging.DEBUG if arguments.verbose else logging.INFO, format = '%(levelname)s: %(message)s')
    if not os.path.isdir(arguments.input):
        logging.error(f'{arguments.input} is not a directory.')
        return 1

    options = RewriteOptions(
        creation_time_format = None if arguments.no_creation_time else arguments.creation_time_format,
        add_time_chunk = not arguments.no_time_chunk)

    # MODIFY THE SCREENSHOTS.
    failed_filepaths = process_directory(arguments.input, options, arguments.filename_regex)
    if failed_filepaths:
        logging.error(f'Failed to modify {len(failed_filepaths)} screenshot(s).')
        return 1
    return 0

if __name__ == '__main__':
    exit(main())
