import base64
import re
from typing import Iterable, List

THUMBNAIL_BEGIN = '; thumbnail begin '
THUMBNAIL_END = '; thumbnail end'
DATA_URI_PREFIX = b'data:image/png;base64,'

# "; thumbnail begin 300x300 12345" followed by "; <base64>" lines
THUMBNAIL_PATTERN = re.compile(
    rb'; thumbnail begin \d+[x ]\d+ \d+\r?\n((?:.+\r?\n)+?); thumbnail end'
)


class ThumbnailCapture:
    """ Collects the lines of every embedded thumbnail block while the file is scanned """

    def __init__(self):
        self.lines: List[bytes] = []
        self.capturing = False

    def begin(self):
        self.capturing = True

    def end(self, line: str):
        self.lines.append(line.encode('utf-8'))
        self.capturing = False

    def feed(self, line: str):
        if self.capturing:
            self.lines.append(line.encode('utf-8'))

    def decode(self) -> bytes:
        if not self.lines:
            return b''
        return decode_thumbnail(self.lines)


def decode_thumbnail(lines: Iterable[bytes]) -> bytes:
    """
    Returns the last thumbnail found in the given lines as a PNG data URI,
    or empty bytes if there is none. Later thumbnails are usually the larger ones.
    """
    comments = b''.join(line + b'\n' for line in lines if line[:1] == b';')

    matches = THUMBNAIL_PATTERN.findall(comments)
    if not matches:
        return b''

    data = matches[-1]
    data = data.replace(b'\r\n', b'')
    data = data.replace(b'\n', b'')
    data = data.replace(b'; ', b'')
    return DATA_URI_PREFIX + data


def thumbnail_png_bytes(data_uri: bytes) -> bytes:
    """ The raw PNG file contents behind a thumbnail data URI """
    if not data_uri.startswith(DATA_URI_PREFIX):
        raise ValueError("Thumbnail is not a base64 PNG data URI")
    return base64.b64decode(data_uri[len(DATA_URI_PREFIX):])
