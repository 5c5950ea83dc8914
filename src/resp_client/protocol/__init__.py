"""Protocol layer: reply type markers, line framing, and reply decoding."""

from .framing import build_line, write_line
from .parser import ReplyDecoder, read_reply
from .types import ReplyType
