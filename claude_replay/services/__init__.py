"""Service layer: decoding, scanning, segmentation and diffs."""

from claude_replay.services.decoder import decode, decode_file, decode_line
from claude_replay.services.diff import compute_diff, count_changes
from claude_replay.services.file_changes import file_changes
from claude_replay.services.loader import LoggerProtocol, SessionLoaderService
from claude_replay.services.scanner import scan, scan_stream
from claude_replay.services.segmenter import build_session, segment

__all__ = [
    'LoggerProtocol',
    'SessionLoaderService',
    'build_session',
    'compute_diff',
    'count_changes',
    'decode',
    'decode_file',
    'decode_line',
    'file_changes',
    'scan',
    'scan_stream',
    'segment',
]
