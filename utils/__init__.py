"""Utility modules for the overlay assistant."""

from utils.string_utils import (
    truncate,
    word_wrap,
    strip_code_fences,
)
from utils.media import (
    MediaPayload,
    is_audio_path,
    guess_mime_type,
    load_image,
    load_audio,
)
from utils.log_setup import setup_logging

__all__ = [
    'truncate',
    'word_wrap',
    'strip_code_fences',
    'MediaPayload',
    'is_audio_path',
    'guess_mime_type',
    'load_image',
    'load_audio',
    'setup_logging',
]
