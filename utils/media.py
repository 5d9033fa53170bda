"""Media helpers for preparing captured files for model submission.

Screenshots are re-encoded and downscaled with Pillow before upload so that
large multi-monitor captures stay within request size limits.
"""

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Union
import asyncio
import base64
import logging

from PIL import Image

logger = logging.getLogger(__name__)


AUDIO_EXTENSIONS = ('.mp3', '.wav')

_MIME_TYPES = {
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.webp': 'image/webp',
    '.gif': 'image/gif',
    '.mp3': 'audio/mp3',
    '.wav': 'audio/wav',
}


@dataclass
class MediaPayload:
    """File content ready to be attached to a model request.

    Attributes:
        data: Raw bytes.
        mime_type: MIME type of the bytes.
    """
    data: bytes
    mime_type: str

    def to_base64(self) -> str:
        """Encode the payload as base64 text."""
        return base64.b64encode(self.data).decode('utf-8')

    @property
    def size_kb(self) -> float:
        """Get payload size in kilobytes."""
        return len(self.data) / 1024


def is_audio_path(path: Union[str, Path]) -> bool:
    """Check whether a capture path is an audio recording (by extension)."""
    return str(path).lower().endswith(AUDIO_EXTENSIONS)


def guess_mime_type(path: Union[str, Path]) -> str:
    """Guess the MIME type of a capture file from its extension.

    Unknown extensions are treated as PNG screenshots.
    """
    return _MIME_TYPES.get(Path(path).suffix.lower(), 'image/png')


def _encode_image(path: Path, max_dimension: int, jpeg_quality: int) -> MediaPayload:
    with Image.open(path) as img:
        width, height = img.size

        if width <= max_dimension and height <= max_dimension:
            return MediaPayload(data=path.read_bytes(), mime_type=guess_mime_type(path))

        ratio = min(max_dimension / width, max_dimension / height)
        new_size = (int(width * ratio), int(height * ratio))
        resized = img.convert('RGB').resize(new_size, Image.Resampling.LANCZOS)

        buffer = BytesIO()
        resized.save(buffer, format='JPEG', quality=jpeg_quality, optimize=True)

    logger.debug(f"Downscaled {path.name} from {width}x{height} to {new_size[0]}x{new_size[1]}")
    return MediaPayload(data=buffer.getvalue(), mime_type='image/jpeg')


async def load_image(
    path: Union[str, Path],
    max_dimension: int = 1920,
    jpeg_quality: int = 85,
) -> MediaPayload:
    """Read a screenshot from disk, downscaling it if it is too large.

    Args:
        path: Image file path.
        max_dimension: Maximum width/height; larger images are scaled.
        jpeg_quality: JPEG quality used when the image is re-encoded.

    Returns:
        MediaPayload with the (possibly re-encoded) image.
    """
    return await asyncio.to_thread(_encode_image, Path(path), max_dimension, jpeg_quality)


async def load_audio(path: Union[str, Path]) -> MediaPayload:
    """Read an audio recording from disk."""
    path = Path(path)
    data = await asyncio.to_thread(path.read_bytes)
    return MediaPayload(data=data, mime_type=guess_mime_type(path))
