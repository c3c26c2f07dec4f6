"""Image references for multimodal prompts.

Remote images are passed by URL. Local files are resized and compressed
with Pillow, then inlined as base64 ``data:`` URLs so that every vendor can
accept them.
"""

import base64
import hashlib
import io
import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

from PIL import Image

logger = logging.getLogger(__name__)

# Quality presets: (max_dimension, jpeg_quality)
QUALITY_PRESETS = {
    "quick": (512, 75),
    "normal": (1024, 85),
    "detailed": (1568, 90),
    "full": (None, 95),
}

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"}


class ImageProcessor:
    """Turns file paths and URLs into image references."""

    def __init__(self, quality: str = "normal"):
        """Initialize image processor.

        Args:
            quality: Quality preset - "quick", "normal", "detailed", "full"
        """
        self.quality = quality
        self.max_dimension, self.jpeg_quality = QUALITY_PRESETS.get(
            quality, QUALITY_PRESETS["normal"]
        )
        self._cache: dict[str, str] = {}

    def to_image_ref(self, source: Union[str, Path], detail: Optional[str] = None):
        """Build an image reference for a structured prompt.

        Args:
            source: Local file path or http(s) URL
            detail: Optional detail level (low, high, auto)

        Returns:
            URL string, or ``{"url", "detail"}`` when detail is given
        """
        source_str = str(source)
        if source_str.startswith(("http://", "https://", "data:")):
            url = self.process_url(source_str)
        else:
            url = self.process_file(Path(source_str))

        if detail:
            return {"url": url, "detail": detail}
        return url

    def process_url(self, url: str) -> str:
        """Validate an image URL and return it unchanged."""
        if url.startswith("data:"):
            return url
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid URL: {url}")
        return url

    def process_file(self, file_path: Path) -> str:
        """Optimize a local image file and return it as a data URL."""
        path = Path(file_path).expanduser().resolve()

        if not path.is_file():
            raise FileNotFoundError(f"Image not found: {file_path}")

        ext = path.suffix.lower()
        if ext not in IMAGE_EXTENSIONS:
            raise ValueError(f"Unsupported image format: {ext}")

        file_bytes = path.read_bytes()
        file_hash = hashlib.md5(file_bytes).hexdigest()
        if file_hash in self._cache:
            logger.debug(f"Using cached image: {path.name}")
            return self._cache[file_hash]

        optimized_bytes, media_type = self._optimize_image(file_bytes)
        b64_data = base64.standard_b64encode(optimized_bytes).decode("utf-8")
        data_url = f"data:{media_type};base64,{b64_data}"
        self._cache[file_hash] = data_url

        logger.info(
            f"Processed: {path.name} "
            f"({len(file_bytes):,} -> {len(optimized_bytes):,} bytes)"
        )
        return data_url

    def _optimize_image(self, image_bytes: bytes) -> tuple[bytes, str]:
        """Resize and compress image.

        Returns: (optimized_bytes, media_type)
        """
        img = Image.open(io.BytesIO(image_bytes))

        if self.max_dimension and max(img.size) > self.max_dimension:
            ratio = self.max_dimension / max(img.size)
            new_size = (int(img.size[0] * ratio), int(img.size[1] * ratio))
            logger.debug(f"Resized: {img.size} -> {new_size}")
            img = img.resize(new_size, Image.Resampling.LANCZOS)

        has_transparency = img.mode in ("RGBA", "LA") or (
            img.mode == "P" and "transparency" in img.info
        )

        output = io.BytesIO()
        if has_transparency:
            # Keep as PNG for transparency
            if img.mode == "P":
                img = img.convert("RGBA")
            img.save(output, format="PNG", optimize=True)
            media_type = "image/png"
        else:
            if img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            img.save(output, format="JPEG", quality=self.jpeg_quality, optimize=True)
            media_type = "image/jpeg"

        return output.getvalue(), media_type
