"""
VariantEncoder - Resizes and re-encodes images with Pillow.
"""

import io
import logging
from typing import Dict, Optional, Tuple

from PIL import Image, ImageOps

from .build_config import DEFAULT_QUALITY, SizeClass


class VariantEncoder:
    """
    Renders size/format variants of source images using Pillow.
    """

    # format name -> (Pillow format, content type)
    FORMATS = {
        'webp': ('WEBP', 'image/webp'),
        'jpg': ('JPEG', 'image/jpeg'),
        'jpeg': ('JPEG', 'image/jpeg'),
        'png': ('PNG', 'image/png'),
    }

    def __init__(
        self,
        quality: Optional[Dict[str, int]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize encoder.

        Args:
            quality: Per-format quality (default: webp=80, jpg=85, png=90)
            logger: Optional logger instance
        """
        self.quality = dict(DEFAULT_QUALITY)
        if quality:
            self.quality.update(quality)
        self.logger = logger or logging.getLogger(__name__)

    def open_image(self, image_data: bytes) -> Image.Image:
        """Decode image bytes, applying EXIF orientation."""
        img = Image.open(io.BytesIO(image_data))
        img.load()
        return ImageOps.exif_transpose(img)

    def render(
        self,
        img: Image.Image,
        size: SizeClass,
        output_format: str
    ) -> Tuple[bytes, str, Tuple[int, int]]:
        """
        Render one variant of an already decoded image.

        Args:
            img: Decoded source image (not modified)
            size: Size class; aspect ratio is kept and the image is never upscaled
            output_format: One of 'webp', 'jpg', 'jpeg', 'png'

        Returns:
            Tuple of (encoded_bytes, content_type, (width, height))
        """
        fmt = output_format.lower()
        if fmt not in self.FORMATS:
            raise ValueError(f"Unsupported output format: {output_format}")
        pil_format, content_type = self.FORMATS[fmt]

        variant = img.copy()
        if not size.is_original:
            bounds = (size.width or variant.width, size.height or variant.height)
            variant.thumbnail(bounds, Image.Resampling.LANCZOS)
        variant = self._convert_color_mode(variant, pil_format)

        output = io.BytesIO()
        quality = self._quality_for(fmt)
        if pil_format == 'JPEG':
            variant.save(output, format='JPEG', quality=quality, optimize=True)
        elif pil_format == 'WEBP':
            variant.save(output, format='WEBP', quality=quality)
        else:
            variant.save(output, format='PNG', optimize=True)

        data = output.getvalue()
        self.logger.debug(f"Rendered {size.name}.{fmt}: {variant.width}x{variant.height}, {len(data)} bytes")
        return data, content_type, variant.size

    def _quality_for(self, fmt: str) -> int:
        if fmt == 'jpeg' and 'jpeg' not in self.quality:
            fmt = 'jpg'
        return self.quality.get(fmt, 85)

    def _convert_color_mode(self, img: Image.Image, pil_format: str) -> Image.Image:
        """Convert image to a color mode the output format can store."""
        if pil_format == 'JPEG':
            if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
                img = img.convert('RGBA')
                background = Image.new('RGB', img.size, (255, 255, 255))
                background.paste(img, mask=img.split()[-1])
                return background
            if img.mode != 'RGB':
                return img.convert('RGB')
            return img

        # WEBP and PNG keep transparency
        if img.mode in ('RGB', 'RGBA'):
            return img
        if img.mode in ('LA', 'P', 'PA'):
            return img.convert('RGBA')
        if pil_format == 'PNG' and img.mode == 'L':
            return img
        return img.convert('RGB')
