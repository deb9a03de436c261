"""
Image Processor Module.

This module prepares invoice photos and scans for OCR.

Processing steps:
    1. Fix orientation from EXIF data (phone photos)
    2. Convert to RGB, flattening transparency onto white
    3. Downscale if larger than the configured maximum
    4. Enhance contrast (optional)

Author: ML Engineering Team
"""

from pathlib import Path
from typing import Union

from PIL import Image, ImageEnhance, ImageOps

from invoice_manager.config import get_config
from invoice_manager.utils.logger import get_logger
from invoice_manager.utils.exceptions import CorruptedFileError

# Initialize module logger
logger = get_logger(__name__)


class ImageProcessor:
    """
    Loads and normalizes a single image file.

    Attributes:
        max_width: Maximum width after processing
        max_height: Maximum height after processing
        auto_orient: Whether to apply EXIF orientation
        enhance_contrast: Whether to apply contrast enhancement

    Example:
        >>> processor = ImageProcessor()
        >>> image = processor.process("factura.jpg")
    """

    def __init__(self) -> None:
        self.max_width = get_config("input.image.max_width", 2480)
        self.max_height = get_config("input.image.max_height", 3508)
        self.auto_orient = get_config("input.image.auto_orient", True)
        self.enhance_contrast = get_config("input.image.enhance_contrast", False)

        logger.debug(
            f"ImageProcessor initialized (max_size={self.max_width}x{self.max_height})"
        )

    def process(self, filepath: Union[str, Path]) -> Image.Image:
        """
        Load and prepare an image file for OCR.

        Raises:
            CorruptedFileError: If the image cannot be read.
        """
        filepath = Path(filepath)
        logger.info(f"Processing image: {filepath.name}")

        try:
            with Image.open(filepath) as opened:
                opened.load()
                image = self.prepare(opened)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.error(f"Failed to process image {filepath}: {e}")
            raise CorruptedFileError(str(filepath), str(e)) from e

        logger.info(f"Processed image: {image.width}x{image.height}")
        return image

    def prepare(self, image: Image.Image) -> Image.Image:
        """Apply the processing steps to an already-open image."""
        if self.auto_orient:
            image = ImageOps.exif_transpose(image)

        image = self._convert_to_rgb(image)
        image = self._resize_if_needed(image)

        if self.enhance_contrast:
            image = ImageEnhance.Contrast(image).enhance(1.2)

        return image

    def _convert_to_rgb(self, image: Image.Image) -> Image.Image:
        if image.mode == 'RGB':
            return image

        original_mode = image.mode
        if image.mode in ('RGBA', 'LA') or (image.mode == 'P' and 'transparency' in image.info):
            rgba = image.convert('RGBA')
            background = Image.new('RGB', rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            image = background
        else:
            image = image.convert('RGB')

        logger.debug(f"Converted image from {original_mode} to RGB")
        return image

    def _resize_if_needed(self, image: Image.Image) -> Image.Image:
        """Downscale keeping the aspect ratio; never upscales."""
        width, height = image.size
        if width <= self.max_width and height <= self.max_height:
            return image

        ratio = min(self.max_width / width, self.max_height / height)
        new_size = (max(1, int(width * ratio)), max(1, int(height * ratio)))
        image = image.resize(new_size, Image.LANCZOS)

        logger.debug(f"Resized image from {width}x{height} to {new_size[0]}x{new_size[1]}")
        return image
