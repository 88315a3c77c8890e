"""
Utilities for acquiring and validating uploaded images.
"""

import mimetypes
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from image2code.errors import ValidationError
from image2code.models import (
    IMAGE_TYPE_PREFIX,
    MAX_IMAGE_BYTES,
    ImageAsset,
    ImageCandidate,
    ImagePreview,
    ValidationReason,
)


class ImageValidator:
    """Enforces the upload policy on image candidates. Never touches the network."""

    def __init__(self, max_bytes: int = MAX_IMAGE_BYTES):
        """
        Initialize image validator.

        Args:
            max_bytes: Largest accepted payload, inclusive.
        """
        self.max_bytes = max_bytes

    def load_candidate(self, image_path: Union[str, Path]) -> ImageCandidate:
        """
        Read an image file from disk as an unvalidated candidate.

        The media type is guessed from the file extension, the way a browser
        declares it for a picked file.

        Args:
            image_path: Path to the image file.

        Returns:
            ImageCandidate with the file contents.
        """
        image_path = Path(image_path)
        if not image_path.exists():
            raise FileNotFoundError(f"Image not found: {image_path}")

        media_type, _ = mimetypes.guess_type(image_path.name)
        return ImageCandidate(
            filename=image_path.name,
            media_type=media_type or "",
            data=image_path.read_bytes()
        )

    def check(self, media_type: str, byte_length: int):
        """
        Apply the type and size policy.

        Raises:
            ValidationError: With reason unsupported-type or too-large.
        """
        if not media_type or not media_type.startswith(IMAGE_TYPE_PREFIX):
            raise ValidationError(ValidationReason.UNSUPPORTED_TYPE)
        if byte_length > self.max_bytes:
            raise ValidationError(ValidationReason.TOO_LARGE)

    def validate(self, candidate: ImageCandidate) -> Tuple[ImageAsset, ImagePreview]:
        """
        Validate a candidate and build the asset plus its preview.

        Args:
            candidate: File selected by the user.

        Returns:
            Tuple of (ImageAsset, ImagePreview).

        Raises:
            ValidationError: If the candidate violates the upload policy.
        """
        self.check(candidate.media_type, candidate.byte_length)

        asset = ImageAsset(
            data=candidate.data,
            media_type=candidate.media_type,
            filename=candidate.filename
        )
        return asset, self.build_preview(asset)

    def build_preview(self, asset: ImageAsset) -> ImagePreview:
        """Encode the asset as a data URI, with pixel dimensions when decodable."""
        size = self.probe_size(asset.data)
        return ImagePreview(
            data_uri=asset.to_data_uri(),
            width=size[0] if size else None,
            height=size[1] if size else None
        )

    def probe_size(self, data: bytes) -> Optional[Tuple[int, int]]:
        """
        Read pixel dimensions from an encoded image.

        Returns:
            (width, height), or None when Pillow cannot decode the payload
            (for example SVG, a declared type that does not match the bytes, or a
            header declaring more pixels than Pillow is willing to decode).
        """
        try:
            with Image.open(BytesIO(data)) as image:
                return image.size
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
            return None
