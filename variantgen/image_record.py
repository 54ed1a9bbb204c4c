"""
SourceImage and Variant - A source image and one of its rendered variants.
"""

from dataclasses import dataclass
from typing import Optional

from .conventions import split_logical_path, variant_path


@dataclass(frozen=True)
class SourceImage:
    """
    A logical source image, identified by its root-relative posix path.

    Attributes:
        path: Root-relative path (e.g., 'manuais/sox406/images/equipment/sox406-main.jpg')
        directory: Directory part of the path
        base_name: File name without extension
        extension: Original extension including the dot
        size_bytes: Size of the source file in bytes
    """
    path: str
    directory: str
    base_name: str
    extension: str
    size_bytes: int = 0

    @classmethod
    def from_path(cls, path: str, size_bytes: int = 0) -> 'SourceImage':
        """Create from a root-relative path."""
        directory, base_name, extension = split_logical_path(path)
        return cls(
            path=path,
            directory=directory,
            base_name=base_name,
            extension=extension,
            size_bytes=size_bytes,
        )

    @property
    def filename(self) -> str:
        return f"{self.base_name}{self.extension}"

    def variant_path(self, size: str, fmt: str) -> Optional[str]:
        """Convention path for this image's variant, or None outside the convention."""
        return variant_path(self.path, size, fmt)


@dataclass
class Variant:
    """
    One rendered variant of a source image.

    Attributes:
        source_path: Logical path of the source image
        size: Size class name
        format: Output format (e.g., 'webp')
        path: Root-relative path of the written file
        width: Rendered width in pixels (None when not rendered)
        height: Rendered height in pixels (None when not rendered)
        bytes: Size of the written file
    """
    source_path: str
    size: str
    format: str
    path: str
    width: Optional[int] = None
    height: Optional[int] = None
    bytes: int = 0

    def format_status(self) -> str:
        """Human-readable one-line description, e.g. 'foo-medium.webp 800x600 (45.2 KB)'."""
        name = self.path.rsplit('/', 1)[-1]
        dims = f" {self.width}x{self.height}" if self.width and self.height else ""
        return f"{name}{dims} ({format_bytes(self.bytes)})"


def format_bytes(bytes_val: Optional[int]) -> str:
    """Format bytes as human-readable string."""
    if bytes_val is None:
        return "unknown"
    for unit in ['B', 'KB', 'MB', 'GB']:
        if bytes_val < 1024:
            return f"{bytes_val:.1f} {unit}"
        bytes_val /= 1024
    return f"{bytes_val:.1f} TB"
