"""
BuildConfig - Size classes, formats, quality and site layout for a build.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

SUPPORTED_FORMATS = ('webp', 'jpg', 'jpeg', 'png')


@dataclass(frozen=True)
class SizeClass:
    """
    A named resize tier.

    Attributes:
        name: Size class name (e.g., 'medium')
        width: Maximum width in pixels, or None to keep source width
        height: Maximum height in pixels, or None to keep source height
    """
    name: str
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def is_original(self) -> bool:
        return self.width is None and self.height is None

    def to_dict(self) -> dict:
        return {'name': self.name, 'width': self.width, 'height': self.height}

    @classmethod
    def from_dict(cls, data: dict) -> 'SizeClass':
        return cls(name=data['name'], width=data.get('width'), height=data.get('height'))

    @classmethod
    def parse(cls, text: str) -> 'SizeClass':
        """
        Parse a size class from CLI/env notation.

        Accepts 'small:400x300', 'small:400' (width only) and 'original'.
        """
        name, _, dims = text.strip().partition(':')
        if not name:
            raise ValueError(f"Invalid size class: {text!r}")
        if not dims:
            return cls(name=name)
        width_str, _, height_str = dims.lower().partition('x')
        try:
            width = int(width_str) if width_str else None
            height = int(height_str) if height_str else None
        except ValueError:
            raise ValueError(f"Invalid dimensions for size class {name!r}: {dims!r}")
        return cls(name=name, width=width, height=height)


DEFAULT_SIZES = [
    SizeClass('thumbnail', 150, 150),
    SizeClass('small', 400, 300),
    SizeClass('medium', 800, 600),
    SizeClass('large', 1200, 900),
    SizeClass('original'),
]

DEFAULT_FORMATS = ['webp', 'jpg', 'png']

DEFAULT_QUALITY = {
    'webp': 80,
    'jpg': 85,
    'png': 90,
}


def parse_quality(text: str) -> Dict[str, int]:
    """Parse 'webp=80,jpg=85' into a dict."""
    quality = {}
    for item in text.split(','):
        item = item.strip()
        if not item:
            continue
        fmt, sep, value = item.partition('=')
        if not sep:
            raise ValueError(f"Invalid quality setting: {item!r} (expected format=value)")
        quality[fmt.strip().lower()] = int(value)
    return quality


def parse_list(text: str) -> List[str]:
    return [item.strip().lower() for item in text.split(',') if item.strip()]


@dataclass
class BuildConfig:
    """
    Configuration for a variant build.

    Attributes:
        root: Site root; all logical paths are relative to it
        sizes: Size classes to render, in order
        formats: Output formats to render for every size
        quality: Per-format compression quality (0-100)
        assets_dir: Top-level assets image directory, relative to root
        manuals_dir: Directory holding one folder per manual, relative to root
        manifest_path: Manifest location, relative to root
        fail_on_error: Treat any per-file error as a failed build
    """
    root: str = '.'
    sizes: List[SizeClass] = field(default_factory=lambda: list(DEFAULT_SIZES))
    formats: List[str] = field(default_factory=lambda: list(DEFAULT_FORMATS))
    quality: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_QUALITY))
    assets_dir: str = 'assets/images'
    manuals_dir: str = 'manuais'
    manifest_path: str = 'assets/images/manifest.json'
    fail_on_error: bool = False

    def resolve_path(self, relative: str) -> str:
        """Absolute filesystem path for a root-relative posix path."""
        return os.path.join(self.root, *relative.split('/'))

    @property
    def manifest_file(self) -> str:
        return self.resolve_path(self.manifest_path)

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors = []

        if not self.sizes:
            errors.append("At least one size class is required")
        if not self.formats:
            errors.append("At least one output format is required")

        names = [s.name for s in self.sizes]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            errors.append(f"Duplicate size classes: {', '.join(duplicates)}")

        for size in self.sizes:
            for dim in (size.width, size.height):
                if dim is not None and dim <= 0:
                    errors.append(f"Size class {size.name!r} has non-positive dimension {dim}")

        for fmt in self.formats:
            if fmt not in SUPPORTED_FORMATS:
                errors.append(f"Unsupported format: {fmt!r} (supported: {', '.join(SUPPORTED_FORMATS)})")

        for fmt, value in self.quality.items():
            if not 0 <= value <= 100:
                errors.append(f"Quality for {fmt!r} must be between 0 and 100, got {value}")

        if not os.path.isdir(self.root):
            errors.append(f"Root directory does not exist: {self.root}")

        return errors

    @classmethod
    def from_env(cls) -> 'BuildConfig':
        """
        Build configuration from environment variables.

        Recognized: VARIANTGEN_ROOT, VARIANTGEN_SIZES, VARIANTGEN_FORMATS,
        VARIANTGEN_QUALITY, VARIANTGEN_MANIFEST, VARIANTGEN_FAIL_ON_ERROR.
        """
        config = cls()

        if os.environ.get('VARIANTGEN_ROOT'):
            config.root = os.environ['VARIANTGEN_ROOT']
        if os.environ.get('VARIANTGEN_SIZES'):
            config.sizes = [SizeClass.parse(s) for s in os.environ['VARIANTGEN_SIZES'].split(',') if s.strip()]
        if os.environ.get('VARIANTGEN_FORMATS'):
            config.formats = parse_list(os.environ['VARIANTGEN_FORMATS'])
        if os.environ.get('VARIANTGEN_QUALITY'):
            config.quality.update(parse_quality(os.environ['VARIANTGEN_QUALITY']))
        if os.environ.get('VARIANTGEN_MANIFEST'):
            config.manifest_path = os.environ['VARIANTGEN_MANIFEST']
        if os.environ.get('VARIANTGEN_FAIL_ON_ERROR', '').lower() in ('1', 'true', 'yes'):
            config.fail_on_error = True

        return config
