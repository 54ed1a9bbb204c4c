"""
Manifest - Index of the variants produced for every source image.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import urllib3

from .build_config import SizeClass
from .image_record import Variant

logger = logging.getLogger(__name__)

# source path -> {'original': path, 'variants': {size: {format: physical_path}}}
ImageEntries = Dict[str, dict]


class ManifestLoadError(Exception):
    """Raised when a manifest cannot be fetched or parsed."""


@dataclass
class Manifest:
    """
    Build manifest mapping each source image to its available variants.

    Attributes:
        generated: ISO timestamp of the build that produced it
        sizes: Size classes configured for the build
        formats: Formats configured for the build
        images: source path -> {'original', 'variants': {size: {format: path}}}
        stats: Summary counts of the build (processed, errors, byte totals)
    """
    generated: str
    sizes: List[SizeClass] = field(default_factory=list)
    formats: List[str] = field(default_factory=list)
    images: ImageEntries = field(default_factory=dict)
    stats: Dict[str, int] = field(default_factory=dict)

    AGE_WARNING_HOURS = 24

    def add_source(self, source_path: str) -> dict:
        """Ensure an entry exists for a source image and return it."""
        if source_path not in self.images:
            self.images[source_path] = {'original': source_path, 'variants': {}}
        return self.images[source_path]

    def add_variant(self, variant: Variant) -> None:
        """Record a produced variant."""
        entry = self.add_source(variant.source_path)
        entry['variants'].setdefault(variant.size, {})[variant.format] = variant.path

    def get_variant_path(self, source_path: str, size: str, fmt: str) -> Optional[str]:
        """Recorded physical path for (source, size, format), or None."""
        entry = self.images.get(source_path)
        if not isinstance(entry, dict):
            return None
        variants = entry.get('variants')
        if not isinstance(variants, dict):
            return None
        formats = variants.get(size)
        if not isinstance(formats, dict):
            return None
        path = formats.get(fmt)
        return path if isinstance(path, str) else None

    def variants_for(self, source_path: str) -> Dict[str, Dict[str, str]]:
        entry = self.images.get(source_path) or {}
        return entry.get('variants', {})

    def missing_variants(self, source_path: str) -> List[Tuple[str, str]]:
        """(size, format) pairs of the configured cross product not recorded for an image."""
        missing = []
        for size in self.sizes:
            for fmt in self.formats:
                if self.get_variant_path(source_path, size.name, fmt) is None:
                    missing.append((size.name, fmt))
        return missing

    @property
    def total_images(self) -> int:
        return len(self.images)

    @property
    def total_variants(self) -> int:
        return sum(
            len(formats)
            for entry in self.images.values()
            for formats in entry.get('variants', {}).values()
        )

    @property
    def expected_variants_per_image(self) -> int:
        return len(self.sizes) * len(self.formats)

    @property
    def total_incomplete(self) -> int:
        """Number of images missing at least one configured variant."""
        return sum(1 for path in self.images if self.missing_variants(path))

    @property
    def age_hours(self) -> float:
        """Age of manifest in hours."""
        created = datetime.fromisoformat(self.generated)
        now = datetime.now()
        return (now - created).total_seconds() / 3600

    def is_stale(self, threshold_hours: Optional[float] = None) -> bool:
        """Check if manifest is older than threshold."""
        threshold = self.AGE_WARNING_HOURS if threshold_hours is None else threshold_hours
        return self.age_hours > threshold

    def to_dict(self) -> dict:
        """
        Convert to dictionary for JSON serialization.

        Images are emitted sorted by source path and variants in configured
        size/format order so that unchanged input serializes identically.
        """
        size_order = [s.name for s in self.sizes]
        images = {}
        for source_path in sorted(self.images):
            entry = self.images[source_path]
            variants = entry.get('variants', {})
            ordered_sizes = [s for s in size_order if s in variants]
            ordered_sizes += sorted(s for s in variants if s not in size_order)
            ordered = {}
            for size in ordered_sizes:
                formats = variants[size]
                fmt_order = [f for f in self.formats if f in formats]
                fmt_order += sorted(f for f in formats if f not in self.formats)
                ordered[size] = {fmt: formats[fmt] for fmt in fmt_order}
            images[source_path] = {
                'original': entry.get('original', source_path),
                'variants': ordered,
            }

        return {
            'generated': self.generated,
            'sizes': [s.to_dict() for s in self.sizes],
            'formats': list(self.formats),
            'stats': dict(self.stats),
            'images': images,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Manifest':
        """Create from dictionary, raising ManifestLoadError on malformed data."""
        if not isinstance(data, dict):
            raise ManifestLoadError("Manifest must be a JSON object")
        images = data.get('images', {})
        if not isinstance(images, dict):
            raise ManifestLoadError("Manifest 'images' must be an object")

        try:
            sizes = [SizeClass.from_dict(s) for s in data.get('sizes', [])]
        except (KeyError, TypeError, AttributeError) as e:
            raise ManifestLoadError(f"Invalid size classes in manifest: {e}")
        for size in sizes:
            if not isinstance(size.name, str) or not all(
                dim is None or (isinstance(dim, int) and not isinstance(dim, bool))
                for dim in (size.width, size.height)
            ):
                raise ManifestLoadError(f"Invalid size class in manifest: {size!r}")

        formats = data.get('formats', [])
        if not isinstance(formats, list) or not all(isinstance(f, str) for f in formats):
            raise ManifestLoadError("Manifest 'formats' must be a list of strings")
        stats = data.get('stats', {})
        if not isinstance(stats, dict):
            raise ManifestLoadError("Manifest 'stats' must be an object")

        generated = data.get('generated') or datetime.now().isoformat()
        try:
            datetime.fromisoformat(generated)
        except (TypeError, ValueError):
            raise ManifestLoadError(f"Invalid manifest timestamp: {generated!r}")

        manifest = cls(
            generated=generated,
            sizes=sizes,
            formats=list(formats),
            stats=dict(stats),
        )

        for source_path, entry in images.items():
            if not isinstance(entry, dict) or not isinstance(entry.get('variants', {}), dict):
                raise ManifestLoadError(f"Invalid manifest entry for {source_path}")
            variants = entry.get('variants', {})
            if not all(isinstance(by_format, dict) for by_format in variants.values()):
                raise ManifestLoadError(f"Invalid variants for {source_path}")
            manifest.images[source_path] = {
                'original': entry.get('original', source_path),
                'variants': {size: dict(by_format) for size, by_format in variants.items()},
            }

        return manifest

    def save(self, filepath: str) -> None:
        """Save manifest to JSON file."""
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)
            f.write('\n')

        logger.debug(f"Manifest saved: {filepath} ({path.stat().st_size:,} bytes)")

    @classmethod
    def load(cls, filepath: str) -> 'Manifest':
        """Load manifest from JSON file."""
        with open(filepath, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                raise ManifestLoadError(f"Malformed manifest {filepath}: {e}")
        return cls.from_dict(data)

    @classmethod
    def create_new(
        cls,
        sizes: Optional[List[SizeClass]] = None,
        formats: Optional[List[str]] = None
    ) -> 'Manifest':
        """Create a new empty manifest."""
        return cls(
            generated=datetime.now().isoformat(),
            sizes=list(sizes or []),
            formats=list(formats or []),
        )


def load_manifest(
    source: str,
    http: Optional[urllib3.PoolManager] = None,
    timeout: float = 10.0
) -> Manifest:
    """
    Load a manifest from a file path or an http(s) URL.

    Args:
        source: Filesystem path or URL (e.g., 'https://site/assets/images/manifest.json')
        http: Optional urllib3 pool manager (a new one is created for URLs)
        timeout: Request timeout in seconds

    Raises:
        FileNotFoundError: Local manifest does not exist
        ManifestLoadError: Fetch failed or content is malformed
    """
    if not source.startswith(('http://', 'https://')):
        return Manifest.load(source)

    http = http or urllib3.PoolManager()
    try:
        response = http.request('GET', source, timeout=timeout)
    except urllib3.exceptions.HTTPError as e:
        raise ManifestLoadError(f"Failed to fetch manifest {source}: {e}")

    if response.status != 200:
        raise ManifestLoadError(f"Failed to fetch manifest {source}: HTTP {response.status}")

    try:
        data = json.loads(response.data.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestLoadError(f"Malformed manifest {source}: {e}")

    return Manifest.from_dict(data)
