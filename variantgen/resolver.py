"""
VariantResolver - Resolves logical image paths to variant paths and responsive markup.
"""

import enum
import logging
from dataclasses import dataclass
from html import escape
from typing import Dict, List, Optional

import urllib3

from .build_config import DEFAULT_SIZES, SizeClass
from .conventions import variant_path
from .manifest import Manifest, ManifestLoadError, load_manifest


class ResolutionKind(enum.Enum):
    """How a resolved path was obtained."""
    FOUND = 'found'              # recorded in the manifest
    FALLBACK = 'fallback'        # computed from the optimized-directory convention
    PASSTHROUGH = 'passthrough'  # no convention applies; input returned unchanged


@dataclass(frozen=True)
class Resolution:
    """
    Result of resolving a logical path.

    Attributes:
        path: Resolved path (never verified to exist)
        kind: Whether the path came from the manifest, the convention, or neither
    """
    path: str
    kind: ResolutionKind

    @property
    def is_confident(self) -> bool:
        """True when the manifest vouched for the path."""
        return self.kind is ResolutionKind.FOUND


class VariantResolver:
    """
    Resolves (logical path, size, format) to the best known variant path.

    The manifest, when loaded, is read-only for the resolver's lifetime.
    Lookups never perform I/O and never raise.
    """

    DEFAULT_SIZE = 'medium'
    DEFAULT_FORMAT = 'webp'
    FALLBACK_FORMAT = 'jpg'
    RESPONSIVE_SIZES = ('small', 'medium', 'large')
    DEFAULT_SIZES_ATTR = '(max-width: 768px) 100vw, (max-width: 1200px) 50vw, 800px'

    MIME_TYPES = {
        'webp': 'image/webp',
        'jpg': 'image/jpeg',
        'jpeg': 'image/jpeg',
        'png': 'image/png',
    }

    def __init__(
        self,
        manifest: Optional[Manifest] = None,
        sizes: Optional[List[SizeClass]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize resolver.

        Args:
            manifest: Loaded manifest, or None for convention-only resolution
            sizes: Size classes for srcset widths (default: manifest's, else built-in defaults)
            logger: Optional logger instance
        """
        self.manifest = manifest
        self.logger = logger or logging.getLogger(__name__)
        if sizes is None:
            sizes = manifest.sizes if manifest and manifest.sizes else DEFAULT_SIZES
        # Unbounded or missing classes keep the built-in nominal width
        self._widths: Dict[str, Optional[int]] = {s.name: s.width for s in DEFAULT_SIZES}
        self._widths.update({s.name: s.width for s in sizes if s.width})

    @classmethod
    def from_source(
        cls,
        source: Optional[str],
        http: Optional[urllib3.PoolManager] = None,
        logger: Optional[logging.Logger] = None
    ) -> 'VariantResolver':
        """
        Create a resolver, loading the manifest once from a path or URL.

        A missing or malformed manifest is logged as a warning and the
        resolver falls back to the optimized-directory convention.
        """
        logger = logger or logging.getLogger(__name__)
        manifest = None
        if source:
            try:
                manifest = load_manifest(source, http=http)
                logger.debug(f"Loaded manifest {source}: {manifest.total_images} images")
            except FileNotFoundError:
                logger.warning(f"Manifest not found: {source}; using convention fallback")
            except (ManifestLoadError, OSError) as e:
                logger.warning(f"Failed to load manifest {source}: {e}; using convention fallback")
        return cls(manifest=manifest, logger=logger)

    @property
    def has_manifest(self) -> bool:
        return self.manifest is not None

    def resolve_detailed(
        self,
        logical_path: str,
        size: Optional[str] = None,
        fmt: Optional[str] = None
    ) -> Resolution:
        """
        Resolve a logical path and report how the result was obtained.

        Args:
            logical_path: Source image path (e.g., 'manuais/sox406/images/x.jpg')
            size: Size class name (default: 'medium')
            fmt: Format (default: 'webp')
        """
        size = size or self.DEFAULT_SIZE
        fmt = fmt or self.DEFAULT_FORMAT

        if self.manifest is not None:
            recorded = self.manifest.get_variant_path(logical_path, size, fmt)
            if recorded is not None:
                return Resolution(recorded, ResolutionKind.FOUND)

        computed = variant_path(logical_path, size, fmt)
        if computed is not None:
            return Resolution(computed, ResolutionKind.FALLBACK)

        return Resolution(logical_path, ResolutionKind.PASSTHROUGH)

    def resolve(
        self,
        logical_path: str,
        size: Optional[str] = None,
        fmt: Optional[str] = None
    ) -> str:
        """Resolve a logical path to a variant path."""
        return self.resolve_detailed(logical_path, size, fmt).path

    def nominal_width(self, size: str) -> Optional[int]:
        """Nominal width of a size class (None for unknown or unbounded classes)."""
        return self._widths.get(size)

    def _srcset(self, logical_path: str, fmt: str) -> str:
        candidates = []
        for size in self.RESPONSIVE_SIZES:
            path = self.resolve(logical_path, size, fmt)
            width = self.nominal_width(size)
            candidates.append(f"{path} {width}w")
        return ', '.join(candidates)

    def build_responsive_markup(
        self,
        logical_path: str,
        alt: str = '',
        sizes_attr: Optional[str] = None,
        css_class: str = 'responsive-image',
        lazy: bool = True
    ) -> str:
        """
        Build a <picture> fragment with webp and jpg sources and an <img> fallback.

        Args:
            logical_path: Source image path
            alt: Alternative text for the <img>
            sizes_attr: 'sizes' attribute for both sources
            css_class: Class of the <picture> element
            lazy: Add loading="lazy" to the <img>

        Returns:
            HTML fragment
        """
        sizes_attr = sizes_attr or self.DEFAULT_SIZES_ATTR
        primary = self.DEFAULT_FORMAT
        fallback = self.FALLBACK_FORMAT
        fallback_src = self.resolve(logical_path, self.DEFAULT_SIZE, fallback)
        loading_attr = ' loading="lazy"' if lazy else ''

        lines = [
            f'<picture class="{escape(css_class)}">',
            f'  <source srcset="{escape(self._srcset(logical_path, primary))}" '
            f'type="{self.MIME_TYPES[primary]}" sizes="{escape(sizes_attr)}">',
            f'  <source srcset="{escape(self._srcset(logical_path, fallback))}" '
            f'type="{self.MIME_TYPES[fallback]}" sizes="{escape(sizes_attr)}">',
            f'  <img src="{escape(fallback_src)}" alt="{escape(alt)}"{loading_attr} class="optimized-image">',
            '</picture>',
        ]
        return '\n'.join(lines)
