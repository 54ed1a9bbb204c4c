"""
Responsive image variants for the manuals site.

Two components:
    1. Build: render every source image into size/format variants and write a manifest
    2. Resolve: map a logical image path to its best variant, manifest first,
       optimized-directory convention second

Works on a local site tree (assets/images and manuais/<manual>/images).
"""

__version__ = "1.0.0"

from .build_config import BuildConfig, SizeClass
from .image_record import SourceImage, Variant
from .variant_encoder import VariantEncoder
from .manifest import Manifest, ManifestLoadError, load_manifest
from .scanner import Scanner
from .build_stats import BuildStats
from .build_progress import BuildProgress
from .builder import ManifestBuilder
from .resolver import Resolution, ResolutionKind, VariantResolver
from .reporter import Reporter

__all__ = [
    "BuildConfig",
    "SizeClass",
    "SourceImage",
    "Variant",
    "VariantEncoder",
    "Manifest",
    "ManifestLoadError",
    "load_manifest",
    "Scanner",
    "BuildStats",
    "BuildProgress",
    "ManifestBuilder",
    "Resolution",
    "ResolutionKind",
    "VariantResolver",
    "Reporter",
]
