"""
Reporter - Generates human-readable reports from build stats and manifests.
"""

import logging
import sys
from collections import OrderedDict
from typing import Dict, Optional, TextIO

from .build_stats import BuildStats
from .conventions import match_prefix
from .manifest import Manifest


class Reporter:
    """
    Generates human-readable reports from build stats and manifest data.
    """

    def __init__(
        self,
        output: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reporter.

        Args:
            output: Output stream (default: stdout)
            logger: Optional logger instance
        """
        self.output = output or sys.stdout
        self.logger = logger or logging.getLogger(__name__)

    def _print(self, text: str = "") -> None:
        """Print to output stream."""
        print(text, file=self.output)

    def _format_bytes(self, bytes_val: float) -> str:
        """Format bytes as human-readable string."""
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if abs(bytes_val) < 1024:
                return f"{bytes_val:.1f} {unit}"
            bytes_val /= 1024
        return f"{bytes_val:.1f} PB"

    def _format_duration(self, seconds: float) -> str:
        """Format duration as human-readable string."""
        if seconds < 60:
            return f"{seconds:.1f} seconds"
        elif seconds < 3600:
            return f"{seconds / 60:.1f} minutes"
        else:
            return f"{seconds / 3600:.1f} hours"

    def report_build(self, stats: BuildStats) -> None:
        """Print the end-of-build summary."""
        self._print("=" * 60)
        self._print("IMAGE VARIANT BUILD SUMMARY")
        self._print("=" * 60)
        self._print(f"  Roots:              {len(stats.roots)}")
        if stats.skipped_roots:
            self._print(f"  Skipped roots:      {', '.join(stats.skipped_roots)}")
        self._print(f"  Images processed:   {stats.processed:,}")
        self._print(f"  Images failed:      {stats.failed_images:,}")
        self._print(f"  Variants written:   {stats.variants_written:,}")
        self._print(f"  Errors:             {stats.error_count:,}")
        self._print(f"  Original size:      {self._format_bytes(stats.original_bytes)}")
        self._print(f"  Variants size:      {self._format_bytes(stats.optimized_bytes)}")

        if stats.original_bytes > 0 and stats.variants_written > 0:
            self._print(
                f"  Savings per image:  {self._format_bytes(stats.savings_bytes)} "
                f"({stats.savings_percent:.1f}%)"
            )
        self._print(f"  Time:               {self._format_duration(stats.elapsed_seconds)}")

        if stats.errors:
            self._print()
            self._print("Errors:")
            for message in stats.errors:
                self._print(f"  - {message}")
        self._print()

    def _group_by_root(self, manifest: Manifest) -> Dict[str, Dict[str, int]]:
        groups: Dict[str, Dict[str, int]] = OrderedDict()
        expected = manifest.expected_variants_per_image

        for source_path in sorted(manifest.images):
            directory = source_path.rsplit('/', 1)[0] if '/' in source_path else ''
            root = match_prefix(directory) or '(other)'
            group = groups.setdefault(root, {'images': 0, 'variants': 0, 'expected': 0, 'incomplete': 0})
            present = sum(len(f) for f in manifest.variants_for(source_path).values())
            group['images'] += 1
            group['variants'] += present
            group['expected'] += expected
            if manifest.missing_variants(source_path):
                group['incomplete'] += 1

        return groups

    def report_summary(self, manifest: Manifest) -> None:
        """Generate a summary report."""
        self._print("=" * 70)
        self._print("IMAGE VARIANT MANIFEST SUMMARY")
        self._print("=" * 70)
        self._print()

        self._print("Manifest Information:")
        self._print(f"  Generated:   {manifest.generated}")
        self._print(f"  Age:         {manifest.age_hours:.1f} hours")
        sizes = ', '.join(
            f"{s.name} ({s.width}x{s.height})" if not s.is_original else s.name
            for s in manifest.sizes
        )
        self._print(f"  Sizes:       {sizes}")
        self._print(f"  Formats:     {', '.join(manifest.formats)}")
        self._print()

        if manifest.is_stale():
            self._print("WARNING: Manifest is older than 24 hours!")
            self._print("   Consider re-running build to regenerate variants.")
            self._print()

        self._print("Overall Statistics:")
        self._print(f"  Total Images:         {manifest.total_images:,}")
        self._print(f"  Total Variants:       {manifest.total_variants:,}")
        self._print(f"  Incomplete Images:    {manifest.total_incomplete:,}")
        stats = manifest.stats
        if stats:
            self._print(f"  Build Errors:         {stats.get('errors', 0):,}")
            self._print(f"  Original Size:        {self._format_bytes(stats.get('original_bytes', 0))}")
            self._print(f"  Variants Size:        {self._format_bytes(stats.get('optimized_bytes', 0))}")
        self._print()

        self._print("Roots:")
        self._print("-" * 70)
        self._print(f"{'Root':<32} {'Images':>8} {'Variants':>10} {'Incomplete':>10} {'Coverage':>8}")
        self._print("-" * 70)
        for root, group in self._group_by_root(manifest).items():
            coverage = (group['variants'] / group['expected'] * 100) if group['expected'] else 100.0
            self._print(
                f"{root:<32} {group['images']:>8,} {group['variants']:>10,} "
                f"{group['incomplete']:>10,} {coverage:>7.1f}%"
            )
        self._print("-" * 70)
        self._print()

    def report_missing(self, manifest: Manifest) -> None:
        """List images missing variants of the configured size/format cross product."""
        self._print("=" * 70)
        self._print("MISSING VARIANTS")
        self._print("=" * 70)
        self._print()

        count = 0
        for source_path in sorted(manifest.images):
            missing = manifest.missing_variants(source_path)
            if not missing:
                continue
            count += 1
            labels = ', '.join(f"{size}.{fmt}" for size, fmt in missing)
            self._print(f"  {source_path}")
            self._print(f"    missing: {labels}")

        if count == 0:
            self._print("  All images have every configured variant.")
        else:
            self._print()
            self._print(f"  {count:,} of {manifest.total_images:,} images incomplete")
        self._print()
