"""
BuildProgress - Tracks and displays build progress.
"""

import logging
from typing import List, Optional

from .build_stats import BuildStats
from .image_record import SourceImage, Variant, format_bytes


class BuildProgress:
    """
    Tracks and displays build progress with optional per-file output.
    """

    def __init__(
        self,
        show_files: bool = False,
        log_interval: int = 25,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize progress tracker.

        Args:
            show_files: If True, print each image and its variants as processed
            log_interval: Log summary progress every N images (when not show_files)
            logger: Optional logger instance
        """
        self.show_files = show_files
        self.log_interval = log_interval
        self.logger = logger or logging.getLogger(__name__)
        self.last_logged = 0

    def on_root_start(self, root: str, image_count: int) -> None:
        """Called when starting to process a root directory."""
        if self.show_files:
            print(f"\n=== {root}: {image_count} images ===")
        else:
            self.logger.info(f"Processing {root}: {image_count} images")

    def on_image_processed(
        self,
        source: SourceImage,
        variants: List[Variant],
        success: bool,
        error: Optional[str] = None
    ) -> None:
        """
        Called when a source image is processed.

        Args:
            source: The source image
            variants: Variants written for it
            success: Whether every variant was written
            error: First error message (if failed)
        """
        if not self.show_files:
            return

        if success:
            print(f"  [OK] {source.path} ({format_bytes(source.size_bytes)})")
        else:
            print(f"  [ERROR] {source.path} -> {error or 'failed'}")

        if variants:
            best = min(variants, key=lambda v: v.bytes)
            for variant in variants:
                marker = '*' if variant is best else ' '
                print(f"     {marker} {variant.format_status()}")

    def on_dry_run(self, source: SourceImage, variant_paths: List[str]) -> None:
        """Called in dry-run mode."""
        if self.show_files:
            print(f"  [DRY RUN] {source.path} -> would write {len(variant_paths)} variants")

    def on_progress_update(self, stats: BuildStats) -> None:
        """
        Called after each image to report overall progress.

        Args:
            stats: Current build statistics
        """
        total_done = stats.completed_count

        if not self.show_files and total_done - self.last_logged >= self.log_interval:
            self.last_logged = total_done
            self.logger.info(
                f"Progress: {stats.processed} images, {stats.variants_written} variants, "
                f"{stats.error_count} errors ({stats.rate_per_minute:.1f}/min, "
                f"{stats.remaining_count} left, ~{stats.estimated_remaining_seconds:.0f}s)"
            )
