"""
ManifestBuilder - Renders every source image into its variants and writes the manifest.
"""

import logging
import os
from typing import Dict, List, Optional, Tuple

from .build_config import BuildConfig
from .build_progress import BuildProgress
from .build_stats import BuildStats
from .image_record import SourceImage, Variant
from .manifest import Manifest
from .scanner import Scanner
from .variant_encoder import VariantEncoder


class ManifestBuilder:
    """
    Builds size x format variants for all source images and emits a manifest.

    Images are processed sequentially. A failure on one image or variant is
    logged and recorded in the stats; the batch always runs to completion.
    """

    def __init__(
        self,
        config: BuildConfig,
        encoder: Optional[VariantEncoder] = None,
        scanner: Optional[Scanner] = None,
        dry_run: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize builder.

        Args:
            config: Build configuration
            encoder: Variant encoder (default: one using config.quality)
            scanner: Source scanner (default: one using config)
            dry_run: If True, compute paths but write nothing
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.encoder = encoder or VariantEncoder(config.quality, logger=self.logger)
        self.scanner = scanner or Scanner(config, logger=self.logger)
        self.dry_run = dry_run
        self.stats = BuildStats()
        self.manifest: Optional[Manifest] = None
        self._written_by: Dict[str, str] = {}
        self._stop_requested = False

    def stop(self) -> None:
        """Request the builder to stop after the current image."""
        self._stop_requested = True

    def build(
        self,
        target_dir: Optional[str] = None,
        progress: Optional[BuildProgress] = None,
        limit: Optional[int] = None
    ) -> BuildStats:
        """
        Render variants for all source images and write the manifest.

        Args:
            target_dir: Optional single directory to process instead of all roots
            progress: Optional progress tracker
            limit: Optional limit on number of source images (for testing)

        Returns:
            BuildStats with results; ``errors`` lists every per-file failure
        """
        self.stats = BuildStats()
        self.manifest = Manifest.create_new(self.config.sizes, self.config.formats)
        self._written_by = {}

        if self._stop_requested:
            self.logger.info("Stop was requested before build started")
            return self.stats

        work: List[Tuple[str, List[SourceImage]]] = []
        try:
            roots = self.scanner.discover_roots(target_dir)
        except OSError as e:
            self.logger.error(f"Failed to discover image roots: {e}")
            roots = []
        self.stats.skipped_roots = list(self.scanner.skipped_roots)

        for root in roots:
            try:
                sources = list(self.scanner.list_sources(root))
            except OSError as e:
                self.logger.warning(f"Skipping root {root}: {e}")
                self.stats.skipped_roots.append(root)
                continue
            self.stats.roots.append(root)
            work.append((root, sources))

        if limit:
            limited = []
            remaining = limit
            for root, sources in work:
                if remaining <= 0:
                    break
                limited.append((root, sources[:remaining]))
                remaining -= len(sources[:remaining])
            work = limited

        self.stats.total_to_process = sum(len(sources) for _, sources in work)

        mode_str = " [DRY RUN]" if self.dry_run else ""
        limit_str = f" (limited to {limit})" if limit else ""
        self.logger.info(
            f"Starting build: {self.stats.total_to_process} images x "
            f"{len(self.config.sizes)} sizes x {len(self.config.formats)} formats{mode_str}{limit_str}"
        )

        for root, sources in work:
            if self._stop_requested:
                break
            if progress:
                progress.on_root_start(root, len(sources))
            else:
                self.logger.info(f"Processing directory: {root} ({len(sources)} images)")

            for source in sources:
                if self._stop_requested:
                    self.logger.info("Stop requested, halting build")
                    break
                self._process_image(source, progress)
                if progress:
                    progress.on_progress_update(self.stats)

        self.stats.skipped = self.stats.remaining_count
        self.manifest.stats = self.stats.to_summary()

        if not self.dry_run:
            self._write_manifest()

        self.logger.info(
            f"Build complete: {self.stats.processed} images, "
            f"{self.stats.variants_written} variants, {self.stats.error_count} errors "
            f"({self.stats.elapsed_seconds:.1f}s)"
        )

        return self.stats

    def _process_image(
        self,
        source: SourceImage,
        progress: Optional[BuildProgress]
    ) -> bool:
        """Render and write every configured variant of one source image."""
        if self.dry_run:
            paths = [
                source.variant_path(size.name, fmt)
                for size in self.config.sizes
                for fmt in self.config.formats
            ]
            if progress:
                progress.on_dry_run(source, paths)
            else:
                self.logger.info(f"[DRY RUN] Would write {len(paths)} variants for {source.path}")
            self.stats.processed += 1
            return True

        try:
            self.logger.debug(f"Reading: {source.path}")
            with open(self.config.resolve_path(source.path), 'rb') as f:
                image_data = f.read()
            img = self.encoder.open_image(image_data)
        except Exception as e:
            self._record_error(f"Error processing {source.path}: {e}")
            self.stats.failed_images += 1
            if progress:
                progress.on_image_processed(source, [], success=False, error=str(e))
            return False

        self.stats.original_bytes += len(image_data)
        written: List[Variant] = []
        first_error: Optional[str] = None

        for size in self.config.sizes:
            for fmt in self.config.formats:
                rel_path = source.variant_path(size.name, fmt)
                owner = self._written_by.get(rel_path)
                if owner is not None:
                    # Sources sharing a base name in one directory map to the same variant file
                    message = f"Variant path collision: {rel_path} already written for {owner}"
                    self._record_error(message)
                    first_error = first_error or message
                    continue
                try:
                    data, _, (width, height) = self.encoder.render(img, size, fmt)
                    full_path = self.config.resolve_path(rel_path)
                    os.makedirs(os.path.dirname(full_path), exist_ok=True)
                    with open(full_path, 'wb') as f:
                        f.write(data)
                except Exception as e:
                    message = f"Error writing {rel_path}: {e}"
                    self._record_error(message)
                    first_error = first_error or str(e)
                    continue

                variant = Variant(
                    source_path=source.path,
                    size=size.name,
                    format=fmt,
                    path=rel_path,
                    width=width,
                    height=height,
                    bytes=len(data),
                )
                self.manifest.add_variant(variant)
                self._written_by[rel_path] = source.path
                written.append(variant)
                self.stats.variants_written += 1
                self.stats.optimized_bytes += len(data)

        success = first_error is None
        if success:
            self.stats.processed += 1
        else:
            self.stats.failed_images += 1

        if progress:
            progress.on_image_processed(source, written, success=success, error=first_error)
        else:
            self.logger.info(
                f"Processed: {source.path} ({len(written)} variants) "
                f"[{self.stats.completed_count}/{self.stats.total_to_process}]"
            )

        return success

    def _record_error(self, message: str) -> None:
        self.logger.error(message)
        self.stats.errors.append(message)

    def _write_manifest(self) -> None:
        try:
            self.manifest.save(self.config.manifest_file)
            self.logger.info(f"Manifest saved to: {self.config.manifest_path}")
        except OSError as e:
            self._record_error(f"Error writing manifest {self.config.manifest_path}: {e}")
