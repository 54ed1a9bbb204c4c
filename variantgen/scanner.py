"""
Scanner - Discovers source images and catalogues existing variants.
"""

import logging
import os
import time
from typing import Iterator, List, Optional

from .build_config import BuildConfig
from .conventions import is_optimized, optimized_dir
from .image_record import SourceImage, Variant
from .manifest import Manifest


class Scanner:
    """
    Enumerates image roots and source images below a site root.

    Roots are the assets image directory plus every ``<manual>/images``
    directory under the manuals directory. Paths handed out are
    root-relative posix strings.
    """

    IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.bmp', '.tif', '.tiff'}

    def __init__(
        self,
        config: BuildConfig,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize scanner.

        Args:
            config: Build configuration (root, assets_dir, manuals_dir)
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.skipped_roots: List[str] = []

    @staticmethod
    def normalize(relative: str) -> str:
        """Normalize a user-supplied relative path to posix form without ./ or trailing /."""
        path = relative.replace(os.sep, '/').strip('/')
        while path.startswith('./'):
            path = path[2:]
        return path

    def discover_roots(self, target_dir: Optional[str] = None) -> List[str]:
        """
        List root directories to process.

        Missing roots are skipped silently. Roots outside the optimized-directory
        convention, or already inside an optimized directory, are skipped with a
        warning and listed in ``skipped_roots``.

        Args:
            target_dir: Optional single directory (relative to root) to process instead

        Returns:
            Sorted list of root-relative directories
        """
        self.skipped_roots = []

        if target_dir:
            candidates = [self.normalize(target_dir)]
        else:
            candidates = [self.normalize(self.config.assets_dir)]
            candidates.extend(self._manual_image_dirs())

        roots = []
        for root in candidates:
            if not os.path.isdir(self.config.resolve_path(root)):
                self.logger.debug(f"Root not found, skipping: {root}")
                continue
            if optimized_dir(root) is None:
                self.logger.warning(f"Not an image root (no optimized directory convention): {root}")
                self.skipped_roots.append(root)
                continue
            if is_optimized(root):
                self.logger.warning(f"Skipping optimized output directory: {root}")
                self.skipped_roots.append(root)
                continue
            roots.append(root)

        return roots

    def _manual_image_dirs(self) -> List[str]:
        manuals_dir = self.normalize(self.config.manuals_dir)
        manuals_path = self.config.resolve_path(manuals_dir)
        try:
            entries = sorted(os.listdir(manuals_path))
        except FileNotFoundError:
            return []
        except OSError as e:
            self.logger.warning(f"Cannot list manuals directory {manuals_dir}: {e}")
            return []

        dirs = []
        for name in entries:
            if os.path.isdir(os.path.join(manuals_path, name)):
                dirs.append(f"{manuals_dir}/{name}/images")
        return dirs

    def list_sources(self, root: str) -> Iterator[SourceImage]:
        """
        Yield every source image below a root, in sorted order.

        The root's optimized subtree is never descended into. Files with
        unrecognized extensions are ignored.
        """
        root_path = self.config.resolve_path(root)

        def on_error(error: OSError) -> None:
            self.logger.warning(f"Cannot read directory {error.filename}: {error.strerror}")

        for dirpath, dirnames, filenames in os.walk(root_path, onerror=on_error):
            rel_dir = os.path.relpath(dirpath, root_path).replace(os.sep, '/')
            rel_dir = root if rel_dir == '.' else f"{root}/{rel_dir}"

            dirnames[:] = sorted(
                d for d in dirnames
                if not is_optimized(f"{rel_dir}/{d}")
            )

            for filename in sorted(filenames):
                ext = os.path.splitext(filename)[1].lower()
                if ext not in self.IMAGE_EXTENSIONS:
                    continue
                try:
                    size = os.path.getsize(os.path.join(dirpath, filename))
                except OSError:
                    size = 0
                yield SourceImage.from_path(f"{rel_dir}/{filename}", size_bytes=size)

    def scan(
        self,
        target_dir: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Manifest:
        """
        Build a manifest from variants already present on disk.

        Nothing is encoded; each configured size/format is recorded only if
        its convention path exists.

        Args:
            target_dir: Optional single directory to scan
            limit: Optional limit on number of source images (for testing)

        Returns:
            Manifest of existing variants
        """
        start_time = time.time()
        manifest = Manifest.create_new(self.config.sizes, self.config.formats)
        count = 0
        variants = 0
        original_bytes = 0
        optimized_bytes = 0

        for root in self.discover_roots(target_dir):
            self.logger.info(f"Scanning {root}")
            for source in self.list_sources(root):
                if limit and count >= limit:
                    break
                manifest.add_source(source.path)
                original_bytes += source.size_bytes
                count += 1

                for size in self.config.sizes:
                    for fmt in self.config.formats:
                        path = source.variant_path(size.name, fmt)
                        full_path = self.config.resolve_path(path)
                        if not os.path.isfile(full_path):
                            continue
                        nbytes = os.path.getsize(full_path)
                        manifest.add_variant(Variant(
                            source_path=source.path,
                            size=size.name,
                            format=fmt,
                            path=path,
                            bytes=nbytes,
                        ))
                        variants += 1
                        optimized_bytes += nbytes

        manifest.stats = {
            'processed': count,
            'errors': 0,
            'variants': variants,
            'original_bytes': original_bytes,
            'optimized_bytes': optimized_bytes,
        }

        self.logger.info(
            f"Scan complete: {manifest.total_images} images, {variants} variants, "
            f"{manifest.total_incomplete} incomplete ({time.time() - start_time:.1f}s)"
        )
        return manifest
