"""
BuildStats - Statistics for a build run.
"""

import time
from dataclasses import dataclass, field
from typing import List


@dataclass
class BuildStats:
    """
    Statistics for a build run.

    Attributes:
        total_to_process: Source images found
        processed: Source images rendered without error
        skipped: Source images not processed (stop requested or limit)
        errors: Error messages, one per failed image or variant
        failed_images: Source images with at least one error
        variants_written: Variant files written
        original_bytes: Total size of processed source images
        optimized_bytes: Total size of written variants
        roots: Root directories scanned
        skipped_roots: Root directories that could not be used
        start_time: Start timestamp
    """
    total_to_process: int = 0
    processed: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)
    failed_images: int = 0
    variants_written: int = 0
    original_bytes: int = 0
    optimized_bytes: int = 0
    roots: List[str] = field(default_factory=list)
    skipped_roots: List[str] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def failed(self) -> bool:
        """True if any per-file error occurred."""
        return bool(self.errors)

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def rate_per_second(self) -> float:
        """Processing rate in images per second."""
        if self.elapsed_seconds > 0:
            return self.processed / self.elapsed_seconds
        return 0.0

    @property
    def rate_per_minute(self) -> float:
        """Processing rate in images per minute."""
        return self.rate_per_second * 60

    @property
    def estimated_remaining_seconds(self) -> float:
        """Estimated time remaining in seconds."""
        if self.rate_per_second > 0:
            return self.remaining_count / self.rate_per_second
        return 0.0

    @property
    def completed_count(self) -> int:
        """Source images finished (processed + failed + skipped)."""
        return self.processed + self.failed_images + self.skipped

    @property
    def remaining_count(self) -> int:
        return self.total_to_process - self.completed_count

    @property
    def average_variant_bytes(self) -> float:
        if self.variants_written == 0:
            return 0.0
        return self.optimized_bytes / self.variants_written

    @property
    def savings_bytes(self) -> float:
        """Bytes saved per image on average variant size versus the originals."""
        if self.variants_written == 0:
            return 0.0
        images = self.processed + self.failed_images
        return self.original_bytes - self.average_variant_bytes * images

    @property
    def savings_percent(self) -> float:
        if self.original_bytes == 0:
            return 0.0
        return self.savings_bytes / self.original_bytes * 100

    def to_summary(self) -> dict:
        """Counts stored in the manifest."""
        return {
            'processed': self.processed,
            'errors': self.error_count,
            'variants': self.variants_written,
            'original_bytes': self.original_bytes,
            'optimized_bytes': self.optimized_bytes,
        }
