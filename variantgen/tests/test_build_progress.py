"""Tests for BuildProgress class."""

import logging

from variantgen.build_progress import BuildProgress
from variantgen.build_stats import BuildStats
from variantgen.image_record import SourceImage, Variant


def make_variants():
    source = 'assets/images/logo.png'
    return [
        Variant(source, 'small', 'webp', 'assets/images/optimized/logo-small.webp', 400, 300, 900),
        Variant(source, 'small', 'jpg', 'assets/images/optimized/logo-small.jpg', 400, 300, 1500),
    ]


class TestBuildProgress:
    """Tests for BuildProgress class."""

    def test_init_defaults(self, logger):
        """Test default initialization."""
        progress = BuildProgress(logger=logger)

        assert progress.show_files is False
        assert progress.log_interval == 25

    def test_on_image_processed_show_files(self, logger, capsys):
        """Test per-image output marks the smallest variant."""
        progress = BuildProgress(show_files=True, logger=logger)
        source = SourceImage.from_path('assets/images/logo.png', size_bytes=4096)

        progress.on_image_processed(source, make_variants(), success=True)

        out = capsys.readouterr().out
        assert '[OK] assets/images/logo.png' in out
        assert '* logo-small.webp' in out
        assert '* logo-small.jpg' not in out

    def test_on_image_processed_error(self, logger, capsys):
        progress = BuildProgress(show_files=True, logger=logger)
        source = SourceImage.from_path('assets/images/broken.jpg')

        progress.on_image_processed(source, [], success=False, error='cannot identify image')

        out = capsys.readouterr().out
        assert 'ERROR' in out
        assert 'cannot identify image' in out

    def test_quiet_without_show_files(self, logger, capsys):
        progress = BuildProgress(logger=logger)
        source = SourceImage.from_path('assets/images/logo.png')

        progress.on_image_processed(source, make_variants(), success=True)

        assert capsys.readouterr().out == ''

    def test_on_dry_run_show_files(self, logger, capsys):
        progress = BuildProgress(show_files=True, logger=logger)

        progress.on_dry_run(SourceImage.from_path('assets/images/logo.png'), ['a', 'b'])

        assert 'DRY RUN' in capsys.readouterr().out

    def test_progress_update_logs_at_interval(self, logger, caplog):
        """Test summary progress is logged once per interval with an estimate."""
        progress = BuildProgress(log_interval=10, logger=logger)
        stats = BuildStats(total_to_process=20)
        stats.processed = 5

        with caplog.at_level(logging.INFO, logger=logger.name):
            progress.on_progress_update(stats)
            stats.processed = 10
            progress.on_progress_update(stats)

        assert progress.last_logged == 10
        assert len(caplog.records) == 1
        assert '10 left' in caplog.text
