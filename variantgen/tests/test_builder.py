"""Tests for ManifestBuilder class."""

import json
import os
from unittest.mock import MagicMock

import pytest

from variantgen.build_config import SizeClass
from variantgen.build_progress import BuildProgress
from variantgen.builder import ManifestBuilder
from variantgen.manifest import Manifest
from variantgen.variant_encoder import VariantEncoder


def list_variant_files(root):
    """All files below any optimized directory, relative to root."""
    found = set()
    for dirpath, _, filenames in os.walk(root):
        rel = os.path.relpath(dirpath, root).replace(os.sep, '/')
        if '/optimized' not in f"/{rel}":
            continue
        for filename in filenames:
            found.add(f"{rel}/{filename}")
    return found


class TestManifestBuilder:
    """Tests for ManifestBuilder class."""

    def test_init(self, build_config, logger):
        """Test ManifestBuilder initialization."""
        builder = ManifestBuilder(build_config, dry_run=True, logger=logger)

        assert builder.dry_run is True
        assert isinstance(builder.encoder, VariantEncoder)

    def test_build_writes_cross_product(self, build_config, logger):
        """Test 3 images x 2 sizes x 2 formats gives 12 files and a 3-entry manifest."""
        builder = ManifestBuilder(build_config, logger=logger)

        stats = builder.build()

        assert stats.processed == 3
        assert stats.errors == []
        assert stats.variants_written == 12
        assert len(list_variant_files(build_config.root)) == 12

        manifest = Manifest.load(build_config.manifest_file)
        assert len(manifest.images) == 3
        for entry in manifest.images.values():
            assert set(entry['variants']) == {'small', 'medium'}
            for formats in entry['variants'].values():
                assert set(formats) == {'webp', 'jpg'}

    def test_build_uses_convention_paths(self, build_config, logger):
        """Test variants land in the optimized directory with the expected names."""
        builder = ManifestBuilder(build_config, logger=logger)

        builder.build()

        path = builder.manifest.get_variant_path(
            'manuais/sox406/images/equipment/sox406-main.jpg', 'medium', 'webp'
        )
        assert path == 'manuais/sox406/images/optimized/equipment/sox406-main-medium.webp'
        assert os.path.isfile(build_config.resolve_path(path))

    def test_manifest_paths_exist(self, build_config, logger):
        """Test every manifest entry points at a written file."""
        builder = ManifestBuilder(build_config, logger=logger)
        builder.build()

        for source_path, entry in builder.manifest.images.items():
            for formats in entry['variants'].values():
                for path in formats.values():
                    assert os.path.isfile(build_config.resolve_path(path))

    def test_build_is_idempotent(self, build_config, logger):
        """Test a second build gives the same manifest (except timestamp) and files."""
        builder = ManifestBuilder(build_config, logger=logger)

        builder.build()
        with open(build_config.manifest_file) as f:
            first = json.load(f)
        first_files = list_variant_files(build_config.root)

        builder.build()
        with open(build_config.manifest_file) as f:
            second = json.load(f)

        first.pop('generated')
        second.pop('generated')
        assert first == second
        assert list_variant_files(build_config.root) == first_files

    def test_build_stats(self, build_config, logger):
        """Test byte totals and manifest summary."""
        builder = ManifestBuilder(build_config, logger=logger)

        stats = builder.build()

        assert stats.original_bytes > 0
        assert stats.optimized_bytes > 0
        assert stats.roots == ['assets/images', 'manuais/sox406/images']
        assert builder.manifest.stats['processed'] == 3
        assert builder.manifest.stats['errors'] == 0

    def test_corrupt_image_does_not_abort(self, build_config, logger):
        """Test a broken source is counted and the batch continues."""
        broken = os.path.join(build_config.root, 'assets', 'images', 'broken.jpg')
        with open(broken, 'wb') as f:
            f.write(b'not an image')

        builder = ManifestBuilder(build_config, logger=logger)
        stats = builder.build()

        assert stats.processed == 3
        assert stats.failed_images == 1
        assert len(stats.errors) == 1
        assert 'broken.jpg' in stats.errors[0]
        assert 'assets/images/broken.jpg' not in builder.manifest.images
        assert os.path.isfile(build_config.manifest_file)

    def test_shared_base_name_is_not_overwritten(self, build_config, logger, write_image):
        """Test a second source with the same base name cannot replace the first one's variants."""
        from PIL import Image

        write_image(os.path.join(build_config.root, 'assets', 'images', 'logo.jpg'),
                    size=(1000, 500), image_format='JPEG')
        builder = ManifestBuilder(build_config, logger=logger)

        stats = builder.build()

        assert stats.failed_images == 1
        assert len(stats.errors) == 4
        assert all('collision' in message for message in stats.errors)
        assert builder.manifest.get_variant_path('assets/images/logo.jpg', 'small', 'webp') == \
            'assets/images/optimized/logo-small.webp'
        assert len(builder.manifest.missing_variants('assets/images/logo.png')) == 4
        with Image.open(build_config.resolve_path('assets/images/optimized/logo-small.webp')) as img:
            assert img.size == (400, 200)

    def test_variant_failure_records_partial(self, build_config, logger, mocker):
        """Test one failing format is recorded while other variants are kept."""
        encoder = VariantEncoder()
        real_render = encoder.render

        def flaky_render(img, size, fmt):
            if fmt == 'jpg' and size.name == 'medium':
                raise OSError('disk full')
            return real_render(img, size, fmt)

        mocker.patch.object(encoder, 'render', side_effect=flaky_render)
        builder = ManifestBuilder(build_config, encoder=encoder, logger=logger)

        stats = builder.build()

        assert stats.failed_images == 3
        assert len(stats.errors) == 3
        assert stats.variants_written == 9
        assert builder.manifest.missing_variants('assets/images/logo.png') == [('medium', 'jpg')]

    def test_dry_run(self, build_config, logger):
        """Test dry run writes nothing."""
        builder = ManifestBuilder(build_config, dry_run=True, logger=logger)

        stats = builder.build()

        assert stats.processed == 3
        assert list_variant_files(build_config.root) == set()
        assert not os.path.exists(build_config.manifest_file)

    def test_target_dir(self, build_config, logger):
        """Test restricting the build to one directory."""
        builder = ManifestBuilder(build_config, logger=logger)

        stats = builder.build(target_dir='manuais/sox406/images')

        assert stats.processed == 1
        assert list(builder.manifest.images) == ['manuais/sox406/images/equipment/sox406-main.jpg']

    def test_missing_roots_are_not_errors(self, tmp_path, build_config, logger):
        """Test an empty site builds an empty manifest without errors."""
        build_config.root = str(tmp_path)
        builder = ManifestBuilder(build_config, logger=logger)

        stats = builder.build()

        assert stats.processed == 0
        assert stats.errors == []
        assert Manifest.load(build_config.manifest_file).images == {}

    def test_limit(self, build_config, logger):
        """Test limit caps the number of images."""
        builder = ManifestBuilder(build_config, logger=logger)

        stats = builder.build(limit=2)

        assert stats.processed == 2
        assert stats.total_to_process == 2

    def test_original_size_class(self, build_config, logger):
        """Test the unbounded size keeps source resolution."""
        from PIL import Image

        build_config.sizes = [SizeClass('original')]
        build_config.formats = ['png']
        builder = ManifestBuilder(build_config, logger=logger)
        builder.build()

        path = builder.manifest.get_variant_path('assets/images/banner.jpg', 'original', 'png')
        with Image.open(build_config.resolve_path(path)) as img:
            assert img.size == (1600, 800)

    def test_can_be_stopped(self, build_config, logger):
        """Test stopping before the build starts."""
        builder = ManifestBuilder(build_config, logger=logger)

        builder.stop()
        stats = builder.build()

        assert stats.processed == 0

    def test_progress_callbacks(self, build_config, logger):
        """Test progress is notified for every image."""
        progress = MagicMock(spec=BuildProgress)
        builder = ManifestBuilder(build_config, logger=logger)

        builder.build(progress=progress)

        assert progress.on_image_processed.call_count == 3
        assert progress.on_root_start.call_count == 2
        assert progress.on_progress_update.call_count == 3

    def test_manifest_write_failure_recorded(self, build_config, logger, mocker):
        """Test a failing manifest write is reported, not raised."""
        mocker.patch.object(Manifest, 'save', side_effect=PermissionError('read-only'))
        builder = ManifestBuilder(build_config, logger=logger)

        stats = builder.build()

        assert stats.failed is True
        assert 'manifest' in stats.errors[-1]


@pytest.mark.parametrize('fmt', ['webp', 'jpg', 'png'])
def test_each_format_decodes(build_config, logger, fmt):
    """Test written variants are valid images of the requested format."""
    from PIL import Image

    build_config.formats = [fmt]
    builder = ManifestBuilder(build_config, logger=logger)
    builder.build()

    path = builder.manifest.get_variant_path('assets/images/logo.png', 'small', fmt)
    with Image.open(build_config.resolve_path(path)) as img:
        assert img.format == {'webp': 'WEBP', 'jpg': 'JPEG', 'png': 'PNG'}[fmt]
        assert img.size == (300, 300)
