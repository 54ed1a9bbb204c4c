"""
Pytest fixtures for variantgen tests.
"""

import io
import os
from datetime import datetime, timedelta

import pytest


def _write_image(path, size=(1600, 1200), mode='RGB', color='red', image_format=None):
    """Write a generated image to ``path`` and return its path."""
    from PIL import Image

    os.makedirs(os.path.dirname(path), exist_ok=True)
    img = Image.new(mode, size, color=color)
    img.save(path, format=image_format)
    return path


@pytest.fixture
def sample_image_bytes():
    """Fixture providing sample JPEG image bytes."""
    from PIL import Image

    img = Image.new('RGB', (1000, 500), color='red')
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def sample_png_bytes():
    """Fixture providing sample PNG image bytes with transparency."""
    from PIL import Image

    img = Image.new('RGBA', (300, 300), color=(255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def site_root(tmp_path):
    """
    Fixture providing a site tree with three source images.

    assets/images/logo.png
    assets/images/banner.jpg
    manuais/sox406/images/equipment/sox406-main.jpg

    plus a non-image file and an empty manual without images.
    """
    root = tmp_path / 'site'
    _write_image(str(root / 'assets' / 'images' / 'logo.png'), size=(600, 600), mode='RGBA',
                 color=(0, 128, 255, 200))
    _write_image(str(root / 'assets' / 'images' / 'banner.jpg'), size=(1600, 800))
    _write_image(str(root / 'manuais' / 'sox406' / 'images' / 'equipment' / 'sox406-main.jpg'),
                 size=(1200, 900), color='green')
    (root / 'assets' / 'images' / 'README.txt').write_text('not an image')
    (root / 'manuais' / 'empty-manual').mkdir(parents=True)
    return str(root)


@pytest.fixture
def build_config(site_root):
    """Fixture providing a two-size, two-format build configuration."""
    from variantgen.build_config import BuildConfig, SizeClass

    return BuildConfig(
        root=site_root,
        sizes=[SizeClass('small', 400, 300), SizeClass('medium', 800, 600)],
        formats=['webp', 'jpg'],
    )


@pytest.fixture
def sample_manifest():
    """Fixture providing a manifest with one complete and one partial image."""
    from variantgen.build_config import SizeClass
    from variantgen.manifest import Manifest

    manifest = Manifest(
        generated=datetime.now().isoformat(),
        sizes=[SizeClass('small', 400, 300), SizeClass('medium', 800, 600)],
        formats=['webp', 'jpg'],
        stats={'processed': 2, 'errors': 0, 'variants': 5,
               'original_bytes': 300000, 'optimized_bytes': 90000},
    )
    manifest.images['manuais/sox406/images/equipment/sox406-main.jpg'] = {
        'original': 'manuais/sox406/images/equipment/sox406-main.jpg',
        'variants': {
            'small': {
                'webp': 'manuais/sox406/images/optimized/equipment/sox406-main-small.webp',
                'jpg': 'manuais/sox406/images/optimized/equipment/sox406-main-small.jpg',
            },
            'medium': {
                'webp': 'CUSTOM/PATH.webp',
                'jpg': 'manuais/sox406/images/optimized/equipment/sox406-main-medium.jpg',
            },
        },
    }
    manifest.images['assets/images/logo.png'] = {
        'original': 'assets/images/logo.png',
        'variants': {
            'small': {'webp': 'assets/images/optimized/logo-small.webp'},
        },
    }
    return manifest


@pytest.fixture
def stale_manifest(sample_manifest):
    """Fixture providing a stale manifest (>24 hours old)."""
    old_time = datetime.now() - timedelta(hours=48)
    sample_manifest.generated = old_time.isoformat()
    return sample_manifest


@pytest.fixture
def temp_manifest_file(sample_manifest, tmp_path):
    """Fixture providing a temporary manifest file."""
    filepath = tmp_path / 'manifest.json'
    sample_manifest.save(str(filepath))
    return str(filepath)


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')


@pytest.fixture
def write_image():
    """Fixture providing a helper that writes generated images to disk."""
    return _write_image
