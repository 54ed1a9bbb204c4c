"""
Tests for SourceImage and Variant.
"""

from variantgen.image_record import SourceImage, Variant, format_bytes


class TestSourceImage:
    """Tests for SourceImage dataclass."""

    def test_from_path(self):
        """Test splitting a logical path."""
        source = SourceImage.from_path('manuais/sox406/images/equipment/sox406-main.jpg', size_bytes=2048)

        assert source.directory == 'manuais/sox406/images/equipment'
        assert source.base_name == 'sox406-main'
        assert source.extension == '.jpg'
        assert source.filename == 'sox406-main.jpg'
        assert source.size_bytes == 2048

    def test_identity_is_path(self):
        """Test two records for the same path compare equal."""
        assert SourceImage.from_path('assets/images/a.png') == SourceImage.from_path('assets/images/a.png')

    def test_variant_path(self):
        """Test convention path for a variant."""
        source = SourceImage.from_path('assets/images/icons/logo.png')

        assert source.variant_path('thumbnail', 'webp') == 'assets/images/optimized/icons/logo-thumbnail.webp'


class TestVariant:
    """Tests for Variant dataclass."""

    def test_unrendered_defaults(self):
        """Test a catalogued variant without dimensions omits them from its status."""
        variant = Variant(
            source_path='assets/images/logo.png',
            size='small',
            format='webp',
            path='assets/images/optimized/logo-small.webp',
            bytes=2048,
        )

        assert variant.width is None
        assert variant.format_status() == 'logo-small.webp (2.0 KB)'

    def test_format_status(self):
        """Test one-line status."""
        variant = Variant(
            source_path='assets/images/logo.png',
            size='small',
            format='webp',
            path='assets/images/optimized/logo-small.webp',
            width=400,
            height=300,
            bytes=2048,
        )

        assert variant.format_status() == 'logo-small.webp 400x300 (2.0 KB)'


def test_format_bytes():
    assert format_bytes(None) == 'unknown'
    assert format_bytes(500) == '500.0 B'
    assert format_bytes(1024 * 1024) == '1.0 MB'
