"""
Optimized-directory convention shared by the builder, scanner and resolver.

Variants of ``assets/images/<sub>/foo.jpg`` live in
``assets/images/optimized/<sub>/``; variants of
``manuais/<manual>/images/<sub>/foo.jpg`` live in
``manuais/<manual>/images/optimized/<sub>/``.
"""

import posixpath
import re
from typing import Optional, Tuple

OPTIMIZED_SEGMENT = 'optimized'

# Prefix must end on a path-segment boundary ("assets/imagesX" is not a match)
PREFIX_PATTERN = re.compile(r'^(assets/images|manuais/[^/]+/images)(?=/|$)')


def _strip_leading_slash(path: str) -> Tuple[str, str]:
    if path.startswith('/'):
        return '/', path[1:]
    return '', path


def match_prefix(directory: str) -> Optional[str]:
    """Return the convention prefix ``directory`` starts with, or None."""
    _, rest = _strip_leading_slash(directory)
    match = PREFIX_PATTERN.match(rest)
    return match.group(1) if match else None


def is_optimized(directory: str) -> bool:
    """True if ``directory`` already lies inside an optimized directory."""
    _, rest = _strip_leading_slash(directory)
    match = PREFIX_PATTERN.match(rest)
    if not match:
        return False
    remainder = rest[match.end():]
    return remainder == f'/{OPTIMIZED_SEGMENT}' or remainder.startswith(f'/{OPTIMIZED_SEGMENT}/')


def optimized_dir(directory: str) -> Optional[str]:
    """
    Map a source directory to its optimized sibling directory.

    Args:
        directory: Repository-relative posix directory

    Returns:
        The directory with ``/optimized`` inserted right after the matched
        prefix, the directory unchanged if it is already optimized, or None
        if neither convention prefix applies.
    """
    lead, rest = _strip_leading_slash(directory.rstrip('/') or directory)
    match = PREFIX_PATTERN.match(rest)
    if not match:
        return None
    if is_optimized(rest):
        return lead + rest
    prefix = match.group(1)
    return f"{lead}{prefix}/{OPTIMIZED_SEGMENT}{rest[match.end():]}"


def split_logical_path(path: str) -> Tuple[str, str, str]:
    """
    Split a logical image path into (directory, base_name, extension).

    Total over any string: ``'a/b/'`` gives ``('a/b', '', '')`` and
    ``'a/x.tar.gz'`` gives ``('a', 'x.tar', '.gz')``.
    """
    directory, filename = posixpath.split(path)
    base_name, extension = posixpath.splitext(filename)
    return directory, base_name, extension


def variant_filename(base_name: str, size: str, fmt: str) -> str:
    """Filename of one variant: ``<base>-<size>.<fmt>``."""
    return f"{base_name}-{size}.{fmt}"


def variant_path(logical_path: str, size: str, fmt: str) -> Optional[str]:
    """Convention path of a variant, or None if no convention applies."""
    directory, base_name, _ = split_logical_path(logical_path)
    target_dir = optimized_dir(directory)
    if target_dir is None:
        return None
    return posixpath.join(target_dir, variant_filename(base_name, size, fmt))
