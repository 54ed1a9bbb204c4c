"""
Command Line Interface for image variant builds and lookups.
"""

import argparse
import logging
from typing import List, Optional

from .build_config import BuildConfig, SizeClass, parse_list, parse_quality
from .build_progress import BuildProgress
from .builder import ManifestBuilder
from .manifest import Manifest, ManifestLoadError
from .reporter import Reporter
from .resolver import VariantResolver
from .scanner import Scanner
from .variant_encoder import VariantEncoder


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    return logging.getLogger('variantgen')


def get_build_config(args: argparse.Namespace) -> BuildConfig:
    """Get build configuration from environment and CLI overrides."""
    config = BuildConfig.from_env()

    if getattr(args, 'root', None):
        config.root = args.root
    if getattr(args, 'sizes', None):
        config.sizes = [SizeClass.parse(s) for s in args.sizes.split(',') if s.strip()]
    if getattr(args, 'formats', None):
        config.formats = parse_list(args.formats)
    if getattr(args, 'quality', None):
        config.quality.update(parse_quality(args.quality))
    if getattr(args, 'manifest', None):
        config.manifest_path = args.manifest
    if getattr(args, 'fail_on_error', False):
        config.fail_on_error = True

    return config


def _load_config(args: argparse.Namespace, logger: logging.Logger) -> Optional[BuildConfig]:
    try:
        config = get_build_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return None

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return None
    return config


def cmd_build(args: argparse.Namespace) -> int:
    """Execute build command."""
    logger = setup_logging(args.verbose)

    config = _load_config(args, logger)
    if config is None:
        return 1

    logger.info(f"Root: {config.root}")
    logger.info(f"Sizes: {', '.join(s.name for s in config.sizes)}")
    logger.info(f"Formats: {', '.join(config.formats)}")
    logger.info(f"Manifest: {config.manifest_path}")

    if args.limit:
        logger.info(f"Test mode: limiting to {args.limit} images")

    try:
        builder = ManifestBuilder(
            config=config,
            encoder=VariantEncoder(config.quality, logger=logger),
            dry_run=args.dry_run,
            logger=logger,
        )

        progress = None
        if not args.quiet:
            progress = BuildProgress(show_files=args.show_files, logger=logger)

        stats = builder.build(target_dir=args.target_dir, progress=progress, limit=args.limit)

        if not args.quiet:
            print()
            Reporter().report_build(stats)

        if stats.failed and config.fail_on_error:
            logger.error(f"Build failed with {stats.error_count} errors")
            return 1
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"Build failed: {e}")
        return 1


def cmd_scan(args: argparse.Namespace) -> int:
    """Execute scan command: rebuild the manifest from existing variants."""
    logger = setup_logging(args.verbose)

    config = _load_config(args, logger)
    if config is None:
        return 1

    try:
        scanner = Scanner(config, logger)
        manifest = scanner.scan(target_dir=args.target_dir, limit=args.limit)

        output = args.output or config.manifest_file
        manifest.save(output)
        logger.info(f"Manifest saved to: {output}")

        if not args.quiet:
            print()
            Reporter().report_summary(manifest)

        return 0

    except Exception as e:
        logger.exception(f"Scan failed: {e}")
        return 1


def _read_manifest(path: str, logger: logging.Logger) -> Optional[Manifest]:
    try:
        return Manifest.load(path)
    except FileNotFoundError:
        logger.error(f"Manifest not found: {path}")
    except (ManifestLoadError, OSError) as e:
        logger.error(f"Failed to load manifest: {e}")
    return None


def cmd_report(args: argparse.Namespace) -> int:
    """Execute report command."""
    logger = setup_logging(args.verbose)

    manifest = _read_manifest(args.manifest, logger)
    if manifest is None:
        return 1

    reporter = Reporter()
    if args.type == 'summary':
        reporter.report_summary(manifest)
    elif args.type == 'missing':
        reporter.report_missing(manifest)

    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    """Execute resolve command."""
    logger = setup_logging(args.verbose)
    resolver = VariantResolver.from_source(args.manifest, logger=logger)

    for path in args.paths:
        resolution = resolver.resolve_detailed(path, args.size, args.format)
        if args.explain:
            print(f"{path} -> {resolution.path} [{resolution.kind.value}]")
        else:
            print(resolution.path)

    return 0


def cmd_markup(args: argparse.Namespace) -> int:
    """Execute markup command."""
    logger = setup_logging(args.verbose)
    resolver = VariantResolver.from_source(args.manifest, logger=logger)

    print(resolver.build_responsive_markup(
        args.path,
        alt=args.alt,
        sizes_attr=args.sizes_attr,
        css_class=args.css_class,
        lazy=not args.no_lazy,
    ))
    return 0


def add_config_arguments(parser: argparse.ArgumentParser) -> None:
    """Add build configuration arguments to a parser."""
    group = parser.add_argument_group('Configuration')
    group.add_argument('--root', metavar='PATH', help='Site root (default: VARIANTGEN_ROOT or .)')
    group.add_argument('--sizes', metavar='LIST',
                       help='Size classes, e.g. small:400x300,medium:800x600,original')
    group.add_argument('--formats', metavar='LIST', help='Output formats, e.g. webp,jpg')
    group.add_argument('--quality', metavar='LIST', help='Per-format quality, e.g. webp=80,jpg=85')
    group.add_argument('--target-dir', metavar='DIR',
                       help='Process a single image directory (relative to root)')
    group.add_argument('--limit', type=int, metavar='N', help='Limit to N images (for testing)')


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='variantgen',
        description='Responsive image variants and manifest for the manuals site',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Workflow:
  1. Build:    variantgen build --root site/
  2. Report:   variantgen report -m site/assets/images/manifest.json
  3. Resolve:  variantgen resolve -m site/assets/images/manifest.json assets/images/logo.png

Use 'scan' to rebuild the manifest from variants already on disk.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Build command
    build_parser = subparsers.add_parser('build', help='Render variants and write the manifest')
    build_parser.add_argument('-m', '--manifest', help='Manifest path relative to root')
    build_parser.add_argument('-n', '--dry-run', action='store_true', help='Show what would be done')
    build_parser.add_argument('--fail-on-error', action='store_true',
                              help='Exit non-zero if any image or variant fails')
    build_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress progress output')
    build_parser.add_argument('--show-files', action='store_true',
                              help='Print each image and its variants as processed')
    build_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_config_arguments(build_parser)

    # Scan command
    scan_parser = subparsers.add_parser('scan', help='Rebuild manifest from existing variants')
    scan_parser.add_argument('-o', '--output', help='Output manifest file (default: configured manifest)')
    scan_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress summary output')
    scan_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_config_arguments(scan_parser)

    # Report command
    report_parser = subparsers.add_parser('report', help='Generate reports from manifest')
    report_parser.add_argument('-m', '--manifest', required=True, help='Input manifest file')
    report_parser.add_argument('-t', '--type', choices=['summary', 'missing'],
                               default='summary', help='Report type')
    report_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    # Resolve command
    resolve_parser = subparsers.add_parser('resolve', help='Resolve image paths to variant paths')
    resolve_parser.add_argument('paths', nargs='+', metavar='PATH', help='Logical image path(s)')
    resolve_parser.add_argument('-m', '--manifest', help='Manifest file or URL')
    resolve_parser.add_argument('-s', '--size', default=VariantResolver.DEFAULT_SIZE,
                                help='Size class (default: medium)')
    resolve_parser.add_argument('-f', '--format', default=VariantResolver.DEFAULT_FORMAT,
                                help='Format (default: webp)')
    resolve_parser.add_argument('--explain', action='store_true',
                                help='Show whether each path came from the manifest or the convention')
    resolve_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    # Markup command
    markup_parser = subparsers.add_parser('markup', help='Print responsive <picture> markup')
    markup_parser.add_argument('path', metavar='PATH', help='Logical image path')
    markup_parser.add_argument('-m', '--manifest', help='Manifest file or URL')
    markup_parser.add_argument('--alt', default='', help='Alternative text')
    markup_parser.add_argument('--sizes-attr', help='sizes attribute for <source> elements')
    markup_parser.add_argument('--class', dest='css_class', default='responsive-image',
                               help='CSS class of the <picture> element')
    markup_parser.add_argument('--no-lazy', action='store_true', help='Omit loading="lazy"')
    markup_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'build':
        return cmd_build(parsed_args)
    elif parsed_args.command == 'scan':
        return cmd_scan(parsed_args)
    elif parsed_args.command == 'report':
        return cmd_report(parsed_args)
    elif parsed_args.command == 'resolve':
        return cmd_resolve(parsed_args)
    elif parsed_args.command == 'markup':
        return cmd_markup(parsed_args)

    return 1
