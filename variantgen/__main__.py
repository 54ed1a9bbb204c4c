"""
Main entry point for running the package as a module.

Usage:
    python -m variantgen build --root site/
    python -m variantgen report --manifest site/assets/images/manifest.json
    python -m variantgen resolve manuais/sox406/images/equipment/sox406-main.jpg
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
