#!/usr/bin/env python3
"""
lumenpath - A Python Monte Carlo Path Tracer

Main entry point for rendering scenes.
"""

import sys

from lumenpath.cli import main


if __name__ == '__main__':
    sys.exit(main())
