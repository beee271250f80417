#!/usr/bin/env python3
"""
LumenPath - A Monte-Carlo path tracer

Main entry point for rendering scenes.
"""

import sys

from lumenpath.cli import main


if __name__ == '__main__':
    sys.exit(main())
