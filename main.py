#!/usr/bin/env python3
"""
Main entry point for the schema profiler
"""

import sys

from schema_profiler.cli.main_cli import main

if __name__ == "__main__":
    sys.exit(main())
