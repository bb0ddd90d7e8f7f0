#!/usr/bin/env python3
"""
Entry point for lb-address CLI tool.
"""

import sys

from lb_address.cli.cli import main

if __name__ == "__main__":
    sys.exit(main())
