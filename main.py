#!/usr/bin/env python3
"""
Legacy runner - forwards to the minic CLI
"""

import sys
import os

# Add the src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from minic.cli.main import cli

if __name__ == "__main__":
    # If no arguments, show help
    if len(sys.argv) == 1:
        sys.argv.append('--help')

    # Support shorthand: main.py program.json -> main.py run program.json
    if len(sys.argv) == 2 and sys.argv[1].endswith('.json'):
        sys.argv.insert(1, 'run')

    cli()
