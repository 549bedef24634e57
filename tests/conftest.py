"""
Pytest configuration for MiniC tests.
"""
import sys
import os

# `import minic...` from src/, and `import helpers` from this directory
_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
_SRC_DIR = os.path.join(_ROOT, 'src')
_TESTS_DIR = os.path.dirname(os.path.abspath(__file__))

for _p in (_SRC_DIR, _TESTS_DIR):
	if _p not in sys.path:
		sys.path.insert(0, _p)
