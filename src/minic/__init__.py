"""MiniC: a tree-walking evaluator for a minimal C-like language."""

__version__ = "0.1.0"
