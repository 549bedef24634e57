# src/minic/evaluator/__init__.py
from .core import Evaluator, evaluate

__all__ = ['Evaluator', 'evaluate']
