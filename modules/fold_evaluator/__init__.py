"""
Fold Evaluator Module
=====================

Responsibility:
- Executes one (candidate, fold) unit of work: clone, set parameters, fit
  on the training indices, score on the test indices.
- Returns a fixed-shape FoldResult record tagged with its unit position.
"""

from .fold_evaluator import evaluate_fold, FoldResult

__all__ = ['evaluate_fold', 'FoldResult']
