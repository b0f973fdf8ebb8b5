"""
Search Engine Module
====================

Responsibility:
- Maps every candidate onto every cross-validation fold and dispatches the
  units sequentially or to a joblib worker pool.
- Reassembles results in candidate-major order, aggregates per candidate
  and selects the best candidate deterministically.
- Optionally refits the best candidate and delegates predictions to it.
"""

from .base_search import BaseSearchCV
from .grid_search import GridSearchCV
from .randomized_search import RandomizedSearchCV
from .results import (
    CandidateScore,
    SearchOutcome,
    SearchState,
    aggregate,
    fold_results_to_frame,
    grid_scores_to_frame,
    reassemble,
    select_best,
)
from .scoring import resolve_scorer

__all__ = [
    'BaseSearchCV',
    'GridSearchCV',
    'RandomizedSearchCV',
    'CandidateScore',
    'SearchOutcome',
    'SearchState',
    'aggregate',
    'fold_results_to_frame',
    'grid_scores_to_frame',
    'reassemble',
    'select_best',
    'resolve_scorer',
]
