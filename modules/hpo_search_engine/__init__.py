"""
HPO Search Engine
=================

Responsibility:
- Config-driven grid or randomized cross-validated search over one model.
- Stratified or plain K-Fold splitting with propagated seeds.
- Persistence of per-candidate and per-fold results and the best configuration.
- Optional persistence of the refitted best estimator.
"""

from .hpo_search_engine import HPOSearchEngine

__all__ = ['HPOSearchEngine']
