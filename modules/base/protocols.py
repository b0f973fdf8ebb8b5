"""
Capability interfaces consumed by the search.

Concrete implementations are scikit-learn estimators, scorers and
cross-validation splitters; the search never needs more than these methods.
"""

from typing import Any, Iterator, Mapping, Optional, Protocol, Tuple

import numpy as np


class Model(Protocol):
    """An unfitted, cloneable estimator (cloned with ``sklearn.base.clone``)."""

    def get_params(self, deep: bool = True) -> Mapping[str, Any]:
        ...

    def set_params(self, **params) -> "Model":
        ...

    def fit(self, X, y=None, **fit_params) -> "Model":
        ...


class Scorer(Protocol):
    """Callable returning a score where greater is better."""

    def __call__(self, estimator: Model, X, y=None) -> float:
        ...


class Splitter(Protocol):
    """Cross-validation splitter producing (train, test) index arrays."""

    def split(self, X, y=None, groups=None) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        ...

    def get_n_splits(self, X=None, y=None, groups=None) -> int:
        ...
