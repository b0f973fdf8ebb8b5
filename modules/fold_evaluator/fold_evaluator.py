import logging
import numbers
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from sklearn.base import clone

from modules.base.protocols import Model, Scorer
from utils.validation import num_samples, safe_indexing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoldResult:
    """Outcome of one (candidate, fold) evaluation."""
    candidate_index: int
    fold_index: int
    parameters: Dict[str, Any]
    score: float
    n_test_samples: int
    fit_time: float = 0.0
    score_time: float = 0.0
    failed: bool = False
    error: Optional[str] = None


def _fold_fit_params(fit_params: Optional[Mapping[str, Any]], n_samples: int, train) -> Dict[str, Any]:
    """Slice sample-aligned fit parameters (e.g. sample_weight) to the training rows."""
    if not fit_params:
        return {}
    sliced = {}
    for key, value in fit_params.items():
        if hasattr(value, '__len__') and not isinstance(value, (str, bytes, dict)) \
                and len(value) == n_samples:
            sliced[key] = safe_indexing(value, train)
        else:
            sliced[key] = value
    return sliced


def evaluate_fold(estimator: Model, X, y, scorer: Scorer, train, test, parameters: Mapping[str, Any],
                  candidate_index: int = 0, fold_index: int = 0,
                  fit_params: Optional[Mapping[str, Any]] = None, verbose: int = 0) -> FoldResult:
    """
    Fit a clone of ``estimator`` with ``parameters`` on ``train`` and score it on ``test``.

    Fit and score failures propagate unchanged; the caller owns the error policy.

    Args:
        estimator: Unfitted base estimator; never modified.
        X, y: Full dataset (y may be None).
        scorer: Callable ``scorer(estimator, X, y) -> float``.
        train, test: Integer row indices of the fold.
        parameters: Candidate parameter assignment.
        candidate_index, fold_index: Position tag of this unit.
        fit_params: Extra keyword arguments for ``fit``.
        verbose: Logs the unit and its score when > 2.
    """
    if verbose > 2:
        logger.info(f"[CV] candidate {candidate_index} fold {fold_index}: {dict(parameters)}")

    model = clone(estimator)
    # Parameter values may be estimators themselves; never share them across folds
    cloned_parameters = {k: clone(v, safe=False) for k, v in parameters.items()}
    model.set_params(**cloned_parameters)

    X_train, X_test = safe_indexing(X, train), safe_indexing(X, test)
    y_train, y_test = safe_indexing(y, train), safe_indexing(y, test)
    fold_fit_params = _fold_fit_params(fit_params, num_samples(X), train)

    start_time = time.time()
    if y_train is None:
        model.fit(X_train, **fold_fit_params)
    else:
        model.fit(X_train, y_train, **fold_fit_params)
    fit_time = time.time() - start_time

    start_time = time.time()
    score = scorer(model, X_test, y_test)
    score_time = time.time() - start_time

    if not isinstance(score, numbers.Number):
        raise ValueError(
            f"scoring must return a number, got {score!r} ({type(score).__name__}) instead."
        )

    if verbose > 2:
        logger.info(
            f"[CV] candidate {candidate_index} fold {fold_index}: score={score:.4f} "
            f"(fit {fit_time:.2f}s, score {score_time:.2f}s)"
        )

    return FoldResult(
        candidate_index=candidate_index,
        fold_index=fold_index,
        parameters=dict(parameters),
        score=float(score),
        n_test_samples=len(test),
        fit_time=fit_time,
        score_time=score_time,
    )
