import logging
import numbers
import warnings
from abc import ABCMeta, abstractmethod
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import pandas as pd
from joblib import Parallel, delayed
from sklearn.base import BaseEstimator, MetaEstimatorMixin, clone, is_classifier
from sklearn.model_selection import check_cv

from modules.base.protocols import Splitter
from modules.fold_evaluator import FoldResult, evaluate_fold
from modules.search_engine.results import (
    SearchOutcome,
    SearchState,
    aggregate,
    grid_scores_to_frame,
    reassemble,
    select_best,
)
from modules.search_engine.scoring import resolve_scorer
from utils.constants import DEFAULT_PRE_DISPATCH, ERROR_SCORE_RAISE
from utils.exceptions import (
    ConfigurationError,
    EvaluationError,
    FitFailedWarning,
    ValidationError,
)
from utils.validation import check_consistent_samples, is_number

logger = logging.getLogger(__name__)


def _evaluate_unit(estimator, X, y, scorer, train, test, parameters, candidate_index,
                   fold_index, fit_params, error_score, verbose) -> FoldResult:
    """Run one unit of work under the configured error policy."""
    try:
        return evaluate_fold(
            estimator, X, y, scorer, train, test, parameters,
            candidate_index=candidate_index, fold_index=fold_index,
            fit_params=fit_params, verbose=verbose,
        )
    except Exception as e:
        if isinstance(error_score, str):
            raise EvaluationError(
                f"Fit failed for candidate {candidate_index} {dict(parameters)} "
                f"on fold {fold_index}: {e}"
            ) from e
        return FoldResult(
            candidate_index=candidate_index,
            fold_index=fold_index,
            parameters=dict(parameters),
            score=float(error_score),
            n_test_samples=len(test),
            failed=True,
            error=repr(e),
        )


class BaseSearchCV(MetaEstimatorMixin, BaseEstimator, metaclass=ABCMeta):
    """
    Base class for hyperparameter search with cross-validation.

    A run moves through ``SearchState``: every (candidate, fold) unit is
    dispatched, the results are put back in candidate-major order,
    averaged per candidate, the best candidate is selected and, with
    ``refit``, fitted again on the whole dataset. ``state_`` records where
    the last run got to.

    Sequential (``n_jobs=1``) and pooled runs give identical scores and the
    same winner: results are reordered by their unit tag before any
    reduction, and ties are broken by candidate order.
    """

    @abstractmethod
    def __init__(self, estimator, scoring=None, fit_params=None, n_jobs=1, iid=True,
                 refit=True, cv=None, verbose=0, pre_dispatch=DEFAULT_PRE_DISPATCH,
                 error_score=ERROR_SCORE_RAISE, backend=None):
        self.estimator = estimator
        self.scoring = scoring
        self.fit_params = fit_params
        self.n_jobs = n_jobs
        self.iid = iid
        self.refit = refit
        self.cv = cv
        self.verbose = verbose
        self.pre_dispatch = pre_dispatch
        self.error_score = error_score
        self.backend = backend

    @abstractmethod
    def _get_candidates(self) -> Sequence[Dict[str, Any]]:
        """Indexable, finite sequence of candidates for this run."""

    def fit(self, X, y=None, groups=None):
        """
        Run fit with all sets of parameters.

        Args:
            X: Training data, shape (n_samples, n_features).
            y: Targets, shape (n_samples,) or (n_samples, n_outputs); None
                for unsupervised estimators.
            groups: Group labels forwarded to the splitter.

        Returns:
            self
        """
        self._reset()
        self.state_ = SearchState.DISPATCHING
        try:
            self._fit(X, y, groups)
        except Exception:
            self.state_ = SearchState.FAILED
            raise
        self.state_ = SearchState.DONE
        return self

    def _reset(self) -> None:
        # A new fit never merges with the previous one
        for attr in ('outcome_', 'grid_scores_', 'best_params_', 'best_score_',
                     'best_index_', 'best_estimator_', 'fold_results_', 'n_splits_', 'scorer_'):
            self.__dict__.pop(attr, None)
        self.state_ = SearchState.IDLE

    def _check_error_score(self) -> None:
        if isinstance(self.error_score, str):
            if self.error_score != ERROR_SCORE_RAISE:
                raise ConfigurationError(
                    f"error_score must be '{ERROR_SCORE_RAISE}' or a number, got {self.error_score!r}"
                )
        elif not is_number(self.error_score):
            raise ConfigurationError(
                f"error_score must be '{ERROR_SCORE_RAISE}' or a number, got {self.error_score!r}"
            )

    def _effective_n_jobs(self) -> int:
        n_jobs = 1 if self.n_jobs is None else self.n_jobs
        if not isinstance(n_jobs, numbers.Integral) or isinstance(n_jobs, bool) or n_jobs == 0:
            raise ConfigurationError(
                f"n_jobs must be -1 (all cores) or a non-zero integer, got {self.n_jobs!r}"
            )
        return int(n_jobs)

    def _fit(self, X, y, groups) -> None:
        self._check_error_score()
        n_jobs = self._effective_n_jobs()
        estimator = self.estimator
        self.scorer_ = resolve_scorer(estimator, self.scoring)

        check_consistent_samples(X, y)

        candidates = self._get_candidates()
        n_candidates = len(candidates)
        if n_candidates == 0:
            raise ValidationError("The parameter space has no candidates to evaluate.")

        cv: Splitter = check_cv(self.cv, y, classifier=is_classifier(estimator))
        folds: List[Tuple[Any, Any]] = list(cv.split(X, y, groups))
        n_folds = len(folds)
        if n_folds == 0:
            raise ValidationError("The cross-validation splitter produced no folds.")

        if self.verbose > 0:
            logger.info(
                f"Fitting {n_folds} folds for each of {n_candidates} candidates, "
                f"totalling {n_candidates * n_folds} fits"
            )

        base_estimator = clone(estimator)
        fit_params = dict(self.fit_params or {})

        out = self._dispatch(base_estimator, X, y, candidates, folds, n_jobs, fit_params)
        results = reassemble(out, n_candidates, n_folds)
        self._report_failures(results)

        self.state_ = SearchState.AGGREGATING
        grid_scores = aggregate(results, n_folds, iid=self.iid)

        self.state_ = SearchState.SELECTING
        best_index = select_best(grid_scores)
        best = grid_scores[best_index]
        if self.verbose > 0:
            logger.info(
                f"Best candidate {best_index}: {best.parameters} "
                f"(mean score {best.mean_validation_score:.4f})"
            )

        best_estimator = None
        if self.refit:
            self.state_ = SearchState.REFITTING
            best_estimator = self._refit(base_estimator, best.parameters, X, y, fit_params)

        self.outcome_ = SearchOutcome(
            grid_scores=tuple(grid_scores),
            best=best,
            best_index=best_index,
            best_estimator=best_estimator,
            fold_results=tuple(results),
        )
        self.grid_scores_ = list(grid_scores)
        self.fold_results_ = list(results)
        self.best_index_ = best_index
        self.best_params_ = best.parameters
        self.best_score_ = best.mean_validation_score
        self.n_splits_ = n_folds
        if self.refit:
            self.best_estimator_ = best_estimator

    def _dispatch(self, base_estimator, X, y, candidates, folds, n_jobs: int,
                  fit_params: Mapping[str, Any]) -> List[FoldResult]:
        """Evaluate every (candidate, fold) unit, candidate-major and fold-minor."""
        units = (
            (candidate_index, parameters, fold_index, train, test)
            for candidate_index, parameters in enumerate(candidates)
            for fold_index, (train, test) in enumerate(folds)
        )

        if n_jobs == 1:
            return [
                _evaluate_unit(base_estimator, X, y, self.scorer_, train, test, parameters,
                               candidate_index, fold_index, fit_params, self.error_score,
                               self.verbose)
                for candidate_index, parameters, fold_index, train, test in units
            ]

        # Units may complete in any order; reassemble() restores it from the tags
        parallel = Parallel(
            n_jobs=n_jobs,
            backend=self.backend,
            verbose=self.verbose,
            pre_dispatch=self.pre_dispatch,
            return_as="generator_unordered",
        )
        return list(parallel(
            delayed(_evaluate_unit)(base_estimator, X, y, self.scorer_, train, test, parameters,
                                    candidate_index, fold_index, fit_params, self.error_score,
                                    self.verbose)
            for candidate_index, parameters, fold_index, train, test in units
        ))

    def _report_failures(self, results: Sequence[FoldResult]) -> None:
        # Pool workers may run in other processes; warn from this one
        for result in results:
            if result.failed:
                message = (
                    f"Estimator fit failed for candidate {result.candidate_index} on fold "
                    f"{result.fold_index}. The score on this train-test partition for these "
                    f"parameters will be set to {self.error_score}. Details: {result.error}"
                )
                logger.warning(message)
                warnings.warn(message, FitFailedWarning)

    def _refit(self, base_estimator, parameters: Mapping[str, Any], X, y,
               fit_params: Mapping[str, Any]):
        """Fit the best candidate on the entire dataset. Failures always propagate."""
        # Clone first to work around broken estimators
        best_estimator = clone(base_estimator)
        best_estimator.set_params(**{k: clone(v, safe=False) for k, v in parameters.items()})
        if y is not None:
            best_estimator.fit(X, y, **fit_params)
        else:
            best_estimator.fit(X, **fit_params)
        return best_estimator

    def cv_results_frame(self) -> pd.DataFrame:
        """Per-candidate results as a DataFrame, in candidate iteration order."""
        if getattr(self, 'outcome_', None) is None:
            raise ConfigurationError(
                f"This {type(self).__name__} instance is not fitted yet. Call 'fit' first."
            )
        return grid_scores_to_frame(self.outcome_.grid_scores)

    # --- Delegation to the refitted best estimator ---

    def _check_is_fitted(self, method_name: str) -> None:
        if not self.refit:
            raise ConfigurationError(
                f"This {type(self).__name__} instance was initialized with refit=False. "
                f"{method_name} is available only after refitting on the best parameters."
            )
        if getattr(self, 'best_estimator_', None) is None:
            raise ConfigurationError(
                f"This {type(self).__name__} instance is not fitted yet. "
                f"{method_name} is available only after refitting on the best parameters."
            )

    def score(self, X, y=None) -> float:
        """Score of the best estimator on X, y using the search's scorer."""
        self._check_is_fitted('score')
        return self.scorer_(self.best_estimator_, X, y)

    def predict(self, X):
        self._check_is_fitted('predict')
        return self.best_estimator_.predict(X)

    def predict_proba(self, X):
        self._check_is_fitted('predict_proba')
        return self.best_estimator_.predict_proba(X)

    def predict_log_proba(self, X):
        self._check_is_fitted('predict_log_proba')
        return self.best_estimator_.predict_log_proba(X)

    def decision_function(self, X):
        self._check_is_fitted('decision_function')
        return self.best_estimator_.decision_function(X)

    def transform(self, X):
        self._check_is_fitted('transform')
        return self.best_estimator_.transform(X)

    def inverse_transform(self, X):
        self._check_is_fitted('inverse_transform')
        return self.best_estimator_.inverse_transform(X)
