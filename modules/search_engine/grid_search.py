from modules.parameter_grid import ParameterGrid
from modules.search_engine.base_search import BaseSearchCV
from utils.constants import DEFAULT_PRE_DISPATCH, ERROR_SCORE_RAISE


class GridSearchCV(BaseSearchCV):
    """
    Exhaustive search over specified parameter values for an estimator.

    Every candidate of ``ParameterGrid(param_grid)`` is scored on every fold;
    the parameters used to predict are the ones that maximized the mean
    cross-validated score.

    Args:
        estimator: Unfitted scikit-learn compatible estimator.
        param_grid: Dict mapping parameter names to sequences of values, or a
            list of such dicts whose grids are explored in order.
        scoring: Scorer name, callable ``scorer(estimator, X, y)``, or None to
            use ``estimator.score``.
        fit_params: Extra keyword arguments for ``fit``. Arrays with one entry
            per sample are sliced to each training fold.
        n_jobs: 1 runs sequentially; any other value fans units out to a
            joblib worker pool (-1 uses all cores).
        iid: Weight each fold's score by its test size when averaging.
        refit: Refit the best candidate on the whole dataset. Without it,
            ``predict``, ``score`` and the other delegates are unavailable.
        cv: Number of folds, splitter, or iterable of (train, test) indices.
        verbose: Diagnostic logging level; no effect on results.
        pre_dispatch: Number of units dispatched ahead in the worker pool.
        error_score: 'raise' to abort on the first failing unit, or a number
            substituted as that unit's score.
        backend: joblib backend name ('loky', 'threading', ...); None uses
            joblib's default.

    Example:
        >>> from sklearn.svm import SVC
        >>> search = GridSearchCV(SVC(), {'kernel': ('linear', 'rbf'), 'C': [1, 10]})
    """

    def __init__(self, estimator, param_grid, scoring=None, fit_params=None, n_jobs=1,
                 iid=True, refit=True, cv=None, verbose=0, pre_dispatch=DEFAULT_PRE_DISPATCH,
                 error_score=ERROR_SCORE_RAISE, backend=None):
        super().__init__(
            estimator=estimator, scoring=scoring, fit_params=fit_params, n_jobs=n_jobs,
            iid=iid, refit=refit, cv=cv, verbose=verbose, pre_dispatch=pre_dispatch,
            error_score=error_score, backend=backend,
        )
        self.param_grid = param_grid

    def _get_candidates(self) -> ParameterGrid:
        return ParameterGrid(self.param_grid)
