from modules.parameter_sampler import ParameterSampler
from modules.search_engine.base_search import BaseSearchCV
from utils.constants import DEFAULT_N_ITER, DEFAULT_PRE_DISPATCH, ERROR_SCORE_RAISE


class RandomizedSearchCV(BaseSearchCV):
    """
    Randomized search on hyperparameters.

    In contrast to GridSearchCV, not all parameter values are tried out:
    ``n_iter`` candidates are drawn by ``ParameterSampler`` before any fit
    starts, so the worker pool always receives a fixed, indexable list.

    Args:
        estimator: Unfitted scikit-learn compatible estimator.
        param_distributions: Dict mapping parameter names to distributions
            (``Distribution`` or scipy.stats frozen distributions) or lists
            sampled uniformly with replacement.
        n_iter: Number of candidates sampled.
        random_state: Seed or ``numpy.random.RandomState`` for the sampler.

    The remaining arguments behave as in ``GridSearchCV``.
    """

    def __init__(self, estimator, param_distributions, n_iter=DEFAULT_N_ITER, scoring=None,
                 fit_params=None, n_jobs=1, iid=True, refit=True, cv=None, verbose=0,
                 pre_dispatch=DEFAULT_PRE_DISPATCH, random_state=None,
                 error_score=ERROR_SCORE_RAISE, backend=None):
        super().__init__(
            estimator=estimator, scoring=scoring, fit_params=fit_params, n_jobs=n_jobs,
            iid=iid, refit=refit, cv=cv, verbose=verbose, pre_dispatch=pre_dispatch,
            error_score=error_score, backend=backend,
        )
        self.param_distributions = param_distributions
        self.n_iter = n_iter
        self.random_state = random_state

    def _get_candidates(self):
        sampler = ParameterSampler(
            self.param_distributions, self.n_iter, random_state=self.random_state
        )
        # Materialized so units can be addressed by candidate index
        return list(sampler)
