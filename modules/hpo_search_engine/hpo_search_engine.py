import json
import logging
import time
from typing import Any, Dict, Tuple

import joblib
import pandas as pd
from sklearn.model_selection import KFold, StratifiedKFold

from modules.base.base_engine import BaseEngine
from modules.model_factory import ModelFactory
from modules.parameter_sampler import from_config
from modules.search_engine import (
    BaseSearchCV,
    GridSearchCV,
    RandomizedSearchCV,
    fold_results_to_frame,
)
from utils import constants
from utils.error_handling import handle_engine_errors
from utils.exceptions import ConfigurationError, ValidationError
from utils.file_io import NumpyEncoder, save_dataframe, save_json


class HPOSearchEngine(BaseEngine):
    """
    Hyperparameter Optimization Engine.

    Turns the 'search' config section into a GridSearchCV or
    RandomizedSearchCV run, then writes:
    - cv_results.parquet: one row per candidate, in iteration order.
    - fold_results.parquet: one row per (candidate, fold) unit.
    - best_configuration.json: winning model, parameters and score.
    - best_estimator.pkl: the refitted winner (when refit and save_models).
    """

    def __init__(self, config: dict, logger: logging.Logger):
        super().__init__(config, logger)
        self.search_config = config.get('search', {})
        self.execution_config = config.get('execution', {})
        self.seeds = config.get('_internal_seeds', {})
        self.search_: BaseSearchCV = None

    def _get_engine_directory_name(self) -> str:
        return constants.SEARCH_RESULTS_DIR

    @handle_engine_errors("Hyperparameter Search")
    def execute(self, df: pd.DataFrame, run_id: str) -> Dict[str, Any]:
        """
        Execute the configured search and persist its results.

        Args:
            df: Dataset holding features and the target column.
            run_id: Unique identifier for this execution.

        Returns:
            Dict containing the best model configuration.
        """
        self.logger.info(f"Starting Hyperparameter Search (run {run_id})...")

        X, y = self._prepare_data(df)
        model_name = self.search_config['model']
        model_params = dict(self.search_config.get('model_params', {}))
        if 'model' in self.seeds:
            model_params.setdefault('random_state', self.seeds['model'])
        estimator = ModelFactory.create(model_name, model_params)
        cv = self._build_cv(model_name, y)
        search = self._build_search(estimator, cv)

        start_time = time.time()
        search.fit(X, y)
        duration = time.time() - start_time
        self.search_ = search

        n_candidates = len(search.grid_scores_)
        n_failed = sum(1 for r in search.fold_results_ if r.failed)
        self.logger.info(
            f"Search completed in {duration:.2f} seconds: {n_candidates} candidates x "
            f"{search.n_splits_} folds ({n_failed} failed fits)."
        )

        self._save_results(search)

        best_config = {
            'model': model_name,
            'params': search.best_params_,
            'best_score': search.best_score_,
            'best_index': search.best_index_,
            'scoring': self.search_config.get('scoring'),
            'n_candidates': n_candidates,
            'n_folds': search.n_splits_,
            'n_failed_fits': n_failed,
            'duration_sec': duration,
            'run_id': run_id,
        }
        save_json(best_config, self.output_dir / constants.BEST_CONFIG_FILE)

        if search.refit and self.config.get('outputs', {}).get('save_models', True):
            self._save_best_estimator(search)

        self.logger.info(f"Best Config Found: {model_name} {search.best_params_} (CV score: {search.best_score_:.4f})")
        return {
            'model': model_name,
            'params': search.best_params_,
            'best_score': search.best_score_,
            'n_candidates': n_candidates,
            'n_folds': search.n_splits_,
        }

    def _prepare_data(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
        data_config = self.config.get('data', {})
        target = data_config.get('target_column')
        if target not in df.columns:
            raise ValidationError(f"Target column '{target}' not found in dataset.")

        drop_cols = [c for c in data_config.get('drop_columns', []) + [target] if c in df.columns]
        X = df.drop(columns=drop_cols)
        y = df[target]

        if X.empty or len(X.columns) == 0:
            raise ValidationError("No features available for the search after dropping excluded columns.")
        self.logger.info(f"Search data: {len(X)} samples, {len(X.columns)} features, target '{target}'.")
        return X, y

    def _build_cv(self, model_name: str, y: pd.Series):
        """StratifiedKFold for classifiers when every class can fill each fold, else KFold."""
        n_splits = self.search_config.get('cv_folds', constants.DEFAULT_CV_FOLDS)
        shuffle = self.search_config.get('shuffle', True)
        random_state = self.seeds.get('cv') if shuffle else None

        if ModelFactory.is_classifier_name(model_name):
            if y.value_counts().min() >= n_splits:
                return StratifiedKFold(n_splits=n_splits, shuffle=shuffle, random_state=random_state)
            self.logger.warning(
                f"Some classes have fewer than {n_splits} members. Falling back to KFold."
            )
        return KFold(n_splits=n_splits, shuffle=shuffle, random_state=random_state)

    def _build_search(self, estimator, cv) -> BaseSearchCV:
        common = dict(
            scoring=self.search_config.get('scoring'),
            n_jobs=self.execution_config.get('n_jobs', 1),
            iid=self.search_config.get('iid', True),
            refit=self.search_config.get('refit', True),
            cv=cv,
            verbose=self.execution_config.get('verbose', 0),
            pre_dispatch=self.execution_config.get('pre_dispatch', constants.DEFAULT_PRE_DISPATCH),
            error_score=self.search_config.get('error_score', constants.ERROR_SCORE_RAISE),
            backend=self.execution_config.get('backend'),
        )

        strategy = self.search_config.get('strategy', 'grid')
        if strategy == 'grid':
            return GridSearchCV(estimator, self.search_config['param_grid'], **common)
        if strategy == 'random':
            distributions = {
                name: from_config(spec) if isinstance(spec, dict) else spec
                for name, spec in self.search_config['param_distributions'].items()
            }
            return RandomizedSearchCV(
                estimator,
                distributions,
                n_iter=self.search_config.get('n_iter', constants.DEFAULT_N_ITER),
                random_state=self.seeds.get('sampler'),
                **common,
            )
        raise ConfigurationError(f"Unknown search strategy '{strategy}'.")

    def _save_results(self, search: BaseSearchCV) -> None:
        excel_copy = self.config.get('outputs', {}).get('save_excel_copy', False)

        cv_results = search.cv_results_frame()
        # Heterogeneous parameter values do not map onto Parquet columns
        cv_results['params'] = cv_results['params'].map(
            lambda p: json.dumps(p, sort_keys=True, cls=NumpyEncoder)
        )
        param_cols = [c for c in cv_results.columns if c.startswith('param_')]
        cv_results[param_cols] = cv_results[param_cols].astype(str)
        save_dataframe(cv_results, self.output_dir / constants.CV_RESULTS_FILE, excel_copy=excel_copy)

        fold_results = fold_results_to_frame(search.fold_results_)
        save_dataframe(fold_results, self.output_dir / constants.FOLD_RESULTS_FILE, excel_copy=excel_copy)

        self.logger.info(f"Search results saved to {self.output_dir}")

    def _save_best_estimator(self, search: BaseSearchCV) -> None:
        model_dir = self.base_dir / constants.BEST_ESTIMATOR_DIR
        try:
            model_dir.mkdir(parents=True, exist_ok=True)
            model_path = model_dir / constants.BEST_ESTIMATOR_FILE
            joblib.dump(search.best_estimator_, model_path)
            self.logger.info(f"Best estimator saved to {model_path}")
        except OSError as e:
            self.logger.warning(f"Failed to save best estimator. Error: {e}")
