import json
import os
import hashlib
import sys
import logging
import jsonschema
import psutil
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from modules.parameter_grid import ParameterGrid
from modules.parameter_sampler import from_config
from utils.exceptions import ConfigurationError, ValidationError
from utils.validation import check_value_list, is_number
from utils import constants


class ConfigurationManager:
    """
    Manages search configuration loading, validation, and access.
    Acts as the single source of truth and safety guard for a search run.
    """

    DEFAULT_MAX_HPO_CONFIGS = constants.DEFAULT_MAX_HPO_CONFIGS

    def __init__(self, config_path: str = "config/config.json",
                 schema_path: str = "config/schema.json"):
        """
        Initialize the ConfigurationManager.

        Args:
            config_path (str): Path to the user configuration JSON.
            schema_path (str): Path to the JSON schema definition.
        """
        self.config_path = config_path
        self.schema_path = schema_path
        self.config: Dict[str, Any] = {}
        self.schema: Dict[str, Any] = {}
        self.run_id: Optional[str] = None
        self.logger = logging.getLogger("config_manager")

    def load_and_validate(self) -> Dict[str, Any]:
        """
        Loads config, validates schema/logic/resources and propagates seeds.

        Returns:
            Dict[str, Any]: The validated configuration.

        Raises:
            ConfigurationError: If any validation step fails.
        """
        self.config = self._load_json(self.config_path)
        self.schema = self._load_json(self.schema_path)
        return self.validate(self.config)

    def validate(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Run every validation step on an in-memory config."""
        self.config = config
        if self.schema:
            self._validate_schema()
        self._validate_logic()
        self._validate_resources()
        self._propagate_seeds()
        return self.config

    def generate_run_id(self) -> str:
        """Generate or retrieve a timestamp-based run identifier."""
        if not self.run_id:
            self.run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.run_id

    def save_artifacts(self, output_dir: str) -> None:
        """
        Save configuration artifacts to the run directory for reproducibility.

        Saves:
        1. config_used.json: The exact config object in memory.
        2. config_hash.txt: SHA256 hash for versioning.
        3. run_metadata.json: Environment details.
        """
        config_dir = Path(output_dir) / constants.CONFIG_DIR
        config_dir.mkdir(parents=True, exist_ok=True)

        with open(config_dir / constants.CONFIG_USED_FILE, 'w') as f:
            json.dump(self.config, f, indent=2)

        config_str = json.dumps(self.config, sort_keys=True)
        config_hash = hashlib.sha256(config_str.encode()).hexdigest()

        with open(config_dir / constants.CONFIG_HASH_FILE, 'w') as f:
            f.write(config_hash)

        metadata = {
            'run_id': self.run_id,
            'start_time': datetime.now().isoformat(),
            'python_version': sys.version,
            'platform': sys.platform,
            'config_hash': config_hash,
            'working_directory': os.getcwd()
        }

        with open(config_dir / constants.RUN_METADATA_FILE, 'w') as f:
            json.dump(metadata, f, indent=2)

    def _load_json(self, path: str) -> Dict[str, Any]:
        """Safely load a JSON file."""
        if not os.path.exists(path):
            raise ConfigurationError(f"File not found: {path}")
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {str(e)}")

    def _validate_schema(self) -> None:
        """Validate config structure against JSON schema."""
        try:
            jsonschema.validate(instance=self.config, schema=self.schema)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(f"Schema validation failed: {e.message}")

    def _validate_logic(self) -> None:
        """Logical validation of the search and execution sections."""
        # --- Data Section ---
        data = self.config.get('data', {})
        if not data.get('target_column'):
            raise ConfigurationError("Data 'target_column' must be specified and non-empty.")

        # --- Search Section ---
        search = self.config.get('search', {})
        if not search.get('model'):
            raise ConfigurationError("Search 'model' must be specified.")

        strategy = search.get('strategy', 'grid')
        if strategy == 'grid':
            if 'param_grid' not in search:
                raise ConfigurationError("Grid search requires 'search.param_grid'.")
            try:
                ParameterGrid(search['param_grid'])
            except ValidationError as e:
                raise ConfigurationError(f"Invalid parameter grid: {e}") from e
        elif strategy == 'random':
            distributions = search.get('param_distributions')
            if not distributions:
                raise ConfigurationError("Randomized search requires 'search.param_distributions'.")
            for name, spec in distributions.items():
                if isinstance(spec, dict):
                    from_config(spec)
                else:
                    try:
                        check_value_list(name, spec)
                    except ValidationError as e:
                        raise ConfigurationError(f"Invalid parameter distribution: {e}") from e
            n_iter = search.get('n_iter', constants.DEFAULT_N_ITER)
            if n_iter <= 0:
                raise ConfigurationError(f"n_iter must be > 0, got {n_iter}.")
        else:
            raise ConfigurationError(f"Unknown search strategy '{strategy}'. Use 'grid' or 'random'.")

        cv_folds = search.get('cv_folds', constants.DEFAULT_CV_FOLDS)
        if cv_folds < 2:
            raise ConfigurationError(f"cv_folds must be >= 2, got {cv_folds}.")

        error_score = search.get('error_score', constants.ERROR_SCORE_RAISE)
        if error_score != constants.ERROR_SCORE_RAISE and not is_number(error_score):
            raise ConfigurationError(
                f"error_score must be '{constants.ERROR_SCORE_RAISE}' or a number, got {error_score!r}"
            )

        if search.get('seed', 42) < 0:
            raise ConfigurationError("Search seed must be non-negative.")

        # --- Execution Section ---
        execution = self.config.get('execution', {})
        if 'n_jobs' in execution:
            n_jobs = execution['n_jobs']
            if n_jobs == 0 or n_jobs < -1:
                raise ConfigurationError(f"execution.n_jobs must be -1 (all cores) or a positive integer, got {n_jobs}")

    def _count_candidates(self) -> int:
        search = self.config.get('search', {})
        if search.get('strategy', 'grid') == 'grid':
            # len() is computed without materializing the grid
            return len(ParameterGrid(search['param_grid']))
        return search.get('n_iter', constants.DEFAULT_N_ITER)

    def _validate_resources(self) -> None:
        """
        Validate the total number of fits and the memory budget.
        """
        resources = self.config.get('resources', {})
        search = self.config.get('search', {})

        n_candidates = self._count_candidates()
        n_fits = n_candidates * search.get('cv_folds', constants.DEFAULT_CV_FOLDS)
        max_configs = resources.get('max_hpo_configs', self.DEFAULT_MAX_HPO_CONFIGS)

        if n_fits > max_configs:
            raise ConfigurationError(
                f"HPO Grid Explosion Detected! Total fits ({n_fits} = {n_candidates} candidates x folds) "
                f"exceeds safety limit ({max_configs}). Reduce the search space or increase "
                f"'resources.max_hpo_configs'."
            )
        self.logger.info(f"Search size validated: {n_candidates} candidates, {n_fits} fits (Limit: {max_configs})")

        system_ram_mb = int(psutil.virtual_memory().total / (1024 * 1024))
        safe_ram_limit = int(system_ram_mb * 0.8)
        config_max_ram = resources.get('max_memory_mb', safe_ram_limit)

        if config_max_ram > system_ram_mb:
            self.logger.warning(
                f"Configured max_memory_mb ({config_max_ram}MB) exceeds physical system RAM ({system_ram_mb}MB). "
                "This may lead to instability."
            )

        self.config.setdefault('resources', {})['max_memory_mb'] = config_max_ram

    def _propagate_seeds(self) -> None:
        """
        Derive component seeds from the master search seed with non-overlapping offsets.
        """
        master_seed = self.config.get('search', {}).get('seed', 42)
        self.config['_internal_seeds'] = {
            name: master_seed + offset for name, offset in constants.SEED_OFFSETS.items()
        }
        self.logger.debug(f"Seeds propagated from master ({master_seed}): {self.config['_internal_seeds']}")
