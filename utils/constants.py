# utils/constants.py

# --- Top-Level Result Directories ---
# Sequentially numbered for proper sorting

CONFIG_DIR = "00_RunConfiguration"        # Run config, metadata, seeds
SEARCH_RESULTS_DIR = "01_SearchResults"   # Per-candidate and per-fold scores
BEST_ESTIMATOR_DIR = "02_BestEstimator"   # Refitted best model

# --- File Names ---
CONFIG_USED_FILE = "config_used.json"
CONFIG_HASH_FILE = "config_hash.txt"
RUN_METADATA_FILE = "run_metadata.json"
CV_RESULTS_FILE = "cv_results.parquet"
FOLD_RESULTS_FILE = "fold_results.parquet"
BEST_CONFIG_FILE = "best_configuration.json"
BEST_ESTIMATOR_FILE = "best_estimator.pkl"
LOG_FILE = "search.log"

# --- Search Defaults ---
DEFAULT_MAX_HPO_CONFIGS = 1000   # Upper bound on candidates x folds
DEFAULT_CV_FOLDS = 5
DEFAULT_N_ITER = 10
DEFAULT_PRE_DISPATCH = "2*n_jobs"
ERROR_SCORE_RAISE = "raise"

# Seed offsets for components derived from the master search seed
SEED_OFFSETS = {
    'cv': 1000,
    'sampler': 2000,
    'model': 3000,
}

# Upper bound (exclusive) for the distribution-draw seed taken from the list-draw stream
SAMPLER_SEED_BOUND = 100000
