#!/usr/bin/env python
"""
Cross-validated Parameter Search - Main Entry Point
Loads a configuration, runs the configured grid or randomized search on a
dataset and stores the results.
"""
import sys
import logging
import argparse
import traceback
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from modules.config_manager import ConfigurationManager
from modules.logging_config import LoggingConfigurator
from modules.hpo_search_engine import HPOSearchEngine
from utils.exceptions import ParamSearchException
from utils.file_io import read_dataframe


def parse_arguments(argv=None):
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Cross-validated hyperparameter search (grid or randomized)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.json",
        help="Path to the configuration JSON file"
    )
    parser.add_argument(
        "--schema",
        type=str,
        default="config/schema.json",
        help="Path to the configuration JSON schema"
    )
    parser.add_argument(
        "--run-id",
        type=str,
        default=None,
        help="Optional run identifier (defaults to timestamp if not provided)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and exit without running the search"
    )
    return parser.parse_args(argv)


def setup_run_directory(config: dict, run_id: str, logger: logging.Logger) -> Path:
    """Create the run directory ``<base_results_dir>/<run_id>`` and point outputs at it."""
    base_results_dir = Path(config.get('outputs', {}).get('base_results_dir', 'results'))
    run_dir = (base_results_dir / run_id).absolute()
    run_dir.mkdir(parents=True, exist_ok=True)
    config.setdefault('outputs', {})['base_results_dir'] = str(run_dir)
    logger.info(f"Created run directory: {run_dir}")
    return run_dir


def main(argv=None):
    """
    Run a search from the command line.

    Returns:
        int: Exit code (0 for success, 1 for errors, 130 on interrupt)
    """
    logger = None

    try:
        args = parse_arguments(argv)

        config_manager = ConfigurationManager(config_path=args.config, schema_path=args.schema)
        config = config_manager.load_and_validate()

        if args.verbose:
            config.setdefault('logging', {})['level'] = 'DEBUG'

        logging_configurator = LoggingConfigurator(config)
        logging_configurator.setup()
        logger = logging_configurator.get_logger('search')
        logger.info(f"Configuration loaded from: {args.config}")

        config_manager.run_id = args.run_id
        run_id = config_manager.generate_run_id()
        run_dir = setup_run_directory(config, run_id, logger)
        config_manager.save_artifacts(str(run_dir))

        if args.dry_run:
            logger.info("Dry run mode: validation complete. Exiting without running the search.")
            print("\n[SUCCESS] Configuration validated successfully.")
            return 0

        data_path = config['data']['file_path']
        df = read_dataframe(Path(data_path))
        logger.info(f"Data loaded from {data_path}: {len(df)} samples")

        engine = HPOSearchEngine(config, logger)
        best_config = engine.execute(df, run_id)

        logger.info("-" * 60)
        logger.info("SEARCH COMPLETED SUCCESSFULLY")
        logger.info(f"Best model: {best_config['model']} {best_config['params']}")
        logger.info(f"Best CV score: {best_config['best_score']:.4f}")
        logger.info(f"Output Directory: {run_dir}")
        logger.info("-" * 60)

        print(f"\n[SUCCESS] Search completed. Results saved to: {run_dir}")
        return 0

    except ParamSearchException as e:
        msg = f"Search Error: {str(e)}"
        print(f"\n[ERROR] {msg}")
        if logger:
            logger.critical(msg, exc_info=True)
        else:
            traceback.print_exc()
        return 1

    except KeyboardInterrupt:
        print("\n[INTERRUPTED] Search interrupted by user.")
        if logger:
            logger.warning("Search interrupted by user (Ctrl+C)")
        return 130

    except Exception as e:
        msg = f"Unexpected Error: {str(e)}"
        print(f"\n[CRITICAL] {msg}")
        if logger:
            logger.critical(msg, exc_info=True)
        else:
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
