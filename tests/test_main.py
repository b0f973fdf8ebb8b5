import pytest
import json
import logging
import numpy as np
import pandas as pd

from main import main, parse_arguments
from utils import constants

@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)

@pytest.fixture
def run_files(tmp_path):
    rng = np.random.RandomState(1)
    df = pd.DataFrame({'x1': rng.rand(30), 'x2': rng.rand(30)})
    df['y'] = 2 * df['x1'] + rng.rand(30) * 0.1
    data_path = tmp_path / "data.csv"
    df.to_csv(data_path, index=False)

    config = {
        "data": {"file_path": str(data_path), "target_column": "y"},
        "search": {
            "model": "Ridge",
            "param_grid": {"alpha": [0.1, 1.0]},
            "scoring": "r2",
            "cv_folds": 3,
            "seed": 0
        },
        "execution": {"n_jobs": 1},
        "logging": {"log_dir": str(tmp_path / "logs"), "log_to_console": False},
        "outputs": {"base_results_dir": str(tmp_path / "results")}
    }
    config_path = tmp_path / "config.json"
    schema_path = tmp_path / "schema.json"
    config_path.write_text(json.dumps(config))
    schema_path.write_text(json.dumps({"type": "object", "required": ["data", "search"]}))
    return tmp_path, config_path, schema_path

def test_parse_arguments_defaults():
    args = parse_arguments([])
    assert args.config == "config/config.json"
    assert args.run_id is None
    assert not args.dry_run

def test_full_run(run_files):
    tmp_path, config_path, schema_path = run_files
    code = main(["--config", str(config_path), "--schema", str(schema_path), "--run-id", "test_run"])
    assert code == 0

    run_dir = tmp_path / "results" / "test_run"
    assert (run_dir / constants.CONFIG_DIR / constants.CONFIG_USED_FILE).exists()
    assert (run_dir / constants.SEARCH_RESULTS_DIR / constants.CV_RESULTS_FILE).exists()
    assert (run_dir / constants.BEST_ESTIMATOR_DIR / constants.BEST_ESTIMATOR_FILE).exists()
    assert (tmp_path / "logs" / constants.LOG_FILE).exists()

def test_dry_run(run_files):
    tmp_path, config_path, schema_path = run_files
    code = main(["--config", str(config_path), "--schema", str(schema_path),
                 "--run-id", "dry", "--dry-run"])
    assert code == 0
    assert not (tmp_path / "results" / "dry" / constants.SEARCH_RESULTS_DIR).exists()

def test_invalid_config_returns_error(run_files, capsys):
    tmp_path, config_path, schema_path = run_files
    config = json.loads(config_path.read_text())
    config['search']['cv_folds'] = 1
    config_path.write_text(json.dumps(config))

    assert main(["--config", str(config_path), "--schema", str(schema_path)]) == 1
    assert "cv_folds" in capsys.readouterr().out
