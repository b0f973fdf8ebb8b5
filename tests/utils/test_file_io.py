import json

import pytest
import numpy as np
import pandas as pd
from sklearn.linear_model import Ridge

from utils.file_io import NumpyEncoder, read_dataframe, save_dataframe, save_json

def test_numpy_encoder_converts_numpy_types():
    payload = {'i': np.int64(3), 'f': np.float32(0.5), 'b': np.bool_(True), 'a': np.arange(3)}
    decoded = json.loads(json.dumps(payload, cls=NumpyEncoder))
    assert decoded == {'i': 3, 'f': 0.5, 'b': True, 'a': [0, 1, 2]}

def test_numpy_encoder_falls_back_to_repr():
    decoded = json.loads(json.dumps({'model': Ridge(alpha=2.0)}, cls=NumpyEncoder))
    assert decoded['model'] == repr(Ridge(alpha=2.0))

def test_dataframe_round_trip(tmp_path):
    df = pd.DataFrame({'a': [1, 2], 'b': ['x', 'y']})
    path = save_dataframe(df, tmp_path / "nested" / "frame.parquet", excel_copy=True)
    assert (tmp_path / "nested" / "frame.xlsx").exists()
    pd.testing.assert_frame_equal(read_dataframe(path), df)

def test_read_unsupported_extension(tmp_path):
    with pytest.raises(ValueError, match="Unsupported file extension"):
        read_dataframe(tmp_path / "data.txt")

def test_save_json(tmp_path):
    path = save_json({'score': np.float64(0.25)}, tmp_path / "out" / "best.json")
    assert json.loads(path.read_text()) == {'score': 0.25}
