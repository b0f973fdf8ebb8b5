"""
Input validation and index-based subsetting shared by the grid, the sampler
and the fold evaluator.
"""

import numbers
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import numpy as np
import pandas as pd
import scipy.sparse as sp

from utils.exceptions import ValidationError


def num_samples(data: Any) -> int:
    """Number of rows of an array-like (first axis)."""
    shape = getattr(data, 'shape', None)
    if shape is not None:
        if len(shape) == 0:
            raise ValidationError(f"Singleton array {data!r} cannot be considered a valid collection.")
        return int(shape[0])
    try:
        return len(data)
    except TypeError as e:
        raise ValidationError(f"Expected sequence or array-like, got {type(data).__name__}") from e


def check_consistent_samples(X: Any, y: Optional[Any]) -> int:
    """
    Ensure targets, when supplied, have as many rows as the features.

    Returns:
        Number of samples in X.
    """
    n_samples = num_samples(X)
    if y is not None:
        n_targets = num_samples(y)
        if n_targets != n_samples:
            raise ValidationError(
                f"Target variable (y) has a different number of samples ({n_targets}) "
                f"than data (X: {n_samples} samples)"
            )
    return n_samples


def safe_indexing(data: Any, indices) -> Any:
    """Select rows of ``data`` by integer position."""
    if data is None:
        return None
    if isinstance(data, (pd.DataFrame, pd.Series)):
        return data.iloc[indices]
    if isinstance(data, np.ndarray) or sp.issparse(data):
        return data[indices]
    return [data[i] for i in indices]


def check_value_list(name: str, values: Any) -> None:
    """
    Validate one parameter's candidate values: a finite, non-empty,
    one-dimensional sequence.
    """
    if isinstance(values, np.ndarray):
        if values.ndim != 1:
            raise ValidationError(f"Parameter array for '{name}' should be one-dimensional.")
    elif isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise ValidationError(
            f"Parameter values for '{name}' should be a sequence, got {type(values).__name__}."
        )
    if len(values) == 0:
        raise ValidationError(f"Parameter values for '{name}' should be a non-empty sequence.")


def check_param_mapping(params: Any) -> None:
    """Validate that a sub-space is a mapping keyed by parameter names."""
    if not isinstance(params, Mapping):
        raise ValidationError(f"Parameter grid is not a dict ({params!r})")
    for key in params:
        if not isinstance(key, str):
            raise ValidationError(f"Parameter names must be strings, got {key!r}")


def is_number(value: Any) -> bool:
    """True for real numbers, excluding booleans."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
