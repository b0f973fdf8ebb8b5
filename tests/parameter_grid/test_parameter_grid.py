import pytest
import numpy as np
from itertools import product

from modules.parameter_grid import ParameterGrid, check_param_grid
from utils.exceptions import IndexOutOfRangeError, ValidationError


def _nested_enumeration(param_grid):
    """Reference enumeration: descending names, first name cycles fastest."""
    grids = [param_grid] if isinstance(param_grid, dict) else param_grid
    out = []
    for sub in grids:
        if not sub:
            out.append({})
            continue
        keys = sorted(sub, reverse=True)
        # Most significant digit first for product()
        for values in product(*[sub[k] for k in reversed(keys)]):
            out.append(dict(zip(reversed(keys), values)))
    return out


GRIDS = [
    {'a': [1, 2], 'b': [True, False]},
    {'x': [1, 2, 3], 'y': ['p', 'q'], 'z': [0.1, 0.2, 0.3, 0.4]},
    [{}, {'k': [1, 10]}],
    [{'kernel': ['linear']}, {'kernel': ['rbf'], 'gamma': [1, 10]}],
    {'single': [None]},
    [{'a': range(3)}, {}, {'b': np.array([5, 6]), 'c': ('u', 'v', 'w')}],
]


class TestParameterGrid:

    def test_documented_two_parameter_order(self):
        """b sorts after a, so b is the fastest-varying digit."""
        grid = ParameterGrid({'a': [1, 2], 'b': [True, False]})
        assert list(grid) == [
            {'a': 1, 'b': True}, {'a': 1, 'b': False},
            {'a': 2, 'b': True}, {'a': 2, 'b': False},
        ]

    def test_empty_subgrid_consumes_one_index(self):
        grid = ParameterGrid([{}, {'k': [1, 10]}])
        assert len(grid) == 3
        assert grid[0] == {}
        assert grid[1] == {'k': 1}
        assert grid[2] == {'k': 10}

    def test_empty_mapping_is_single_empty_candidate(self):
        grid = ParameterGrid({})
        assert len(grid) == 1
        assert list(grid) == [{}]

    def test_union_of_subgrids(self):
        grid = ParameterGrid([{'kernel': ['linear']}, {'kernel': ['rbf'], 'gamma': [1, 10]}])
        assert list(grid) == [
            {'kernel': 'linear'},
            {'kernel': 'rbf', 'gamma': 1},
            {'kernel': 'rbf', 'gamma': 10},
        ]
        assert grid[1] == {'kernel': 'rbf', 'gamma': 1}

    @pytest.mark.parametrize("param_grid", GRIDS)
    def test_size_matches_full_enumeration(self, param_grid):
        grid = ParameterGrid(param_grid)
        decoded = [grid[i] for i in range(len(grid))]
        assert len(decoded) == len(grid)
        # No duplicates, no gaps
        keys = {tuple(sorted((k, repr(v)) for k, v in c.items())) for c in decoded}
        assert len(keys) == len(grid)

    @pytest.mark.parametrize("param_grid", GRIDS)
    def test_random_access_matches_nested_enumeration(self, param_grid):
        grid = ParameterGrid(param_grid)
        expected = _nested_enumeration(param_grid)
        assert [grid[i] for i in range(len(grid))] == expected
        assert list(grid) == expected

    def test_size_formula(self):
        grid = ParameterGrid([{'a': [1, 2, 3], 'b': [1, 2]}, {}, {'c': [1, 2, 3, 4]}])
        assert len(grid) == 3 * 2 + 1 + 4

    def test_iteration_is_restartable(self):
        grid = ParameterGrid({'a': [1, 2], 'b': [3]})
        assert list(grid) == list(grid)

    def test_large_grid_is_not_materialized(self):
        grid = ParameterGrid({f'p{i}': list(range(10)) for i in range(12)})
        assert len(grid) == 10 ** 12
        last = grid[len(grid) - 1]
        assert last == {f'p{i}': 9 for i in range(12)}
        # p9 is the greatest name, so it moves first
        assert grid[1]['p9'] == 1
        assert grid[1]['p0'] == 0

    def test_numpy_integer_index(self):
        grid = ParameterGrid({'a': [1, 2, 3]})
        assert grid[np.int64(2)] == {'a': 3}

    @pytest.mark.parametrize("index", [4, 100, -1])
    def test_index_out_of_range(self, index):
        grid = ParameterGrid({'a': [1, 2], 'b': [1, 2]})
        with pytest.raises(IndexOutOfRangeError):
            grid[index]

    def test_out_of_range_is_validation_and_index_error(self):
        grid = ParameterGrid({'a': [1]})
        with pytest.raises(ValidationError):
            grid[1]
        with pytest.raises(IndexError):
            grid[1]

    def test_non_integer_index(self):
        with pytest.raises(IndexOutOfRangeError):
            ParameterGrid({'a': [1]})[0.5]

    def test_sequence_protocol(self):
        grid = ParameterGrid({'a': [1, 2]})
        assert {'a': 2} in grid
        assert grid.index({'a': 2}) == 1


class TestCheckParamGrid:

    @pytest.mark.parametrize("bad_grid, message", [
        ({'a': 1}, "should be a sequence"),
        ({'a': 'abc'}, "should be a sequence"),
        ({'a': {1, 2}}, "should be a sequence"),
        ({'a': []}, "non-empty"),
        ({'a': np.zeros((2, 2))}, "one-dimensional"),
        ([{'a': [1]}, 'not a dict'], "not a dict"),
        ({1: [1, 2]}, "must be strings"),
        (42, "dict or a list of dicts"),
    ])
    def test_invalid_grids_rejected(self, bad_grid, message):
        with pytest.raises(ValidationError, match=message):
            ParameterGrid(bad_grid)

    def test_valid_grid_passes(self):
        check_param_grid([{'a': [1, 2]}, {'b': np.arange(3)}, {}])
