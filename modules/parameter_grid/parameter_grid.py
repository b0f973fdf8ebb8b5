import operator
from collections.abc import Mapping, Sequence
from functools import reduce
from itertools import product
from typing import Any, Dict, Iterator, List, Tuple, Union

from utils.exceptions import IndexOutOfRangeError, ValidationError
from utils.validation import check_param_mapping, check_value_list

GridSpec = Union[Mapping, Sequence]


def _as_grid_list(param_grid: GridSpec) -> List[Mapping]:
    # A single dict is a grid with one sub-space
    if isinstance(param_grid, Mapping):
        return [param_grid]
    if isinstance(param_grid, (str, bytes)) or not isinstance(param_grid, Sequence):
        raise ValidationError(
            f"Parameter grid should be a dict or a list of dicts, got {type(param_grid).__name__}"
        )
    return list(param_grid)


def check_param_grid(param_grid: GridSpec) -> None:
    """
    Validate a grid specification.

    Raises:
        ValidationError: If a sub-space is not a mapping, or a value
            collection is not a finite, non-empty, one-dimensional sequence.
    """
    for sub_grid in _as_grid_list(param_grid):
        check_param_mapping(sub_grid)
        for name, values in sub_grid.items():
            check_value_list(name, values)


class _SubGrid:
    """Pre-computed mixed-radix layout of one sub-space."""

    __slots__ = ('keys', 'value_lists', 'sizes', 'total')

    def __init__(self, params: Mapping):
        # Descending names: the lexicographically greatest parameter is the
        # least-significant digit and cycles fastest.
        ordered = sorted(params.items(), key=operator.itemgetter(0), reverse=True)
        self.keys: Tuple[str, ...] = tuple(k for k, _ in ordered)
        self.value_lists: Tuple[Any, ...] = tuple(v for _, v in ordered)
        self.sizes: Tuple[int, ...] = tuple(len(v) for v in self.value_lists)
        self.total: int = reduce(operator.mul, self.sizes, 1)

    def decode(self, ind: int) -> Dict[str, Any]:
        out = {}
        for key, v_list, n in zip(self.keys, self.value_lists, self.sizes):
            ind, offset = divmod(ind, n)
            out[key] = v_list[offset]
        return out

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        if not self.keys:
            yield {}
            return
        # product() varies its last argument fastest, so feed ascending names
        keys = self.keys[::-1]
        for values in product(*self.value_lists[::-1]):
            yield dict(zip(keys, values))


class ParameterGrid(Sequence):
    """
    Grid of parameters with a discrete number of values for each.

    Can be indexed like a list and iterated lazily; candidates are produced
    on demand and never stored.

    Args:
        param_grid: Dict mapping parameter names to sequences of allowed
            values, or a list of such dicts. An empty dict stands for the
            single empty assignment. A list of dicts spans the union of the
            sub-grids, explored in the declared order.

    Ordering:
        Within a sub-grid, parameter names are sorted in descending order
        and the first of them (lexicographically greatest) varies fastest:

        >>> list(ParameterGrid({'a': [1, 2], 'b': [True, False]})) == [
        ...     {'a': 1, 'b': True}, {'a': 1, 'b': False},
        ...     {'a': 2, 'b': True}, {'a': 2, 'b': False}]
        True
        >>> grid = [{'kernel': ['linear']}, {'kernel': ['rbf'], 'gamma': [1, 10]}]
        >>> ParameterGrid(grid)[1] == {'kernel': 'rbf', 'gamma': 1}
        True
    """

    def __init__(self, param_grid: GridSpec):
        check_param_grid(param_grid)
        self.param_grid = tuple(_as_grid_list(param_grid))
        self._sub_grids = tuple(_SubGrid(p) for p in self.param_grid)
        self._size = sum(sub.total for sub in self._sub_grids)

    def __len__(self) -> int:
        """Number of points on the grid."""
        return self._size

    def __getitem__(self, ind) -> Dict[str, Any]:
        """
        Get the parameters that would be ``ind``th in iteration.

        Raises:
            IndexOutOfRangeError: If ``ind`` is outside ``[0, len(self))``.
        """
        if isinstance(ind, slice):
            raise TypeError("ParameterGrid does not support slicing")
        try:
            ind = operator.index(ind)
        except TypeError as e:
            raise IndexOutOfRangeError(f"ParameterGrid indices must be integers, got {ind!r}") from e
        if ind < 0 or ind >= self._size:
            raise IndexOutOfRangeError(
                f"ParameterGrid index {ind} out of range for grid of size {self._size}"
            )

        for sub in self._sub_grids:
            if ind < sub.total:
                return sub.decode(ind)
            # Try the next grid
            ind -= sub.total

        raise IndexOutOfRangeError("ParameterGrid index out of range")

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        """Iterate over the points in the grid, in index order."""
        for sub in self._sub_grids:
            yield from sub

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self.param_grid)!r})"
