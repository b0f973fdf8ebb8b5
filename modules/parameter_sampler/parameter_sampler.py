import numbers
from typing import Any, Dict, Iterator, Mapping

import numpy as np

from modules.parameter_sampler.distributions import as_distribution
from utils.constants import SAMPLER_SEED_BOUND
from utils.exceptions import ValidationError
from utils.validation import check_param_mapping, check_value_list


def check_random_state(seed) -> np.random.RandomState:
    """
    Turn ``seed`` into a privately owned ``RandomState``.

    None gives a fresh generator seeded from OS entropy (never the numpy
    global singleton); an int seeds a new generator; an existing
    ``RandomState`` is used as is.
    """
    if seed is None:
        return np.random.RandomState()
    if isinstance(seed, numbers.Integral) and not isinstance(seed, bool):
        return np.random.RandomState(int(seed))
    if isinstance(seed, np.random.RandomState):
        return seed
    raise ValidationError(f"{seed!r} cannot be used to seed a numpy.random.RandomState instance")


class ParameterSampler:
    """
    Generator on parameters sampled from given distributions.

    Produces exactly ``n_iter`` candidates. Each candidate is an independent
    draw, so duplicates are possible even when every parameter is a list.

    Two random streams are kept apart:
    - the list stream draws uniformly, with replacement, from value lists;
    - the distribution stream feeds ``Distribution.draw``. It is seeded once,
      at construction, from a single draw of the list stream.

    Parameter names are visited in ascending order so a given seed yields
    the same sequence on every platform. Iterating consumes both streams: a
    second pass over the same sampler continues the sequence instead of
    repeating it.

    Args:
        param_distributions: Dict mapping parameter names to a Distribution
            (or a scipy.stats frozen distribution) or a non-empty sequence.
        n_iter: Number of candidates produced.
        random_state: None, int seed or ``numpy.random.RandomState`` for the
            list stream.

    Example:
        >>> from scipy.stats import expon
        >>> sampler = ParameterSampler({'a': [1, 2], 'b': expon()}, n_iter=4, random_state=0)
        >>> len(list(sampler))
        4
    """

    def __init__(self, param_distributions: Mapping[str, Any], n_iter: int, random_state=None):
        check_param_mapping(param_distributions)
        if not isinstance(n_iter, numbers.Integral) or isinstance(n_iter, bool) or n_iter < 0:
            raise ValidationError(f"n_iter must be a non-negative integer, got {n_iter!r}")

        items = []
        for name in sorted(param_distributions):
            value = param_distributions[name]
            distribution = as_distribution(value)
            if distribution is None:
                check_value_list(name, value)
                items.append((name, value, None))
            else:
                items.append((name, None, distribution))

        self.param_distributions = param_distributions
        self.n_iter = int(n_iter)
        self._items = tuple(items)
        self.random_state = check_random_state(random_state)
        seed = self.random_state.randint(SAMPLER_SEED_BOUND)
        self.distribution_random_state = np.random.RandomState(seed)

    def _draw(self) -> Dict[str, Any]:
        params = {}
        for name, values, distribution in self._items:
            if distribution is not None:
                params[name] = distribution.draw(self.distribution_random_state)
            else:
                params[name] = values[self.random_state.randint(len(values))]
        return params

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        for _ in range(self.n_iter):
            yield self._draw()

    def __len__(self) -> int:
        """Number of points that will be sampled."""
        return self.n_iter
