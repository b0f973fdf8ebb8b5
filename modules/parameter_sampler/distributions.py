"""
Distribution capability used by the sampler.

A distribution only has to draw one value from a caller-owned random source.
scipy.stats frozen distributions are adapted once, when the sampler is built.
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable

import numpy as np
import scipy.stats

from utils.exceptions import ConfigurationError


@runtime_checkable
class Distribution(Protocol):
    """Anything that can draw one variate from a random source."""

    def draw(self, random_state: np.random.RandomState) -> Any:
        ...


class ScipyDistribution:
    """Adapter exposing a scipy.stats frozen distribution as a Distribution."""

    def __init__(self, frozen):
        self.frozen = frozen

    def draw(self, random_state: np.random.RandomState) -> Any:
        return self.frozen.rvs(random_state=random_state)

    def __repr__(self) -> str:
        dist = getattr(self.frozen, 'dist', None)
        name = getattr(dist, 'name', type(self.frozen).__name__)
        return f"ScipyDistribution({name}, args={getattr(self.frozen, 'args', ())})"


def as_distribution(value: Any) -> Optional[Distribution]:
    """
    Return ``value`` as a Distribution, or None when it is a plain value list.
    """
    if isinstance(value, Distribution):
        return value
    if callable(getattr(value, 'rvs', None)):
        return ScipyDistribution(value)
    return None


def from_config(spec: Dict[str, Any]) -> ScipyDistribution:
    """
    Build a distribution from a JSON description.

    Example:
        {"distribution": "loguniform", "args": [1e-3, 1e2]}
    """
    name = spec.get('distribution')
    if not name:
        raise ConfigurationError(f"Distribution spec is missing 'distribution': {spec}")
    factory = getattr(scipy.stats, name, None)
    if factory is None or not callable(factory):
        raise ConfigurationError(f"Unknown scipy.stats distribution: {name}")
    try:
        frozen = factory(*spec.get('args', []), **spec.get('kwargs', {}))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid arguments for distribution '{name}': {e}") from e
    return ScipyDistribution(frozen)
