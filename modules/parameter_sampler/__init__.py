"""
Parameter Sampler Module
========================

Responsibility:
- Bounded-length random sequences of candidate configurations.
- Uniform sampling with replacement from value lists.
- Variate draws from distributions on a dedicated random stream.
- Building scipy.stats distributions from JSON configuration.
"""

from .distributions import Distribution, ScipyDistribution, as_distribution, from_config
from .parameter_sampler import ParameterSampler, check_random_state

__all__ = [
    'Distribution',
    'ScipyDistribution',
    'as_distribution',
    'from_config',
    'ParameterSampler',
    'check_random_state',
]
