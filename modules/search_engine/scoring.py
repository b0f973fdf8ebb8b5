from typing import Any, Callable, Optional, Union

from sklearn.metrics import check_scoring

from modules.base.protocols import Scorer
from utils.exceptions import ConfigurationError


def resolve_scorer(estimator: Any, scoring: Optional[Union[str, Callable]]) -> Scorer:
    """
    Turn ``scoring`` into a ``scorer(estimator, X, y)`` callable.

    None falls back to the estimator's own ``score`` method.

    Raises:
        ConfigurationError: If the scoring name is unknown, or no scoring was
            given and the estimator has no ``score`` method.
    """
    try:
        return check_scoring(estimator, scoring=scoring)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"No usable score function for {estimator!r} (scoring={scoring!r}): {e}"
        ) from e
