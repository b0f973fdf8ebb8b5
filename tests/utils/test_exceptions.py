import logging
from unittest.mock import MagicMock

import pytest
from utils.error_handling import handle_engine_errors
from utils.exceptions import (
    ParamSearchException,
    ConfigurationError,
    ValidationError,
    IndexOutOfRangeError,
    EvaluationError,
    InternalConsistencyError,
    FitFailedWarning,
)

def test_exception_inheritance():
    err = ConfigurationError("Test error")
    assert isinstance(err, ParamSearchException)
    assert isinstance(err, Exception)
    assert str(err) == "Test error"

def test_validation_errors_are_value_errors():
    assert issubclass(ValidationError, ValueError)
    assert issubclass(IndexOutOfRangeError, ValidationError)
    assert issubclass(IndexOutOfRangeError, IndexError)

@pytest.mark.parametrize("exc_class", [EvaluationError, InternalConsistencyError])
def test_search_errors_share_base(exc_class):
    assert issubclass(exc_class, ParamSearchException)

def test_fit_failed_is_a_warning():
    assert issubclass(FitFailedWarning, UserWarning)


class DummyEngine:
    def __init__(self):
        self.logger = MagicMock(spec=logging.Logger)

    @handle_engine_errors("Dummy Operation")
    def run(self, exc=None):
        if exc is not None:
            raise exc
        return "ok"


def test_handle_engine_errors_passes_result_through():
    assert DummyEngine().run() == "ok"

def test_handle_engine_errors_reraises_package_errors():
    engine = DummyEngine()
    with pytest.raises(ValidationError, match="bad input"):
        engine.run(ValidationError("bad input"))
    engine.logger.error.assert_not_called()

def test_handle_engine_errors_wraps_unexpected_errors():
    engine = DummyEngine()
    with pytest.raises(ParamSearchException, match="Dummy Operation failed: boom") as exc_info:
        engine.run(RuntimeError("boom"))
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    engine.logger.error.assert_called_once()
