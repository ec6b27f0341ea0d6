import logging

import numpy as np
import pytest

from graphmaker_layout.constants import axis_index
from graphmaker_layout.constraints import ConstraintSet
from graphmaker_layout.logging_utils import apply_debug_logging, debug_log_call, summarize
from graphmaker_layout.solver import linalg


def test_summarize_small_and_large_arrays():
    assert summarize(np.array([1.0, 2.0])) == "ndarray(shape=(2,)), values=[1.0, 2.0]"
    large = summarize(np.arange(100.0))
    assert "shape=(100,)" in large
    assert "min=0" in large and "max=99" in large


def test_summarize_constraint_set():
    assert summarize(ConstraintSet(np.zeros((2, 4)), np.zeros(2))) == "ConstraintSet(rows=2, cols=4)"


def test_wrapped_functions_trace_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="graphmaker_layout.solver.linalg")

    assert linalg.numerical_rank(np.array([1.0, 0.0])) == 1

    assert "Entering numerical_rank" in caplog.text
    assert "Exiting numerical_rank -> 1" in caplog.text


def test_tracing_is_silent_above_debug(caplog):
    caplog.set_level(logging.INFO, logger="graphmaker_layout.solver.linalg")

    linalg.numerical_rank(np.array([1.0]))

    assert "Entering" not in caplog.text


def test_debug_log_call_reraises(caplog):
    logger = logging.getLogger("graphmaker_layout.tests")
    caplog.set_level(logging.DEBUG, logger=logger.name)

    @debug_log_call(logger)
    def boom():
        raise RuntimeError("no")

    with pytest.raises(RuntimeError):
        boom()
    assert "Exception in" in caplog.text


def test_apply_debug_logging_skips_private_and_listed_names():
    def public():
        return 1

    def _private():
        return 2

    def skipped():
        return 3

    namespace = {"__name__": __name__, "public": public, "_private": _private, "skipped": skipped}
    apply_debug_logging(namespace, skip={"skipped"})

    assert getattr(namespace["public"], "_debug_logging_wrapped", False)
    assert namespace["_private"] is _private
    assert namespace["skipped"] is skipped


def test_axis_index():
    assert axis_index("x") == 0
    assert axis_index("y") == 1
    with pytest.raises(ValueError):
        axis_index("z")
