"""Property tests for error handling and method dispatch."""

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from slrec.data.structs import Method, parse_pre_proc
from slrec.utils.error_handling import (
    ConfigurationError,
    ModelFitError,
    ReconstructionError,
    UnsupportedMethod,
    UnsupportedMethodError,
    convert_fit_errors,
)


def test_convert_fit_errors_wraps_numeric_failures():
    """LinAlgError inside a fit surfaces as ModelFitError with the cause kept."""

    @convert_fit_errors("GP")
    def failing_fit():
        raise np.linalg.LinAlgError("matrix is singular")

    with pytest.raises(ModelFitError) as excinfo:
        failing_fit()

    assert excinfo.value.branch == "GP"
    assert isinstance(excinfo.value.cause, np.linalg.LinAlgError)
    assert "singular" in str(excinfo.value)


def test_convert_fit_errors_passes_other_errors():
    @convert_fit_errors("RNN")
    def broken():
        raise KeyError("unrelated")

    with pytest.raises(KeyError):
        broken()


def test_convert_fit_errors_keeps_model_fit_error():
    original = ModelFitError("RNN", "already wrapped")

    @convert_fit_errors("GP")
    def failing():
        raise original

    with pytest.raises(ModelFitError) as excinfo:
        failing()
    assert excinfo.value is original


def test_convert_fit_errors_returns_value():
    @convert_fit_errors("GP")
    def ok(a, b=2):
        return a + b

    assert ok(1, b=3) == 4


def test_error_hierarchy():
    assert issubclass(ModelFitError, ReconstructionError)
    assert issubclass(ConfigurationError, ValueError)
    assert str(UnsupportedMethod("svm")) == "Unknown learning paradigm: 'svm'"


@given(st.sampled_from(["GP", "RNN"]), st.lists(st.booleans(), min_size=2, max_size=3))
@settings(max_examples=30)
def test_method_parse_ignores_case(name, upper_mask):
    """Property: any casing of a known method name resolves to that method."""
    mixed = "".join(
        c.upper() if upper_mask[i % len(upper_mask)] else c.lower()
        for i, c in enumerate(name)
    )
    assert Method.parse(mixed) is Method(name)
    assert Method.parse(f"  {mixed} ") is Method(name)


@given(st.text(min_size=1, max_size=10))
@settings(max_examples=50)
def test_method_parse_rejects_unknown(name):
    """Property: names other than GP/RNN raise UnsupportedMethodError carrying the name."""
    if name.strip().upper() in ("GP", "RNN"):
        assert Method.parse(name) in (Method.GP, Method.RNN)
        return
    with pytest.raises(UnsupportedMethodError) as excinfo:
        Method.parse(name)
    assert excinfo.value.name == name


@pytest.mark.parametrize("value,expected", [
    ("yes", True), ("YES", True), (" No ", False), (True, True), (False, False),
])
def test_parse_pre_proc(value, expected):
    assert parse_pre_proc(value) is expected


def test_parse_pre_proc_rejects_other_values():
    with pytest.raises(ConfigurationError):
        parse_pre_proc("sometimes")
