"""Error types and error handling utilities."""

import functools
import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

logger = logging.getLogger(__name__)


class ReconstructionError(Exception):
    """Base class for all reconstruction failures."""


class InvalidRangeError(ReconstructionError):
    """The requested reconstruction window is empty or inverted."""


class ShapeMismatchError(ReconstructionError):
    """Predictor and response cannot be reconciled onto a common grid."""


class ConfigurationError(ReconstructionError, ValueError):
    """A configuration file or value failed validation."""


class UnsupportedMethodError(ReconstructionError):
    """Raised by method parsing when the name is neither GP nor RNN."""

    def __init__(self, name: str):
        super().__init__(f"Unknown learning paradigm: {name!r}")
        self.name = name


class ModelFitError(ReconstructionError):
    """
    A model branch failed to fit or predict.

    Attributes:
        branch: Name of the model branch ('GP' or 'RNN')
        cause: The underlying exception, if any
    """

    def __init__(self, branch: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{branch} fit failed: {message}")
        self.branch = branch
        self.cause = cause


@dataclass(frozen=True)
class UnsupportedMethod:
    """Error variant returned (not raised) for an unknown analysis method."""
    name: str

    def __str__(self) -> str:
        return f"Unknown learning paradigm: {self.name!r}"


def convert_fit_errors(
    branch: str,
    catch: tuple = (ValueError, np.linalg.LinAlgError, FloatingPointError)
) -> Callable:
    """
    Decorator translating numeric failures inside a fit into ModelFitError.

    Args:
        branch: Model branch name reported on the error
        catch: Tuple of exception types to translate

    Returns:
        Decorated function
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ModelFitError:
                raise
            except catch as e:
                logger.error(f"{branch} branch failed in {func.__name__}: {e}")
                raise ModelFitError(branch, str(e), cause=e) from e

        return wrapper
    return decorator
