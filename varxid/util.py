"""
Utility and data checking functions for other modules.

Batch
DataValidationError
DataTypeError
"""
from collections.abc import Mapping
from typing import NamedTuple

import numpy as np


class DataValidationError(ValueError):
    """Raised when input data or identification options fail validation.

    Numerical failures (singular normal equations, failed decompositions) are
    reported as `numpy.linalg.LinAlgError` instead and are never wrapped.
    """


class DataTypeError(DataValidationError, TypeError):
    """Raised when the dataset or one of its batches has the wrong type."""


class Batch(NamedTuple):
    """One contiguous batch of input-output data, samples in columns."""
    y: np.ndarray
    u: np.ndarray


def as_batch(item):
    """Convert a `Batch`, a mapping with keys ``'y'`` and ``'u'``, or an object
    with ``y`` and ``u`` attributes into a `Batch` of 2D float arrays. 1D
    signals are promoted to a single channel."""
    if isinstance(item, Batch):
        y, u = item
    elif isinstance(item, Mapping):
        try:
            y, u = item['y'], item['u']
        except KeyError as err:
            raise DataTypeError(f"Expected batch mapping with keys 'y' and "
                                f"'u': missing {err}.") from None
    elif hasattr(item, 'y') and hasattr(item, 'u'):
        y, u = item.y, item.u
    else:
        raise DataTypeError(f"Unknown batch type: {type(item)}.")

    y = np.atleast_2d(np.asarray(y, dtype=float))
    u = np.atleast_2d(np.asarray(u, dtype=float))
    if y.ndim != 2 or u.ndim != 2:
        raise DataValidationError("Expected 2D `y` and `u` arrays: got "
                                  f"y.ndim={y.ndim} and u.ndim={u.ndim}.")
    _check_UY_data(u, y)
    return Batch(y, u)


def _check_UY_data(U, Y, p=None, m=None):
    m1, Nu, p1, Ny = U.shape + Y.shape
    if Nu != Ny:
        raise DataValidationError("Expected U and Y to have the same number of "
                                  f"samples: got Nu={Nu} and Ny={Ny} instead.")
    if (p is not None) and (p != p1):
        raise DataValidationError(f"Expected Y to have first dimension {p}: "
                                  f"got {p1} instead.")
    if (m is not None) and (m != m1):
        raise DataValidationError(f"Expected U to have first dimension {m}: "
                                  f"got {m1} instead.")
    return m1, p1, Nu


def _check_batches(batches, min_batches=1):
    """_check_batches(batches[, min_batches])

    Validate a dataset and return ``(batches, nu, ny)``, where `batches` is a
    list of `Batch` tuples with consistent channel counts.
    """
    if not isinstance(batches, (list, tuple)):
        raise DataTypeError("Expected the dataset to be a list or tuple of "
                            f"batches: got {type(batches)} instead.")
    if len(batches) == 0:
        raise DataValidationError("The dataset cannot be empty.")
    if len(batches) < min_batches:
        raise DataValidationError(f"At least {min_batches} batches required: "
                                  f"got {len(batches)}.")

    batches = [as_batch(item) for item in batches]
    nu, ny = batches[0].u.shape[0], batches[0].y.shape[0]
    for (b, batch) in enumerate(batches[1:], start=1):
        try:
            _check_UY_data(batch.u, batch.y, p=ny, m=nu)
        except DataValidationError as err:
            raise DataValidationError(f"Batch {b}: {err}") from None
    return batches, nu, ny


def _check_flag(value, label):
    """Flags are 0/1 (or bool); returns a bool."""
    if np.ndim(value) == 0 and value in (0, 1):
        return bool(value)
    raise DataValidationError(f"Expected `{label}` to be 0 or 1: got "
                              f"{value!r} instead.")


def _check_ords(ords, ny):
    """Check ``ords=(p, n)`` and return it as a tuple of ints."""
    try:
        ords = np.ravel(np.asarray(ords, dtype=float))
    except (TypeError, ValueError):
        raise DataValidationError(f"Expected numeric `ords=(p, n)`: got "
                                  f"{ords!r}.") from None
    if ords.size != 2:
        raise DataValidationError("Expected `ords=(p, n)` to have 2 elements: "
                                  f"got {ords.size} instead.")
    if not np.all(np.isfinite(ords)) or np.any(ords != np.round(ords)):
        raise DataValidationError(f"Expected integer orders: got {ords}.")
    p, n = int(ords[0]), int(ords[1])
    if p < 1:
        raise DataValidationError(f"Expected lag order p >= 1: got p={p}.")
    if n < 1 or n > p*ny:
        raise DataValidationError(f"Expected state order 1 <= n <= p*ny={p*ny}:"
                                  f" got n={n}.")
    return p, n


def _check_ridge(ridge):
    """Return ``(ridge, is_grid)`` with a float for a single penalty or a 1D
    array for a penalty grid. ``None`` means no regularization."""
    if ridge is None:
        return 0.0, False
    try:
        ridge = np.ravel(np.asarray(ridge, dtype=float))
    except (TypeError, ValueError):
        raise DataValidationError(f"Expected numeric ridge penalties: got "
                                  f"{ridge!r}.") from None
    if ridge.size == 0:
        raise DataValidationError("Expected at least one ridge penalty.")
    if not np.all(np.isfinite(ridge)) or np.any(ridge < 0):
        raise DataValidationError("Expected finite ridge penalties >= 0: got "
                                  f"{ridge} instead.")
    if ridge.size == 1:
        return float(ridge[0]), False
    return ridge, True


def _check_chol_shift(chol_shift):
    if np.ndim(chol_shift) != 0:
        raise DataValidationError("Expected a scalar `chol_shift`: got shape "
                                  f"{np.shape(chol_shift)}.")
    try:
        chol_shift = float(chol_shift)
    except (TypeError, ValueError):
        raise DataValidationError(f"Expected a numeric `chol_shift`: got "
                                  f"{chol_shift!r}.") from None
    if not np.isfinite(chol_shift):
        raise DataValidationError("Expected a finite `chol_shift`: got "
                                  f"{chol_shift}.")
    return chol_shift


def _readonly(*arrays):
    """Mark arrays as read-only (skips ``None``)."""
    for M in arrays:
        if isinstance(M, np.ndarray):
            M.setflags(write=False)
