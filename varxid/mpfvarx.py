"""
Estimate linear state-space models directly from vector autoregressive (VARX)
block coefficients followed by weighted truncation of the predictor form.

mpfvarx
VARXFit
MPFVARX
"""
from dataclasses import dataclass
import logging
from typing import ClassVar, Optional

import control as ct
import numpy as np

from .crossval import lobo_cv
from .ssid import innovations_form, mfir, weighted_truncation
from .util import DataValidationError, _check_batches, _check_chol_shift, \
    _check_flag, _check_ords, _check_ridge, _readonly
from .varx import batchvarx, rms_scaling

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VARXFit:
    r"""A state-space model identified by `mpfvarx`,

    .. math::
        x(k+1) &= Ax(k) + Bu(k) + Ke(k) \\
        y(k) &= Cx(k) + Du(k) + e(k)

    together with the intermediate results of the identification.

    Attributes
    ----------
    ords : tuple
        The ``(p, n)`` lag and state orders.
    feedthrough, autoscale : bool
        Options used.
    rms : tuple
        The ``(rms_y, rms_u)`` scaling levels, ``(1, 1)`` without autoscaling.
    ridge : float
        Ridge penalty of the VARX stage.
    ntot : int
        Total number of samples used.
    spp : float
        Samples per parameter, ``ntot/(p*ny)``.
    H : array
        VARX blocks ``[H_1, ..., H_p]`` (scaled units), each ``(ny, nu+ny)``.
    H0 : array or None
        Direct term block ``[D, 0]`` of the predictor if `feedthrough=True`.
    sv : array
        Singular values of the weighted truncation, descending.
    A, B, C, D, K : array
        Innovations form of the identified system (original units).
    """
    mode: ClassVar[str] = 'fit'

    ords: tuple
    feedthrough: bool
    autoscale: bool
    rms: tuple
    ridge: float
    ntot: int
    spp: float
    H: np.ndarray
    H0: Optional[np.ndarray]
    sv: np.ndarray
    A: np.ndarray
    B: np.ndarray
    C: np.ndarray
    D: np.ndarray
    K: np.ndarray

    def __post_init__(self):
        _readonly(self.H, self.H0, self.sv, self.A, self.B, self.C, self.D,
                  self.K)

    @property
    def n(self):
        return self.A.shape[0]

    @property
    def poles(self):
        return np.linalg.eigvals(self.A)

    def markov(self, k):
        """Return the first `k` Markov parameters ``[D, CB, CAB, ...]``
        stacked horizontally."""
        blocks = [self.D]
        AkB = self.B
        for _ in range(1, k):
            blocks.append(self.C @ AkB)
            AkB = self.A @ AkB
        return np.hstack(blocks)

    def predict(self, Y, U, x0=None):
        """One-step-ahead predictions of `Y` given `U` with the steady-state
        Kalman predictor. Starts from a zero state by default."""
        x = np.zeros(self.n) if x0 is None else np.asarray(x0, dtype=float)
        Y, U = np.atleast_2d(Y), np.atleast_2d(U)
        if x.shape != (self.n,):
            raise ValueError(f"Expected x0 to have shape ({self.n},): got "
                             f"{x.shape}.")
        if Y.shape[1] != U.shape[1]:
            raise ValueError("Expected U and Y to have the same number of "
                             f"samples: got Nu={U.shape[1]} and "
                             f"Ny={Y.shape[1]} instead.")

        Yhat = np.empty(Y.shape)
        for k in range(Y.shape[1]):
            Yhat[:, k] = self.C @ x + self.D @ U[:, k]
            x = self.A @ x + self.B @ U[:, k] + self.K @ (Y[:, k] - Yhat[:, k])
        return Yhat

    def sim(self, U, x0=None):
        """Simulate the deterministic part of the model (noise-free)."""
        x = np.zeros(self.n) if x0 is None else np.asarray(x0, dtype=float)
        U = np.atleast_2d(U)
        if U.shape[0] != self.B.shape[1]:
            raise ValueError(f"Expected dimension 0 of U to be "
                             f"m={self.B.shape[1]}: got m={U.shape[0]}")

        Y = np.empty((self.C.shape[0], U.shape[1]))
        for k in range(U.shape[1]):
            Y[:, k] = self.C @ x + self.D @ U[:, k]
            x = self.A @ x + self.B @ U[:, k]
        return Y

    def to_ss(self, dt=True):
        """Return the deterministic part as a discrete-time
        `control.StateSpace`."""
        return ct.ss(self.A, self.B, self.C, self.D, dt)


def _setup(batches, ords, feedthrough, autoscale, chol_shift):
    batches, nu, ny = _check_batches(batches)
    p, n = _check_ords(ords, ny)
    feedthrough = _check_flag(feedthrough, 'feedthrough')
    autoscale = _check_flag(autoscale, 'autoscale')
    chol_shift = _check_chol_shift(chol_shift)
    return batches, nu, ny, (p, n), feedthrough, autoscale, chol_shift


def _fit(batches, nu, ny, ords, feedthrough, autoscale, chol_shift, ridge,
         rms):
    p, n = ords
    scale = (1/rms[0], 1/rms[1])

    # Step 1: VARX blocks Ghat=[H(1), ..., H(p)] (and D if feedthrough)
    Ghat, ntot, ZZt = batchvarx(batches, p, feedthrough, scale, ridge)
    spp = ntot / (p*ny)
    logger.info(f"Estimated VARX(p={p}) from ntot={ntot} samples "
                f"({spp:.1f} samples per parameter).")
    if spp < 1:
        logger.warning(f"Fewer samples than parameters (spp={spp:.2f}); "
                       "consider a ridge penalty or a smaller p.")

    nH = (nu + ny)*p
    H = Ghat[:, :nH]
    if feedthrough:
        H0 = np.hstack([Ghat[:, nH:], np.zeros((ny, ny))])
        # The direct term rows and columns are not part of the state map
        ZZt = ZZt[:nH, :nH]
    else:
        H0 = None

    # Step 2: weighted truncation of the predictor form
    Apf, Bpf, Cpf, Dpf = mfir(H, p, H0)
    A, B, C, D, sv = weighted_truncation(Apf, Bpf, Cpf, Dpf, ZZt, ntot, n,
                                         chol_shift)

    # Step 3: recover the innovations form in the original units
    A, B, C, D, K = innovations_form(A, B, C, D, nu, rms)

    return VARXFit(ords, feedthrough, autoscale, tuple(rms), float(ridge),
                   ntot, spp, H.copy(), H0, sv, A, B, C, D, K)


def mpfvarx(batches, ords, feedthrough=False, autoscale=True, chol_shift=-1,
            ridge=None):
    r"""mpfvarx(batches, ords[, feedthrough, autoscale, chol_shift, ridge])

    Estimate a state-space system directly from the VARX block coefficients
    followed by weighted truncation of the predictor form.

    Parameters
    ----------
    batches : list or tuple
        Input-output data, one `Batch` (or mapping with keys ``'y'`` and
        ``'u'``) per contiguous batch; samples in columns. Detrending is the
        responsibility of the caller.
    ords : sequence
        ``(p, n)``: the VARX lag length `p` and the state dimension `n` of the
        returned system, ``1 <= n <= p*ny``.
    feedthrough : bool, optional
        Estimate a direct feedthrough term `D`. Default is `False`.
    autoscale : bool, optional
        Scale the inputs and outputs to unit (global) RMS before estimating
        the VARX model. Default is `True`.
    chol_shift : float, optional
        Values ``>= 0`` enable the Cholesky based calculation of the
        truncating transform (see `truncating_transform`). Default is `-1`.
    ridge : float or array, optional
        A single value ``>= 0`` is the ridge penalty of the VARX estimate. A
        vector of values ``>= 0`` runs leave-one-batch-out cross-validation of
        the VARX stage instead and returns without a model.

    Returns
    -------
    result : VARXFit or LOBOCrossValidation
        A `VARXFit` (``result.mode == 'fit'``), or a `LOBOCrossValidation`
        (``result.mode == 'cv'``) if a penalty grid was supplied.
    """
    batches, nu, ny, ords, feedthrough, autoscale, chol_shift = \
        _setup(batches, ords, feedthrough, autoscale, chol_shift)
    ridge, is_grid = _check_ridge(ridge)
    if is_grid and len(batches) < 2:
        raise DataValidationError("Cross-validation requires at least 2 "
                                  f"batches: got {len(batches)}.")

    # (optional) Step 0: scale signals to unit RMS
    rms = rms_scaling(batches) if autoscale else (1.0, 1.0)

    if is_grid:
        return lobo_cv(batches, ords, ridge, feedthrough, autoscale, rms)
    return _fit(batches, nu, ny, ords, feedthrough, autoscale, chol_shift,
                ridge, rms)


class MPFVARX(object):
    """MPFVARX(p, n[, feedthrough, autoscale, chol_shift])

    A class for identifying state-space models with `mpfvarx` and selecting
    the ridge penalty by leave-one-batch-out cross-validation.

    Attributes
    ----------
    p, n : int
        VARX lag length and state dimension.
    feedthrough, autoscale : bool
    chol_shift : float
    model : VARXFit or None
        The last fitted model.
    cv : LOBOCrossValidation or None
        The last cross-validation result.
    """

    def __init__(self, p, n, feedthrough=False, autoscale=True, chol_shift=-1):
        self.p = p
        self.n = n
        self.feedthrough = feedthrough
        self.autoscale = autoscale
        self.chol_shift = chol_shift
        self.model = None
        self.cv = None

    def _setup(self, batches):
        setup = _setup(batches, (self.p, self.n), self.feedthrough,
                       self.autoscale, self.chol_shift)
        batches, _, _, _, _, autoscale, _ = setup
        rms = rms_scaling(batches) if autoscale else (1.0, 1.0)
        return setup, rms

    def fit(self, batches, ridge=None):
        """Fit the model with a single ridge penalty and return it."""
        ridge, is_grid = _check_ridge(ridge)
        if is_grid:
            raise DataValidationError("Expected a single ridge penalty: use "
                                      "`cross_validate` for a grid.")
        setup, rms = self._setup(batches)
        self.model = _fit(*setup, ridge, rms)
        return self.model

    def cross_validate(self, batches, ridges):
        """Run leave-one-batch-out cross-validation over `ridges`."""
        ridges, _ = _check_ridge(ridges)
        setup, rms = self._setup(batches)
        batches, nu, ny, ords, feedthrough, autoscale, _ = setup
        if len(batches) < 2:
            raise DataValidationError("Cross-validation requires at least 2 "
                                      f"batches: got {len(batches)}.")
        self.cv = lobo_cv(batches, ords, ridges, feedthrough, autoscale, rms)
        return self.cv

    def fit_cv(self, batches, ridges):
        """Cross-validate over `ridges`, then fit with the selected penalty.
        Returns ``(model, cv)``."""
        cv = self.cross_validate(batches, ridges)
        return self.fit(batches, cv.ridge_select), cv

    def predict(self, Y, U, x0=None):
        if self.model is None:
            raise ValueError("Run `MPFVARX.fit()` before predicting.")
        return self.model.predict(Y, U, x0)
