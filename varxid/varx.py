"""
Fit vector autoregressive models with exogenous inputs (VARX) from batches of
input-output data.
"""
from dataclasses import dataclass
from functools import reduce
import logging
import operator

import numpy as np

from .regression import ridge_regression
from .util import DataValidationError, _check_UY_data, _check_batches

logger = logging.getLogger(__name__)


def varx_regressors(Y, U, p, feedthrough=False, scale=(1, 1)):
    r"""varx_regressors(Y, U, p[, feedthrough, scale])

    Return the targets and lagged regressors of one contiguous batch of
    input-output data,

    .. math::
        Y_p &= \begin{bmatrix} y(p) & y(p+1) & \ldots & y(N-1) \end{bmatrix} \\
        Z_p &= \begin{bmatrix} z(p-1) & z(p) & \hdots & z(N-2) \\
                               z(p-2) & z(p-1) & \ldots & z(N-3) \\
                               \vdots & \vdots && \vdots \\
                               z(0) & z(1) & \ldots & z(N-p-1) \end{bmatrix}

    where :math:`z=[u^\top,\; y^\top]^\top`, i.e. the most recent lag comes
    first. If `feedthrough=True`, the current input is appended,

    .. math::
        Z_p \rightarrow \begin{bmatrix} Z_p \\ \begin{matrix} u(p) & u(p+1) &
            \ldots & u(N-1) \end{matrix} \end{bmatrix}

    Both signals are multiplied by ``scale=(scale_y, scale_u)`` first.

    Returns
    -------
    Yp : array, shape ``(ny, N-p)``
    Zp : array, shape ``(p*(nu+ny), N-p)``, or ``(p*(nu+ny)+nu, N-p)`` with
        feedthrough.
    """
    nu, ny, N = _check_UY_data(U, Y)
    if N <= p:
        raise DataValidationError(f"Expected more than p={p} samples per batch:"
                                  f" got N={N}.")
    Neff = N - p
    nz = nu + ny

    Z = np.vstack([U*scale[1], Y*scale[0]])
    Zp = np.empty((nz*p + (nu if feedthrough else 0), Neff))
    for i in range(p):
        Zp[i*nz:(i+1)*nz, :] = Z[:, p-i-1:N-i-1]
    if feedthrough:
        Zp[nz*p:, :] = Z[:nu, p:]

    return Y[:, p:]*scale[0], Zp


def io_covariance(batches):
    """io_covariance(batches)

    Return the output and input covariances ``(Ryy, Ruu)`` averaged over all
    samples of all batches (no mean removal).
    """
    batches, nu, ny = _check_batches(batches)
    Ryy = sum(batch.y @ batch.y.T for batch in batches)
    Ruu = sum(batch.u @ batch.u.T for batch in batches)
    N = sum(batch.y.shape[1] for batch in batches)
    return Ryy / N, Ruu / N


def rms_scaling(batches):
    """rms_scaling(batches)

    Return the global root-mean-square levels ``(rms_y, rms_u)`` of the output
    and input signals. Multiplying by their reciprocals scales the data to unit
    RMS.
    """
    Ryy, Ruu = io_covariance(batches)
    rmsy = np.sqrt(np.trace(Ryy) / Ryy.shape[0])
    rmsu = np.sqrt(np.trace(Ruu) / Ruu.shape[0])
    if rmsy == 0 or rmsu == 0:
        raise DataValidationError("Cannot autoscale an identically zero signal:"
                                  f" got rms_y={rmsy} and rms_u={rmsu}.")
    return float(rmsy), float(rmsu)


@dataclass(frozen=True)
class VARXMoments:
    """Second moments of the VARX regression :math:`Y=GZ+E` summed over
    batches. Adding two instances combines their batches; subtracting removes
    a batch again."""
    YZt: np.ndarray
    ZZt: np.ndarray
    nsamples: int

    def __add__(self, other):
        return VARXMoments(self.YZt + other.YZt, self.ZZt + other.ZZt,
                           self.nsamples + other.nsamples)

    def __sub__(self, other):
        return VARXMoments(self.YZt - other.YZt, self.ZZt - other.ZZt,
                           self.nsamples - other.nsamples)


def varx_moments(batch, p, feedthrough=False, scale=(1, 1)):
    """varx_moments(batch, p[, feedthrough, scale])

    Return the `VARXMoments` of a single batch. `nsamples` counts all samples
    of the batch, including the `p` initial samples used only as regressors.
    """
    Yp, Zp = varx_regressors(batch.y, batch.u, p, feedthrough, scale)
    logger.debug(f"Batch with N={batch.y.shape[1]} samples, "
                 f"{Zp.shape[1]} regression samples.")
    return VARXMoments(Yp @ Zp.T, Zp @ Zp.T, batch.y.shape[1])


def accumulate_moments(batches, p, feedthrough=False, scale=(1, 1)):
    """accumulate_moments(batches, p[, feedthrough, scale])

    Sum the per-batch `VARXMoments` over the dataset. The batches are
    independent and the sum is associative, so the per-batch terms may be
    computed in any order before this reduction.
    """
    return reduce(operator.add,
                  (varx_moments(batch, p, feedthrough, scale)
                   for batch in batches))


def batchvarx(batches, p, feedthrough=False, scale=(1, 1), ridge=0):
    r"""batchvarx(batches, p[, feedthrough, scale, ridge])

    Estimate the VARX model

    .. math::
        y(k) = \sum_{i=1}^{p} H_i z(k-i) + D u(k) + e(k)

    from a list of batches by squaring the regressors batch by batch and then
    solving :math:`\hat G(ZZ^\top+\lambda I)=YZ^\top` once, where
    :math:`\lambda` is the `ridge` penalty.

    Returns
    -------
    Ghat : array
        :math:`[H_1, \ldots, H_p]` each of dimension ``(ny, nu+ny)``, with
        :math:`D` (dimension ``(ny, nu)``) appended if `feedthrough=True`.
    ntot : int
        Total number of samples in the dataset.
    ZZt : array
        Accumulated regressor moment :math:`ZZ^\top`.
    """
    batches, nu, ny = _check_batches(batches)
    moments = accumulate_moments(batches, p, feedthrough, scale)
    Ghat = ridge_regression(moments.YZt, moments.ZZt, ridge)
    if Ghat.shape[0] != ny:
        raise RuntimeError(f"Expected {ny} rows in the VARX coefficients: got "
                           f"{Ghat.shape[0]} instead.")
    return Ghat, moments.nsamples, moments.ZZt
