"""
Fit regression models (for system identification) from accumulated moments.

ridge_regression
rms_residual
"""
import numpy as np

from .linalg import mrdivide


def ridge_regression(YXt, XXt, mu=0):
    """ridge_regression(YXt, XXt[, mu])

    Solve the (ridge-regularized) normal equations of the multiple regression
    :math:`Y=\\Theta X+E` given the moments :math:`YX^\\top` and
    :math:`XX^\\top`:

    .. math::

        \\hat\\Theta (XX^\\top + \\mu I) = YX^\\top

    `mu=0` recovers ordinary least squares. A singular :math:`XX^\\top`
    raises `numpy.linalg.LinAlgError`.
    """
    p, M = XXt.shape
    n, p1 = YXt.shape
    if p != M or p != p1:
        raise ValueError("Expected square XXt matching the columns of YXt: "
                         f"got XXt.shape={XXt.shape} and YXt.shape="
                         f"{YXt.shape}.")
    if mu == 0:
        return mrdivide(YXt, XXt)
    return mrdivide(YXt, XXt + mu*np.eye(p))


def rms_residual(Y, X, Theta, nsamples=None):
    """rms_residual(Y, X, Theta[, nsamples])

    Row-wise root-mean-square of the residual :math:`Y-\\Theta X`. The summed
    squares are divided by `nsamples` (default: the number of columns).
    """
    resid = Y - Theta @ X
    if nsamples is None:
        nsamples = resid.shape[1]
    return np.sqrt(np.sum(resid**2, axis=1) / nsamples)
