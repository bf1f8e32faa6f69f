"""
Leave-one-batch-out cross-validation of the ridge penalty of the VARX stage.
"""
from dataclasses import dataclass
import logging
from typing import ClassVar

import numpy as np

from .regression import ridge_regression, rms_residual
from .util import _check_batches, _readonly
from .varx import varx_moments, varx_regressors

logger = logging.getLogger(__name__)


def lobo_cv_evaluate(batches, p, feedthrough=False, scale=(1, 1), ridges=(0,)):
    """lobo_cv_evaluate(batches, p[, feedthrough, scale, ridges])

    Evaluate the held-out prediction error of the VARX model for each penalty
    in `ridges` by leaving out one batch at a time.

    The moments of the full dataset are computed once; the moments of each
    held-out batch are then subtracted to obtain the training moments, so each
    fit costs one linear solve.

    Returns
    -------
    errors : array, shape ``(nbatches, ny, len(ridges))``
        Root-mean-square one-step-ahead prediction error on the held-out batch,
        per output channel (in scaled units). The summed squared residuals are
        divided by the full batch length `N`, not by the ``N-p`` residuals.
    """
    batches, nu, ny = _check_batches(batches, min_batches=2)
    ridges = np.ravel(np.asarray(ridges, dtype=float))

    batch_moments = [varx_moments(batch, p, feedthrough, scale)
                     for batch in batches]
    total = sum(batch_moments[1:], batch_moments[0])

    errors = np.full((len(batches), ny, ridges.size), np.nan)
    for (b, batch) in enumerate(batches):
        train = total - batch_moments[b]
        Yb, Zb = varx_regressors(batch.y, batch.u, p, feedthrough, scale)
        Nb = batch.y.shape[1]
        for (l, ridge) in enumerate(ridges):
            Gbl = ridge_regression(train.YZt, train.ZZt, ridge)
            errors[b, :, l] = rms_residual(Yb, Zb, Gbl, Nb)
            logger.debug(f"Held out batch {b}, ridge={ridge:.3e}: "
                         f"rmse={errors[b, :, l]}.")
    return errors


@dataclass(frozen=True)
class LOBOCrossValidation:
    """Result of a leave-one-batch-out cross-validation run.

    Attributes
    ----------
    ords : tuple
        The ``(p, n)`` orders supplied (only `p` is used by the VARX stage).
    feedthrough, autoscale : bool
        Options used.
    rms : tuple
        The ``(rms_y, rms_u)`` scaling levels, ``(1, 1)`` without autoscaling.
    ridges : array
        The grid of ridge penalties.
    errors : array, shape ``(nbatches, ny, nridges)``
        Held-out root-mean-square prediction errors.
    ridge_select : float
        The penalty minimizing the error averaged over batches and channels.
    """
    mode: ClassVar[str] = 'cv'

    ords: tuple
    feedthrough: bool
    autoscale: bool
    rms: tuple
    ridges: np.ndarray
    errors: np.ndarray
    ridge_select: float

    def __post_init__(self):
        _readonly(self.ridges, self.errors)

    @property
    def nbatches(self):
        return self.errors.shape[0]

    @property
    def mean_errors(self):
        """Errors averaged over the held-out batches, shape ``(ny, nridges)``."""
        return self.errors.mean(axis=0)

    @property
    def total_errors(self):
        """Errors averaged over batches and channels, shape ``(nridges,)``."""
        return self.errors.mean(axis=(0, 1))


def select_ridge(ridges, errors):
    """Return the penalty with the smallest error averaged over batches and
    channels (the first one on ties)."""
    return float(ridges[np.argmin(errors.mean(axis=(0, 1)))])


def lobo_cv(batches, ords, ridges, feedthrough=False, autoscale=True,
            rms=(1, 1)):
    """lobo_cv(batches, ords, ridges[, feedthrough, autoscale, rms])

    Run `lobo_cv_evaluate` with the scaling ``1/rms`` and package the result
    with the selected penalty. The inputs are assumed validated by the caller.
    """
    ridges = np.array(ridges, dtype=float, ndmin=1)
    scale = (1/rms[0], 1/rms[1])
    errors = lobo_cv_evaluate(batches, ords[0], feedthrough, scale, ridges)
    ridge_select = select_ridge(ridges, errors)
    logger.info(f"Leave-one-batch-out CV over {len(batches)} batches selected "
                f"ridge={ridge_select:.3e}.")
    return LOBOCrossValidation(tuple(ords), feedthrough, autoscale,
                               tuple(rms), ridges, errors, ridge_select)
