"""
Realize and reduce VARX predictors as linear state-space models.

mfir (predictor form realization of the VARX blocks)
input_to_state_map
truncating_transform
weighted_truncation
innovations_form
"""
import logging

import numpy as np
from numpy.linalg import svd

from .linalg import safechol

logger = logging.getLogger(__name__)


def mfir(H, p, H0=None):
    r"""mfir(H, p[, H0])

    Return a predictor form realization :math:`(A,B,C,D)` with state dimension
    ``p*ny`` of the finite impulse response predictor

    .. math::
        \hat y(k) = \sum_{i=1}^p H_i z(k-i) + H_0 z(k)

    where ``H=[H_1, ..., H_p]``. The state is
    :math:`x_j(k)=\sum_{i=j}^p H_i z(k-i+j-1)`, so :math:`\hat y(k)=x_1(k)+H_0
    z(k)` and

    .. math::
        A = \begin{bmatrix} 0 & I & & \\ & \ddots & \ddots & \\ && 0 & I \\
                            &&& 0 \end{bmatrix}, \qquad
        B = \begin{bmatrix} H_1 \\ \vdots \\ H_p \end{bmatrix}, \qquad
        C = \begin{bmatrix} I & 0 & \ldots & 0 \end{bmatrix}, \qquad
        D = H_0

    If `H0` is not supplied, :math:`D=0`.
    """
    ny, nH = H.shape
    nz = nH // p
    if nz*p != nH:
        raise ValueError(f"Expected H to have p={p} blocks of equal width: got "
                         f"H.shape={H.shape} instead.")
    if H0 is None:
        H0 = np.zeros((ny, nz))
    elif H0.shape != (ny, nz):
        raise ValueError(f"Expected H0 to have shape {(ny, nz)}: got "
                         f"{H0.shape} instead.")

    A = np.eye(p*ny, k=ny)
    B = np.vstack(np.hsplit(H, p))
    C = np.hstack([np.eye(ny), np.zeros((ny, (p-1)*ny))])
    D = H0.copy()
    return A, B, C, D


def input_to_state_map(B, p, ny):
    r"""input_to_state_map(B, p, ny)

    Return the extended input-to-state map of the predictor form realization
    returned by `mfir`,

    .. math::
        M = \begin{bmatrix} B & AB & \ldots & A^{p-1}B \end{bmatrix}

    Since :math:`A` shifts the state up by ``ny`` rows, each block is the
    previous block moved up by ``ny`` rows with zeros in the vacated rows; the
    blocks are copied directly into the preallocated matrix.
    """
    nx, nz = B.shape
    if nx != p*ny:
        raise ValueError(f"Expected B to have p*ny={p*ny} rows: got {nx}.")
    M = np.zeros((nx, p*nz))
    M[:, :nz] = B
    for i in range(1, p):
        M[:nx-ny, i*nz:(i+1)*nz] = M[ny:, (i-1)*nz:i*nz]
    return M


def truncating_transform(M, ZZt, ntot, n, chol_shift=-1):
    r"""truncating_transform(M, ZZt, ntot, n[, chol_shift])

    Return the truncating transformation ``(T, Ti, sv)`` of the weighted
    input-to-state map, where :math:`W=ZZ^\top/N` is the regressor covariance.

    If `chol_shift < 0` (default), take the decomposition of the weighted
    "Gramian"

    .. math::
        P = MWM^\top = U\Sigma^2U^\top

    Otherwise, take the economy SVD of :math:`ML=U\Sigma V^\top`, where
    :math:`L` is the lower Cholesky factor of :math:`W+mI` and :math:`m` is
    `chol_shift`. `chol_shift=0` gives the same truncation as the default;
    large values tend to an unweighted truncation.

    In both cases :math:`T=U_n\Sigma_n` and :math:`T_i=\Sigma_n^{-1}U_n^\top`
    use the `n` leading singular directions, and `sv` holds all singular values
    in descending order.
    """
    W = ZZt / ntot
    if chol_shift < 0:
        P = (M @ W) @ M.T
        Up, sp, _ = svd(P, hermitian=True)
        sv = np.sqrt(sp)
    else:
        L = safechol(W + chol_shift*np.eye(W.shape[0]))
        Up, sv, _ = svd(M @ L, full_matrices=False)

    if sv[n-1] <= np.sqrt(np.finfo(float).eps) * sv[0]:
        logger.warning(f"Truncating to n={n} states but singular value "
                       f"{n} is negligible ({sv[n-1]:.3e} vs {sv[0]:.3e}).")

    T = Up[:, :n] * sv[:n]
    Ti = (Up[:, :n] / sv[:n]).T
    return T, Ti, sv


def weighted_truncation(A, B, C, D, ZZt, ntot, n, chol_shift=-1):
    """weighted_truncation(A, B, C, D, ZZt, ntot, n[, chol_shift])

    Reduce the predictor form realization ``(A, B, C, D)`` of `mfir` to `n`
    states by weighting its input-to-state map with the regressor moment `ZZt`
    (lag blocks only) accumulated over `ntot` samples.

    Returns the reduced ``(A, B, C, D)`` and the singular values `sv`.
    """
    ny = C.shape[0]
    p = A.shape[0] // ny
    M = input_to_state_map(B, p, ny)
    if ZZt.shape != (M.shape[1], M.shape[1]):
        raise ValueError(f"Expected ZZt to have shape {(M.shape[1],)*2}: got "
                         f"{ZZt.shape} instead.")

    logger.info("Weighted truncation via "
                + ("the weighted Gramian." if chol_shift < 0 else
                   f"the Cholesky factor with shift {chol_shift}."))
    T, Ti, sv = truncating_transform(M, ZZt, ntot, n, chol_shift)
    return Ti @ A @ T, Ti @ B, C @ T, D, sv


def innovations_form(A, B, C, D, nu, rms=(1, 1)):
    r"""innovations_form(A, B, C, D, nu[, rms])

    Return the innovations form ``(A, B, C, D, K)`` of the (reduced) predictor
    form

    .. math::
        x(k+1) &= A x(k) + B_u u(k) + B_y y(k) \\
        \hat y(k) &= C x(k) + D_u u(k)

    with inputs :math:`[u^\top, y^\top]^\top`, i.e. :math:`K=B_y`,
    :math:`A+KC`, :math:`B_u+KD_u`, and :math:`D_u`. The input and output
    matrices are rescaled by ``rms_y/rms_u`` to undo the signal scaling.
    """
    r = rms[0] / rms[1]
    K = B[:, nu:].copy()
    Du = D[:, :nu]
    Bt = (B[:, :nu] + K @ Du) * r
    Dt = Du * r
    At = A + K @ C

    n = A.shape[0]
    if Bt.shape[0] != n or K.shape[0] != n or At.shape != (n, n):
        raise RuntimeError(f"Inconsistent state dimensions: A={At.shape}, "
                           f"B={Bt.shape}, K={K.shape}.")
    return At, Bt, C.copy(), Dt, K
