"""
Linear algebraic helper functions.
"""
import numpy as np
from numpy.linalg import LinAlgError


def safeqr(M, mode='reduced'):
    """Wrapper for the QR decomposition.

    The `mode` mode option can be used to switch between return options:
    * `'reduced'` (default): returns `Q, R` with dimensions `(n, r), (r, m)`,
      where `r=min(n, m)`.
    * `'complete'`: returns `Q, R` with dimensions `(n, n), (n, m)`.
    * `'r'`: returns only `R` with dimensions `(r, m)`.

    """
    if mode not in ('reduced', 'complete', 'r'):
        raise TypeError(f'Unknown mode option: `{mode}`.')
    return np.linalg.qr(M, mode=mode)


def safelq(M, mode='reduced'):
    """Wrapper for the LQ decomposition, computed from the QR decomposition of
    `M.T`. See `safeqr` for information on the `mode` option. For this method,
    `mode='l'` can be used as a replacement to `mode='r'`.
    """
    if mode == 'l':
        mode = 'r'
    output = safeqr(M.T, mode=mode)
    if mode in ('reduced', 'complete'):
        return output[1].T, output[0].T
    return output.T


def safechol(M, tol=1e-8):
    """Safe wrapper for Cholesky factorizations. Returns the lower-triangular
    factor `L` with `M=LL'`. When `M` is only positive semidefinite we combine
    the eigenvalue and LQ decompositions to get a lower triangular factor.

    Raises `LinAlgError` if `M` has an eigenvalue below `-tol`.
    """
    try:
        ## Raises a LinAlgError when semi/indefinite
        return np.linalg.cholesky(M)
    except LinAlgError:
        ## Otherwise, compute the symmetric version. Start with the
        ## eigenvalue decomposition M=VDV'
        D, V = np.linalg.eigh(M)
        if np.amin(D) < -tol:
            raise LinAlgError(f'Encountered negative eigenvalue {np.amin(D)} '
                              f'less than tolerance {-tol}.')
        ## Compute a square root M=BB'.
        B = V @ np.diag(np.sqrt(np.maximum(D, 0)))
        ## Compute the LQ decomposition B=LQ. Then M=LL'.
        L, _ = safelq(B, mode='complete')
        ## But the diagonal elements may be negative so we must fix them.
        signs = np.sign(np.diag(L))
        signs[signs == 0] = 1
        return L @ np.diag(signs)


def mldivide(A, B):
    """In matlab syntax, returns `X=A\\B`."""
    return np.linalg.solve(A, B)


def mrdivide(A, B):
    """In matlab syntax, returns `X=A/B`."""
    return mldivide(B.T, A.T).T
