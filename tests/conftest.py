import numpy as np
import pytest

from varxid import Batch


@pytest.fixture(scope="session")
def seed():
    return 12345


@pytest.fixture
def rng(seed):
    return np.random.default_rng(seed)


@pytest.fixture
def siso():
    """Stable second-order SISO system, poles 0.75 +/- 0.37j.

    y(k) = 1.5 y(k-1) - 0.7 y(k-2) + u(k-1) + 0.5 u(k-2)
    """
    A = np.array([[1.5, -0.7], [1.0, 0.0]])
    B = np.array([[1.0], [0.0]])
    C = np.array([[1.0, 0.5]])
    D = np.zeros((1, 1))
    # places the eigenvalues of A-KC at 0.2 and 0.1
    K = np.array([[14/17], [64/85]])
    return A, B, C, D, K


@pytest.fixture
def mimo():
    """Second-order system with one input and two outputs."""
    A = np.array([[1.5, -0.7], [1.0, 0.0]])
    B = np.array([[1.0], [0.0]])
    C = np.array([[1.0, 0.5], [0.0, 1.0]])
    D = np.zeros((2, 1))
    K = 0.3*np.array([[1.0, 0.0], [0.0, 1.0]])
    return A, B, C, D, K


@pytest.fixture
def simulate(rng):
    """Simulate the innovations form from a zero state with white Gaussian
    inputs; ``noise`` is the standard deviation of the innovations."""
    def _simulate(A, B, C, D, N, K=None, noise=0.0):
        n, m = B.shape
        p = C.shape[0]
        K = np.zeros((n, p)) if K is None else K
        U = rng.standard_normal((m, N))
        E = noise*rng.standard_normal((p, N))
        Y = np.empty((p, N))
        x = np.zeros(n)
        for k in range(N):
            Y[:, k] = C @ x + D @ U[:, k] + E[:, k]
            x = A @ x + B @ U[:, k] + K @ E[:, k]
        return Batch(Y, U)
    return _simulate
