import numpy as np
import pytest

from varxid import Batch, DataValidationError, VARXMoments, \
    accumulate_moments, batchvarx, io_covariance, rms_scaling, varx_moments, \
    varx_regressors


def _counting_data(m=2, ny=1, N=10):
    U = np.vstack([np.arange(N) + 10.0*i for i in range(m)])
    Y = np.vstack([np.arange(N) + 10.0*i + 100 for i in range(ny)])
    return Y, U


def test_regressors_most_recent_lag_first():
    Y, U = _counting_data(m=2, ny=1, N=10)
    Yp, Zp = varx_regressors(Y, U, 2)

    assert Yp.shape == (1, 8)
    assert Zp.shape == (2*(2 + 1), 8)
    assert Yp[0, 0] == 102
    # z(1) = [u1(1), u2(1), y(1)], then z(0)
    np.testing.assert_array_equal(Zp[:, 0], [1, 11, 101, 0, 10, 100])
    np.testing.assert_array_equal(Zp[:, -1], [8, 18, 108, 7, 17, 107])


def test_regressors_feedthrough_row_last():
    Y, U = _counting_data(m=1, ny=2, N=6)
    Yp, Zp = varx_regressors(Y, U, 3, feedthrough=True)

    assert Zp.shape == (3*3 + 1, 3)
    np.testing.assert_array_equal(Zp[-1], U[0, 3:])
    np.testing.assert_array_equal(Yp, Y[:, 3:])


def test_regressors_scaling():
    Y, U = _counting_data(m=1, ny=1, N=5)
    Yp, Zp = varx_regressors(Y, U, 1, feedthrough=True, scale=(0.5, 2.0))

    np.testing.assert_allclose(Yp, 0.5*Y[:, 1:])
    np.testing.assert_allclose(Zp[0], 2.0*U[0, :-1])
    np.testing.assert_allclose(Zp[1], 0.5*Y[0, :-1])
    np.testing.assert_allclose(Zp[2], 2.0*U[0, 1:])


def test_regressors_too_short_batch():
    Y, U = _counting_data(N=3)
    with pytest.raises(DataValidationError):
        varx_regressors(Y, U, 3)


def test_regressors_sample_mismatch():
    Y, U = _counting_data(N=5)
    with pytest.raises(DataValidationError):
        varx_regressors(Y, U[:, :-1], 1)


def test_io_covariance_and_rms(rng):
    batches = [Batch(rng.standard_normal((2, N)), rng.standard_normal((1, N)))
               for N in (50, 80)]
    Ryy, Ruu = io_covariance(batches)

    Y = np.hstack([b.y for b in batches])
    U = np.hstack([b.u for b in batches])
    np.testing.assert_allclose(Ryy, Y @ Y.T / 130)
    np.testing.assert_allclose(Ruu, U @ U.T / 130)

    rmsy, rmsu = rms_scaling(batches)
    assert rmsy == pytest.approx(np.sqrt(np.mean(Y**2)))
    assert rmsu == pytest.approx(np.sqrt(np.mean(U**2)))

    scaled = [Batch(3*b.y, 0.5*b.u) for b in batches]
    np.testing.assert_allclose(rms_scaling(scaled), (3*rmsy, 0.5*rmsu))


def test_rms_scaling_zero_signal(rng):
    batches = [Batch(rng.standard_normal((1, 20)), np.zeros((1, 20)))]
    with pytest.raises(DataValidationError):
        rms_scaling(batches)


def test_moments_fold_matches_stacked_regressors(rng):
    batches = [Batch(rng.standard_normal((2, N)), rng.standard_normal((1, N)))
               for N in (30, 40, 25)]
    total = accumulate_moments(batches, 2, feedthrough=True)

    pairs = [varx_regressors(b.y, b.u, 2, feedthrough=True) for b in batches]
    Y = np.hstack([Yp for (Yp, _) in pairs])
    Z = np.hstack([Zp for (_, Zp) in pairs])
    np.testing.assert_allclose(total.YZt, Y @ Z.T)
    np.testing.assert_allclose(total.ZZt, Z @ Z.T)
    assert total.nsamples == 95


def test_moments_fold_is_associative(rng):
    batches = [Batch(rng.standard_normal((1, 30)), rng.standard_normal((1, 30)))
               for _ in range(3)]
    a, b, c = [varx_moments(batch, 3) for batch in batches]
    left, right = (a + b) + c, a + (b + c)

    np.testing.assert_allclose(left.ZZt, right.ZZt)
    np.testing.assert_allclose(left.YZt, right.YZt)
    np.testing.assert_allclose((left - c).ZZt, (a + b).ZZt)
    assert isinstance(left, VARXMoments)


def test_batchvarx_matches_least_squares(rng):
    batches = [Batch(rng.standard_normal((2, N)), rng.standard_normal((1, N)))
               for N in (60, 90)]
    Ghat, ntot, ZZt = batchvarx(batches, 2, feedthrough=True)

    pairs = [varx_regressors(b.y, b.u, 2, feedthrough=True) for b in batches]
    Y = np.hstack([Yp for (Yp, _) in pairs])
    Z = np.hstack([Zp for (_, Zp) in pairs])
    Gls = np.linalg.lstsq(Z.T, Y.T, rcond=None)[0].T

    assert Ghat.shape == (2, 2*3 + 1)
    assert ntot == 150
    np.testing.assert_allclose(Ghat, Gls, atol=1e-10)
    np.testing.assert_allclose(ZZt, Z @ Z.T)


def test_batchvarx_ridge_shrinks(rng):
    batches = [Batch(rng.standard_normal((1, 100)),
                     rng.standard_normal((1, 100)))]
    G0, _, _ = batchvarx(batches, 3, ridge=0)
    G1, _, _ = batchvarx(batches, 3, ridge=10.0)
    G2, _, _ = batchvarx(batches, 3, ridge=1e12)

    assert np.linalg.norm(G1) < np.linalg.norm(G0)
    assert np.linalg.norm(G2) < 1e-8


def test_batchvarx_singular_unregularized():
    batches = [Batch(np.ones((1, 20)), np.zeros((1, 20)))]
    with pytest.raises(np.linalg.LinAlgError):
        batchvarx(batches, 2, ridge=0)
