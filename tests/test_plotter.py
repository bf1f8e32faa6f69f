import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import numpy as np
import pytest

from varxid import lobo_cv, mpfvarx
from varxid.plotter import plot_eigs, plot_lobo_cv


@pytest.fixture
def batches(mimo, simulate):
    A, B, C, D, K = mimo
    return [simulate(A, B, C, D, 300, K=K, noise=0.2) for _ in range(3)]


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


def test_plot_lobo_cv(batches, tmp_path):
    ridges = np.r_[0.0, np.logspace(-2, 2, 5)]
    cv = lobo_cv(batches, (2, 2), ridges)
    fig, ax = plot_lobo_cv(cv)

    assert ax.get_title() == 'Leave-one-batch-out CV (3 batches)'
    # two channels, the mean and the selected penalty
    lines = ax.get_lines()
    assert len(lines) == (4 if cv.ridge_select > 0 else 3)
    mean = [line for line in lines if line.get_label() == 'Mean'][0]
    np.testing.assert_allclose(mean.get_xdata(), np.linspace(-2, 2, 5))

    path = tmp_path / 'cv.png'
    fig.savefig(path)
    assert path.stat().st_size > 0


def test_plot_lobo_cv_existing_axes(batches):
    cv = lobo_cv(batches, (2, 2), np.logspace(-2, 2, 3))
    fig, ax = plt.subplots()
    fig2, ax2 = plot_lobo_cv(cv, ax=ax)
    assert fig2 is fig and ax2 is ax


def test_plot_eigs(batches, mimo):
    A = mimo[0]
    fit = mpfvarx(batches, (3, 2))
    fig, ax = plot_eigs({'true': A, 'fit': fit})

    labels = [line.get_label() for line in ax.get_lines()]
    assert labels == ['true', 'fit']
    assert ax.get_legend() is not None

    _, ax = plot_eigs(A)
    assert ax.get_legend() is None
