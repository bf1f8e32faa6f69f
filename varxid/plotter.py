"""
Plots for reporting identification results. Nothing in the identification
routines calls into this module.

plot_lobo_cv
plot_eigs
"""
from cycler import cycler
import matplotlib.pyplot as plt
import numpy as np

default_cycler = (
    cycler(color=['b', 'g', 'r', 'm', 'c', 'y', 'orange', 'k']) +
    cycler(linestyle=['-', '--', ':', '-.', '-', '--', ':', '-.'])
)
eigs_cycler = cycler(marker=['o', 's', 'p', '*', '^', '>', 'v', '<'])
channel_args = dict(marker='o', ls='', fillstyle='none')
mean_args = dict(label='Mean', lw=2, c='k', ls='-')
select_args = dict(c='k', ls='--', lw=1)


def plot_lobo_cv(cv, ax=None, figsize=(6, 4)):
    """plot_lobo_cv(cv[, ax, figsize])

    Plot the held-out errors of a `LOBOCrossValidation` result against
    ``log10(lambda)``: one marker series per output channel (averaged over
    batches), their mean as a thick line, and the selected penalty as a
    dashed vertical line. A zero penalty has no logarithm and is left out.
    """
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=figsize)
    else:
        fig = ax.figure
    ax.set_prop_cycle(default_cycler)

    keep = cv.ridges > 0
    logridge = np.log10(cv.ridges[keep])
    errors = cv.mean_errors[:, keep]

    for (i, err) in enumerate(errors):
        ax.plot(logridge, err, label=f'$y_{i+1}$', **channel_args)
    ax.plot(logridge, cv.total_errors[keep], **mean_args)
    if cv.ridge_select > 0:
        ax.axvline(np.log10(cv.ridge_select), **select_args)

    ax.set_xlabel('log10(lambda)')
    ax.set_ylabel('average root mean square error')
    ax.set_title(f'Leave-one-batch-out CV ({cv.nbatches} batches)')
    ax.grid(True)
    ax.legend(ncol=min(errors.shape[0] + 1, 4))

    return fig, ax


def plot_eigs(A, legend=True, figsize=(4, 3)):
    """plot_eigs(A[, legend, figsize])

    Plot eigenvalues against the unit circle. `A` can be a matrix, a model
    with an ``A`` attribute, or a dict of either keyed by label.
    """
    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.set_prop_cycle(eigs_cycler + default_cycler)

    circ = plt.Circle((0, 0), radius=1, edgecolor='b', facecolor='None')
    ax.add_patch(circ)

    models = A if isinstance(A, dict) else {None: A}
    for (label, Ai) in models.items():
        eigs = np.linalg.eigvals(getattr(Ai, 'A', Ai))
        ax.plot(np.real(eigs), np.imag(eigs), label=label, ls='')

    ax.set_aspect('equal')
    ax.grid()
    if isinstance(A, dict) and legend:
        ax.legend(ncol=len(models))

    return fig, ax
