import logging
import os

from control import c2d, ss, tf
from matplotlib.backends.backend_pdf import PdfPages
import matplotlib.pyplot as plt
import numpy as np
from scipy.signal import dlsim

from varxid import Batch, MPFVARX
from varxid.plotter import plot_eigs, plot_lobo_cv

logging.basicConfig(level=logging.INFO,
                    format='%(name)s %(levelname)s: %(message)s')

## Force this script to write its figures next to the repo root
main_dir = os.path.dirname(os.path.abspath(__file__)) + '/..'
os.chdir(main_dir)
os.makedirs('figures', exist_ok=True)

###################
## Script config ##
###################
# Second-order plant with a lightly damped pair of poles
num = [1]
den = [1, 0.4, 1]
Delta = 0.5

sys = c2d(ss(tf(num, den)), Delta)
A, B, C, D = (np.asarray(M) for M in (sys.A, sys.B, sys.C, sys.D))
n, m = B.shape
p = C.shape[0]

nbatch = 5
nsam = 400
varu = 1.0
vary = 0.05
Kgain = 0.5*np.linalg.pinv(C)

npast = 10
ridges = np.logspace(-4, 3, 15)

np.random.seed(7)


def simulate(nsam):
    """Simulate the innovations form with a white input and white noise."""
    u = np.sqrt(varu)*np.random.randn(m, nsam)
    e = np.sqrt(vary)*np.random.randn(p, nsam)
    # the noise enters as a second input of an augmented system
    Baug = np.hstack([B, Kgain])
    Daug = np.hstack([D, np.eye(p)])
    _, y, _ = dlsim((A, Baug, C, Daug, Delta), np.vstack([u, e]).T)
    return Batch(y.T, u)


batches = [simulate(nsam) for _ in range(nbatch)]

## Select the penalty, then fit
model = MPFVARX(npast, n, feedthrough=False)
fit, cv = model.fit_cv(batches, ridges)

print(f"Selected ridge: {cv.ridge_select:.3e} (spp={fit.spp:.1f})")
print(f"Plant poles:\t{np.sort_complex(np.linalg.eigvals(A))}")
print(f"Model poles:\t{np.sort_complex(fit.poles)}")

# Step responses
nstep = 40
ustep = np.ones((m, nstep))
_, ystep, _ = dlsim((A, B, C, D, Delta), ustep.T)
ystep_fit = fit.sim(ustep)

# Prediction on a fresh batch
test = simulate(nsam)
yhat = fit.predict(test.y, test.u)
rmse = np.sqrt(np.mean((test.y - yhat)**2, axis=1))
print(f"One-step prediction rmse on a new batch: {rmse}")

with PdfPages('figures/siso_mpfvarx_plot.pdf') as pdf:
    fig, _ = plot_lobo_cv(cv)
    fig.tight_layout(pad=1)
    pdf.savefig(fig)
    plt.close(fig)

    fig, _ = plot_eigs({'plant': A, 'MPF-VARX': fit})
    fig.tight_layout(pad=1)
    pdf.savefig(fig)
    plt.close(fig)

    fig, ax = plt.subplots(figsize=(7, 3.5))
    t = Delta*np.arange(nstep)
    ax.step(t, ystep[:, 0], where='post', label='plant')
    ax.step(t, ystep_fit[0], where='post', label='MPF-VARX')
    ax.set_xlabel(r"time")
    ax.set_ylabel(r"$y$", rotation=0, labelpad=10)
    ax.legend()
    fig.tight_layout(pad=1)
    pdf.savefig(fig)
    plt.close(fig)
