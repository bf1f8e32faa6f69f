"""
varxid
======

State-space models from VARX predictors
---------------------------------------
mpfvarx.py
  func mpfvarx
  class VARXFit
  class MPFVARX

varx.py
  func varx_regressors
  func io_covariance
  func rms_scaling
  func varx_moments
  func batchvarx

crossval.py
  func lobo_cv_evaluate
  func lobo_cv
  class LOBOCrossValidation

ssid.py
  func mfir
  func input_to_state_map
  func weighted_truncation
  func innovations_form

Other helper functions
----------------------
regression.py
  func ridge_regression
linalg.py
  func safechol
  func mrdivide
plotter.py
  func plot_lobo_cv
  func plot_eigs
"""
from .crossval import LOBOCrossValidation, lobo_cv, lobo_cv_evaluate
from .mpfvarx import MPFVARX, VARXFit, mpfvarx
from .ssid import innovations_form, input_to_state_map, mfir, \
    truncating_transform, weighted_truncation
from .util import Batch, DataTypeError, DataValidationError
from .varx import VARXMoments, accumulate_moments, batchvarx, io_covariance, \
    rms_scaling, varx_moments, varx_regressors

__version__ = '0.1.0'
