"""
Voigt broadening of sampled line shapes.

The convolution is carried out in the frequency domain. A sampled curve
of n points is treated as one half of an even signal of period 2(n-1)
(reflecting boundaries), whose real Fourier transform is the type-I
discrete cosine transform. The Fourier transform of a Voigt kernel is the
product of the Gaussian and Lorentzian transforms,

    exp(-gamma |w| - sigma^2 w^2 / 2),

so broadening is a single multiplication between a forward and an inverse
DCT-I.
"""

from dataclasses import dataclass

import numpy as np
from scipy import fft

from lineshapedb.core.exceptions import DegenerateInputError
from lineshapedb.core.logging_config import get_logger
from lineshapedb.morph.curve import Curve

logger = get_logger("instrument.convolution")


@dataclass(frozen=True)
class BroadeningParams:
    """
    Widths of a Voigt broadening kernel.

    Attributes
    ----------
    sigma : float
        Gaussian standard deviation (Doppler, instrumental)
    gamma : float
        Lorentzian HWHM (collisional)
    """

    sigma: float = 0.0
    gamma: float = 0.0

    def __post_init__(self):
        if self.sigma < 0 or self.gamma < 0:
            raise ValueError(
                f"Broadening widths must be non-negative (sigma={self.sigma}, gamma={self.gamma})"
            )

    @property
    def is_null(self) -> bool:
        """True when the kernel is a delta function."""
        return self.sigma == 0 and self.gamma == 0

    def combined_with_gaussian(self, sigma: float) -> "BroadeningParams":
        """Add another Gaussian width in quadrature."""
        return BroadeningParams(float(np.hypot(self.sigma, sigma)), self.gamma)


def voigt_kernel_transform(n: int, dx: float, sigma: float, gamma: float) -> np.ndarray:
    """
    Voigt transfer function on the DCT-I frequencies of an n-point grid.

    Includes the 1/(2(n-1)) normalization of the inverse transform.
    """
    period = 2 * (n - 1)
    omega = 2.0 * np.pi * np.arange(n) / (period * dx)
    return np.exp(-gamma * omega - 0.5 * sigma**2 * omega**2) / period


def voigt_convolve(y: np.ndarray, dx: float, sigma: float = 0.0, gamma: float = 0.0) -> np.ndarray:
    """
    Convolve uniformly sampled data with a Voigt kernel.

    Parameters
    ----------
    y : array
        Samples on an evenly spaced grid
    dx : float
        Grid spacing
    sigma : float
        Gaussian standard deviation, same units as dx
    gamma : float
        Lorentzian HWHM, same units as dx

    Returns
    -------
    array
        Convolved samples; the input is not modified. With
        sigma = gamma = 0 the values are returned unchanged.
    """
    if sigma < 0 or gamma < 0:
        raise ValueError(f"Broadening widths must be non-negative (sigma={sigma}, gamma={gamma})")

    y = np.array(y, dtype=float)
    if y.ndim != 1 or len(y) < 2:
        raise DegenerateInputError("Convolution needs at least 2 samples")

    if sigma == 0 and gamma == 0:
        return y

    if not dx > 0:
        raise ValueError(f"Grid spacing must be positive, got {dx}")

    # Unnormalized DCT-I is its own inverse up to the factor 2(n-1)
    spectrum = fft.dct(y, type=1)
    spectrum *= voigt_kernel_transform(len(y), dx, sigma, gamma)
    convolved = fft.dct(spectrum, type=1)

    logger.debug(f"Voigt convolution: n={len(y)}, dx={dx:g}, sigma={sigma:g}, gamma={gamma:g}")
    return convolved


def apply_broadening(curve: Curve, params: BroadeningParams) -> Curve:
    """
    Broaden a uniformly sampled curve.

    Parameters
    ----------
    curve : Curve
        Line shape on an evenly spaced grid
    params : BroadeningParams
        Kernel widths

    Returns
    -------
    Curve
        Broadened line shape on the same grid

    Raises
    ------
    ValueError
        If the grid is not evenly spaced
    """
    if params.is_null:
        return curve

    if not curve.is_uniform():
        raise ValueError("Grid must be evenly spaced for convolution")

    y = voigt_convolve(curve.y, curve.dx, params.sigma, params.gamma)
    # Ringing from the transform can dip marginally below zero
    return Curve(curve.x, np.clip(y, 0.0, None))
