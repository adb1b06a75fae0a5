"""
Instrumental and Doppler broadening.

This module provides:
- Voigt broadening parameters
- Frequency-domain Voigt convolution of uniformly sampled line shapes
"""

from lineshapedb.instrument.convolution import (
    BroadeningParams,
    voigt_convolve,
    voigt_kernel_transform,
    apply_broadening,
)

__all__ = [
    "BroadeningParams",
    "voigt_convolve",
    "voigt_kernel_transform",
    "apply_broadening",
]
