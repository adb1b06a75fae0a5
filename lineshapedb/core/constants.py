"""
Numerical constants for lineshapedb.

Energies are stored in the database's native units (see
:mod:`lineshapedb.core.units`); temperatures are in eV and densities in
cm^-3 throughout.
"""

# ============================================================================
# Energy Conversion Factors
# ============================================================================

# 1 eV expressed in wavenumbers
EV_TO_INV_CM = 8065.54394  # cm^-1 / eV

# 1 Hartree (atomic unit of energy) expressed in eV
AU_TO_EV = 27.2113862  # eV / Hartree

# ============================================================================
# Broadening
# ============================================================================

# Doppler Gaussian sigma: sigma = C * E0 * sqrt(T / M)
# with E0 the line energy, T in eV and M the radiator mass in amu.
# C approximates sqrt(e / (amu * c^2)) = 3.2765e-5
DOPPLER_SIGMA_CONST = 3.265e-5

# ============================================================================
# Defaults
# ============================================================================

# Output grid length used by the command-line tools
DEFAULT_NPOINTS = 2001

# Database format version written to the `lsdb` table
DB_FORMAT = 1
