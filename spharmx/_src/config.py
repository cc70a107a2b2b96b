"""
spharmx Configuration and Constants
=====================================

Physical constants and tolerances shared by the grid descriptor and the
spherical harmonic engine.
"""

import os

# ============================================================================
# Physical Constants
# ============================================================================

# Radius of the Earth [m], consistent with GrADS.
EARTH_RADIUS = float(os.environ.get("SPHARMX_EARTH_RADIUS", 6371200.0))

# ============================================================================
# Grid Tolerances
# ============================================================================

# Allowed mismatch [deg] between the sample spacing and 360/X (or 180/(Y-1))
# for a grid to count as global.
GLOBAL_TOLERANCE_DEG = 1e-3

# Allowed relative spread of the sample increments for a uniform axis.
UNIFORM_SPACING_RTOL = 1e-4

# ============================================================================
# Truncation
# ============================================================================

# Smallest admissible triangular truncation order.
MIN_TRUNCATION = 2
