"""Engine defaults and numerical tolerances.

Constructors read their default arguments from here so that the CLI,
the tests and the engines agree on one set of numbers.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Random numbers
# ---------------------------------------------------------------------------
#: Seed used when an engine is built without one.
DEFAULT_SEED: Final[int] = 5489

# ---------------------------------------------------------------------------
# Lattices
# ---------------------------------------------------------------------------
DEFAULT_TREE_STEPS: Final[int] = 4000

#: Log-spot shock for finite-difference delta / gamma.
DEFAULT_BUMP: Final[float] = 5e-4

# ---------------------------------------------------------------------------
# Monte Carlo
# ---------------------------------------------------------------------------
DEFAULT_MC_PATHS: Final[int] = 20_000
DEFAULT_MC_STEPS: Final[int] = 1

DEFAULT_LSMC_PATHS: Final[int] = 10_000
DEFAULT_LSMC_STEPS: Final[int] = 50
DEFAULT_LSMC_DEGREE: Final[int] = 2

DEFAULT_EXOTIC_PATHS: Final[int] = 50_000
DEFAULT_EXOTIC_STEPS: Final[int] = 75

# ---------------------------------------------------------------------------
# Tolerances
# ---------------------------------------------------------------------------
#: Pivots below this make the LSMC normal equations singular.
PIVOT_TOLERANCE: Final[float] = 1e-12

#: Strikes below this are treated as zero when rescaling regression inputs.
SCALE_TOLERANCE: Final[float] = 1e-12
