"""Package-wide defaults and demo inputs."""

# Remez exchange
DEFAULT_TOLERANCE = 1e-14
DEFAULT_MAX_ITERATIONS = 60

# Damped Newton levelling
NEWTON_MAX_STEPS = 50
NEWTON_MAX_HALVINGS = 30
# Residual floor in units of EPSILON: max(NEWTON_FLOOR_PER_TERM * k, NEWTON_FLOOR_MIN)
NEWTON_FLOOR_PER_TERM = 64
NEWTON_FLOOR_MIN = 256
# Levelling stops once the residual is this small relative to |E|
NEWTON_STALL_RTOL = 1e-18
# A line search that stalls below this residual relative to |E| is at the noise level
NEWTON_NOISE_RTOL = 1e-15
# Parameter steps below this (log w, log a and E) end the levelling
NEWTON_STEP_TOL = 1e-28

# Root finding
ROOT_MAX_ITERATIONS = 200
ROOT_XTOL = 1e-20
GOLDEN_MAX_ITERATIONS = 300

# Double-precision continuation
FIRST_RATIO = 2.0
# k = 2 from k = 1: shifts of log a and log w, alternation points as fractions of log R
SECOND_ORDER_EXPONENT_SHIFT = 0.7
SECOND_ORDER_WEIGHT_SHIFTS = (-0.7, 0.2)
SECOND_ORDER_POINTS = (0.0, 0.15, 0.5, 0.85, 1.0)
# Exponents are kept above EXPONENT_FLOOR / R during the double-precision levelling
EXPONENT_FLOOR = 1e-2
FLOAT_RIPPLE_TOLERANCE = 1e-4
FLOAT_MAX_ITERATIONS = 40
FLOAT_LEVEL_TOL = 1e-15
LOBE_SAMPLES = 200
FIT_SAMPLES_PER_TERM = 8
FIT_SAMPLES_BASE = 40

# Continuation in R: the first step goes all the way, later ones grow by
# RATIO_STEP_GROWTH after a success and halve after a failure
RATIO_STEP_GROWTH = 1.5
FLOAT_RATIO_HALVINGS = 8
QUAD_RATIO_HALVINGS = 20
CONTINUATION_TOLERANCE = 1e-8
CONTINUATION_MAX_ITERATIONS = 15
# Order k is inserted at min(R, BASE**(k - 1)); after the first failed
# insertion every later order is inserted at BASE**(k - 1) itself
BALANCED_RATIO_BASE = 2.0

# Tabulated absolute-norm starts on R = 2**j, interpolated over this many entries
TABLE_INTERPOLATION_ENTRIES = 4

# Diagnostics
ERROR_CURVE_SAMPLES = 2000

# Demo: orbital-energy bounds of a small molecule, k = 5
DEMO_ENERGIES = (-20.5519, -0.493214, 0.186114, 4.14902)
DEMO_ORDER = 5

__all__ = [
    "DEFAULT_TOLERANCE",
    "DEFAULT_MAX_ITERATIONS",
    "NEWTON_MAX_STEPS",
    "NEWTON_MAX_HALVINGS",
    "NEWTON_FLOOR_PER_TERM",
    "NEWTON_FLOOR_MIN",
    "NEWTON_STALL_RTOL",
    "NEWTON_NOISE_RTOL",
    "NEWTON_STEP_TOL",
    "ROOT_MAX_ITERATIONS",
    "ROOT_XTOL",
    "GOLDEN_MAX_ITERATIONS",
    "FIRST_RATIO",
    "SECOND_ORDER_EXPONENT_SHIFT",
    "SECOND_ORDER_WEIGHT_SHIFTS",
    "SECOND_ORDER_POINTS",
    "EXPONENT_FLOOR",
    "FLOAT_RIPPLE_TOLERANCE",
    "FLOAT_MAX_ITERATIONS",
    "FLOAT_LEVEL_TOL",
    "LOBE_SAMPLES",
    "FIT_SAMPLES_PER_TERM",
    "FIT_SAMPLES_BASE",
    "RATIO_STEP_GROWTH",
    "FLOAT_RATIO_HALVINGS",
    "QUAD_RATIO_HALVINGS",
    "CONTINUATION_TOLERANCE",
    "CONTINUATION_MAX_ITERATIONS",
    "BALANCED_RATIO_BASE",
    "TABLE_INTERPOLATION_ENTRIES",
    "ERROR_CURVE_SAMPLES",
    "DEMO_ENERGIES",
    "DEMO_ORDER",
]
