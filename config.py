"""
EvoForage Configuration
All tunable parameters for the foraging / neuro-evolution simulation.

The world is the unit torus [0,1) x [0,1): every distance below is a
fraction of the world's side length.
"""

import math

# ─── World ────────────────────────────────────────────────────────────────────
NUM_ANIMALS         = 35     # animals per generation
ANIMAL_MIN_DISTANCE = 0.1    # blue-noise spacing when (re)placing animals
NUM_FOODS           = 50     # food pellets in the world
FOOD_MIN_DISTANCE   = 0.05   # blue-noise spacing for the initial food layout
EAT_RADIUS          = 0.01   # animal eats food closer than this

# ─── Eye ──────────────────────────────────────────────────────────────────────
FOV_RANGE      = 0.25                      # how far an animal can see
FOV_HALF_ANGLE = (math.pi + math.pi / 4) / 2  # sight extends this far each side of heading
EYE_CELLS      = 9                         # photoreceptors (angular bins)

# ─── Brain ────────────────────────────────────────────────────────────────────
# Topology: [EYE_CELLS] → [2 * EYE_CELLS] → [2]
HIDDEN_PER_CELL = 2
BRAIN_OUTPUTS   = 2   # 0: Δspeed, 1: Δrotation

# ─── Motion ───────────────────────────────────────────────────────────────────
SPEED_MIN      = 0.001
SPEED_MAX      = 0.005
SPEED_ACCEL    = 0.2           # max |Δspeed| per tick
ROTATION_ACCEL = math.pi / 2   # max |Δrotation| per tick (radians)
INITIAL_SPEED  = 0.002         # speed of freshly placed animals

# ─── Evolution ────────────────────────────────────────────────────────────────
GENERATION_LENGTH      = 2500    # ticks each generation lives
MUTATION_CHANCE        = 0.01    # per-gene probability of a nudge
MUTATION_COEFF         = 0.3     # max magnitude of a nudge
MAX_PLACEMENT_ATTEMPTS = 100_000 # rejected candidates before placement gives up
DIVERSITY_SAMPLE       = 20      # animals sampled for the diversity statistic
GRID_CELL_SIZE         = 0.05    # bucket size for grid-accelerated collisions

# ─── Output / Logging ─────────────────────────────────────────────────────────
SAVE_DIR           = "output"   # directory for saved images and charts
SNAPSHOT_INTERVAL  = 5          # save a world snapshot every N generations
LOG_CSV            = True       # write per-generation CSV log
