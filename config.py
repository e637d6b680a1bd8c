import os

# ======= Input capacity caps =======
MAX_SHAPES          = int(os.getenv("AOC_MAX_SHAPES", "128"))
MAX_CELLS_PER_SHAPE = int(os.getenv("AOC_MAX_CELLS_PER_SHAPE", "64"))
MAX_REGIONS         = int(os.getenv("AOC_MAX_REGIONS", "4096"))

# ======= Packed board representation =======
# 64 words of 64 bits covers every board up to 4096 cells.  Larger boards are
# rejected as a capacity error rather than silently treated as infeasible.
MAX_BOARD_WORDS     = int(os.getenv("AOC_MAX_BOARD_WORDS", "64"))

# ======= Region semantics / search backend =======
# 0 = exact cover (every board cell covered), 1 = pieces must fit, gaps allowed.
ALLOW_GAPS          = int(os.getenv("AOC_ALLOW_GAPS", "0")) != 0
BACKEND             = os.getenv("AOC_BACKEND", "dfs").strip().lower() or "dfs"
PARITY_PRUNE        = int(os.getenv("AOC_PARITY_PRUNE", "1")) != 0

# ======= CP-SAT backend knobs =======
CPSAT_MAX_SECONDS   = float(os.getenv("AOC_CPSAT_MAX_SECONDS", "30"))
WORKERS             = int(os.getenv("AOC_WORKERS", "1"))
MAX_MEMORY_MB       = int(os.getenv("AOC_MAX_MEMORY_MB", "2048"))

# ======= Day 08 (MST) knobs =======
MAX_POINTS          = int(os.getenv("AOC_MAX_POINTS", "4096"))
MAX_EDGES           = int(os.getenv("AOC_MAX_EDGES", "100000000"))
MST_PART1_EDGES     = int(os.getenv("AOC_MST_PART1_EDGES", "1000"))

# ======= Output names =======
LAYOUT_OUT          = os.getenv("AOC_LAYOUT_OUT", "layout.txt")

# Empty means "do not write": the CLI stays on standard streams by default.
REGION_LOG          = os.getenv("AOC_REGION_LOG", "")
PROGRESS_STATE_FILE = os.getenv("PROGRESS_STATE_FILE", "")

class CFG:
    MAX_SHAPES          = MAX_SHAPES
    MAX_CELLS_PER_SHAPE = MAX_CELLS_PER_SHAPE
    MAX_REGIONS         = MAX_REGIONS

    MAX_BOARD_WORDS     = MAX_BOARD_WORDS

    ALLOW_GAPS          = ALLOW_GAPS
    BACKEND             = BACKEND
    PARITY_PRUNE        = PARITY_PRUNE

    CPSAT_MAX_SECONDS   = CPSAT_MAX_SECONDS
    WORKERS             = WORKERS
    MAX_MEMORY_MB       = MAX_MEMORY_MB

    MAX_POINTS          = MAX_POINTS
    MAX_EDGES           = MAX_EDGES
    MST_PART1_EDGES     = MST_PART1_EDGES

    LAYOUT_OUT          = LAYOUT_OUT

    REGION_LOG          = REGION_LOG
    PROGRESS_STATE_FILE = PROGRESS_STATE_FILE

__all__ = ["CFG"]
