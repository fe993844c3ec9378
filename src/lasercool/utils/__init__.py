# Utilities
#
# Small helpers shared across the simulation:
#   - math_utils: vector geometry used by field and beam samplers
#   - logging_utils: logger configuration for simulation runs
