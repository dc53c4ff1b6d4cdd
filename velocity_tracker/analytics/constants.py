"""
Named thresholds and factors used by the forecast, trend and recommendation
calculations.

Kept at module level so tests can probe boundary behavior precisely.
"""

# Forecast confidence dampening
AVAILABILITY_DIFFERENCE_DAMPENING = 0.5
AVAILABILITY_VARIATION_DAMPENING = 0.3

# Planning options around the recommended forecast
CONSERVATIVE_PLANNING_FACTOR = 0.8
AGGRESSIVE_PLANNING_FACTOR = 1.2

# Minimum number of records for variance based estimates and trend fitting
MIN_SPRINTS_FOR_FORECAST = 2
MIN_SPRINTS_FOR_TREND = 2

# Trend slope thresholds (per sprint)
VELOCITY_SLOPE_THRESHOLD = 1.0
COMPLETION_SLOPE_THRESHOLD = 5.0
AVAILABILITY_SLOPE_THRESHOLD = 5.0

# Consistency thresholds (0..1)
VELOCITY_CONSISTENCY_THRESHOLD = 0.7
COMPLETION_CONSISTENCY_THRESHOLD = 0.7

# Commitment rules
OVERCOMMIT_COMPLETION_RATIO = 80.0
OVERCOMMIT_SHARE = 0.5
UNDERUTILIZED_COMPLETION_RATIO = 100.0
UNDERUTILIZED_SHARE = 0.6

# Availability rules (percentage points)
AVAILABILITY_DELTA_THRESHOLD = 10.0
AVAILABILITY_POINT_REDUCTION_FACTOR = 0.8
LOW_AVAILABILITY_THRESHOLD = 70.0

# Confidence and data sufficiency
LOW_CONFIDENCE_THRESHOLD = 60
RECOMMENDED_MIN_SPRINTS = 5

# Team availability calculator
DEFAULT_TEAM_AVAILABILITY = 100.0
