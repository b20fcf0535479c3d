"""
Constants for the heatbar renderer.
"""

# Width reserved to the right of the bar for the heat label
LABEL_COLUMN_WIDTH: int = 10

# Narrowest bar drawn, even on very small terminals
MIN_BAR_WIDTH: int = 10

# Characters of each dotted-quad segment in the address column
QUAD_SEGMENT_WIDTH: int = 3

# Longest padded label (" 999.9k ") before falling back to " MAX "
MAX_LABEL_LENGTH: int = 10

MAX_LABEL: str = "MAX"

BAR_CHAR_TIER_ONE: str = "█"
BAR_CHAR_TIER_TWO: str = "█"

# Number of addresses printed in the shutdown summary table
SUMMARY_ROWS: int = 10
