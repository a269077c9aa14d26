# Configuration: user preferences and fixed constants
