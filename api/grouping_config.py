"""Shared photo grouping configuration.

Single source of truth for the thresholds used by time clustering,
chain linking, image preparation and face detection. Change values here
to tune the whole pipeline at once.
"""

# Time clustering
CLUSTER_GAP_MINUTES = 10     # Max gap between consecutive photos of one moment

# Chain linking
MIN_LINK_GAP_DAYS = 7        # Moments closer than a week are bursts, not recurrences
MAX_LINK_GAP_DAYS = 365      # Moments further apart than a year never link
SIMILARITY_THRESHOLD = 0.97  # Strict: avoids linking different people

# Image preparation
THUMBNAIL_SIZE = 300         # Square size photos are cropped to before detection

# Face detection
MIN_FACE_CONFIDENCE = 0.8    # Detection score below this counts as "no face"

# Review
UNCERTAINTY_PIVOT = 0.5      # Confidence at which a detection is least certain
