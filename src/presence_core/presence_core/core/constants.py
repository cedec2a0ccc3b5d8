"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LATE_GRACE_MINUTES = 5
DEFAULT_GEOFENCE_RADIUS_METERS = 100

# Identity index hard limit is 1000 per delete call; 100 keeps each request small.
IDENTITY_INDEX_MAX_BATCH_DELETE = 100
IDENTITY_INDEX_PAGE_SIZE = 1000
DEFAULT_MATCH_THRESHOLD = 90.0

DEFAULT_DELETE_WORKERS = 4
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RECONCILE_EVERY_MINUTES = 60

DAY_KEY_FORMAT = "%Y-%m-%d"
