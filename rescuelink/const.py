DOMAIN = "rescuelink"
VERSION = "0.1.0"

DEFAULT_API_URL = "http://localhost:3000/api"

# HTTP
REQUEST_TIMEOUT = 10         # seconds, multiplied by attempt number for each retry
REQUEST_ATTEMPTS = 3         # retries apply to idempotent reads only

# Continuous watch: report every WATCH_TIME_INTERVAL seconds or
# WATCH_DISTANCE_INTERVAL metres, whichever comes first
WATCH_TIME_INTERVAL = 30
WATCH_DISTANCE_INTERVAL = 100
POLL_INTERVAL = 5            # how often a polling watch reads the provider

# Per-device displacement filter (0 disables it)
MIN_DISTANCE_METERS = 0.0

# Source label sent with every device location submission
LOCATION_SOURCE = "gps"

# On-duty responder tracking
ON_DUTY_INTERVAL = 30
ON_DUTY_MIN_DISTANCE = 50.0

EARTH_RADIUS_METERS = 6371e3
MS_TO_KMH = 3.6

PERMISSION_REQUIRED_TITLE = "Location Permission Required"
PERMISSION_REQUIRED_MESSAGE = (
    "Please enable location access to track your devices and receive accurate "
    "emergency alerts. Go to Settings > Privacy > Location Services to enable."
)

SOS_PERMISSION_DENIED = "Location permission denied. Please enable location to use SOS."
SOS_GENERIC_ERROR = "Failed to trigger SOS"
SOS_STATUSES = ("pending", "assigned", "no-responders", "resolved")

ON_DUTY_PERMISSION_REQUIRED = "Location permission required to go on duty"
ON_DUTY_GENERIC_ERROR = "Failed to toggle on-duty status"

# Config entry keys
CONF_API_URL = "api_url"
CONF_TOKEN = "token"
CONF_REQUEST_TIMEOUT = "request_timeout"
CONF_MIN_DISTANCE = "min_distance_meters"
CONF_WATCH_INTERVAL = "watch_time_interval"
CONF_WATCH_DISTANCE = "watch_distance_interval"
CONF_ON_DUTY_INTERVAL = "on_duty_interval"
