"""
Constants for the SERPmetrics client library.
"""

VERSION = "v1.0.0"

API_URL = "http://api.serpmetrics.com"
USER_AGENT = "SERPmetrics Python Library"

# Default configuration values
DEFAULT_CONFIG = {
    'base_url': API_URL,
    'user_agent': USER_AGENT,
    'timeout': 5000,    # HTTP timeout in milliseconds
    'rate_limit': 30,   # requests per second
}

# Request defaults applied before dispatch
DEFAULT_REQUEST = {
    'method': 'POST',
    'path': '/',
}

# Payload field names expected by the API
FIELD_KEY = "key"
FIELD_AUTH = "auth"
FIELD_TIMESTAMP = "ts"
FIELD_PARAMS = "params"

# Endpoint paths
PATH_KEYWORDS_ADD = "/keywords/add"
PATH_KEYWORDS_DELETE = "/keywords/delete"
PATH_KEYWORDS_CHECK = "/keywords/check"
PATH_KEYWORDS_SERP = "/keywords/serp"
PATH_PRIORITY_ADD = "/priority/add"
PATH_PRIORITY_STATUS = "/priority/status"
PATH_USERS_CREDIT = "/users/credit"
PATH_FLUX_TREND = "/flux/trend"

DEFAULT_CHECK_LIMIT = 10
DEFAULT_FLUX_TYPE = "daily"
