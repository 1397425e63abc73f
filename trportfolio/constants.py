"""Fixed values shared across the package."""

REST_API_BASE_URI = "https://api.traderepublic.com/api/v1"
"""Base URI of the REST API."""

WEBSOCKET_BASE_HOST = "api.traderepublic.com"
"""Host serving the websocket API."""

HTTP_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15"
)
"""User agent sent with every HTTP request."""

COOKIE_NAME_PREFIX = "tr_"
"""Prefix of the authentication cookies."""

SESSION_REFRESH_INTERVAL = 60
"""Seconds between two session refreshes."""

RESPONSE_ACTION_TYPE_TIMELINE_DETAIL = "timelineDetail"
"""Action type marking a timeline entry whose details can be fetched."""

CSV_FILENAME = "./transactions.csv"
"""File receiving the transaction entries."""

TRANSACTION_DOCUMENTS_BASE_DIR = "./documents/transactions"
"""Directory receiving transaction documents."""

ACTIVITY_LOG_DOCUMENTS_BASE_DIR = "./documents/activity"
"""Directory receiving activity log documents."""