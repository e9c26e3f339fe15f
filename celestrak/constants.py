"""HTTP constants for the fetch layer.

Centralizes status codes, size caps and client defaults shared by the
fetch engine, the configuration models and the CLI.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_NOT_MODIFIED = 304
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_NOT_FOUND = 404
HTTP_STATUS_TOO_MANY_REQUESTS = 429
HTTP_STATUS_SERVER_ERROR_MIN = 500

# Response Size Limits
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 100 * 1024 * 1024  # 100 MiB
ERROR_BODY_LIMIT_BYTES = 8 * 1024  # 8 KiB

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 64 * 1024

# Client defaults
DEFAULT_BASE_URL = "https://celestrak.org"
DEFAULT_USER_AGENT = "celestrak-gp/0.1.0"
DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0

# Request headers
HEADER_USER_AGENT = "User-Agent"
HEADER_IF_NONE_MATCH = "If-None-Match"
HEADER_ETAG = "ETag"
