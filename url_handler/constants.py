"""HTTP constants for the URL handler.

Centralizes status codes and byte limits shared across modules.
"""

# Successful PUT status codes
HTTP_STATUS_OK = 200
HTTP_STATUS_CREATED = 201
HTTP_STATUS_ACCEPTED = 202
HTTP_STATUS_NO_CONTENT = 204

# Access denied status codes
HTTP_STATUS_UNAUTHORIZED = 401
HTTP_STATUS_FORBIDDEN = 403

PUT_SUCCESS_STATUSES = frozenset(
    {
        HTTP_STATUS_OK,
        HTTP_STATUS_CREATED,
        HTTP_STATUS_ACCEPTED,
        HTTP_STATUS_NO_CONTENT,
    }
)
PUT_ACCESS_DENIED_STATUSES = frozenset(
    {HTTP_STATUS_UNAUTHORIZED, HTTP_STATUS_FORBIDDEN}
)

# Schemes the canonicalizer rewrites; everything else passes through
NORMALIZED_SCHEMES = frozenset({"http", "https"})

# Default charset for text bodies (RFC 2616 section 3.7.1)
DEFAULT_CHARSET = "ISO-8859-1"

# Maximum number of error body bytes included in diagnostics
ERROR_BODY_TRUNCATE_LEN = 512
MAX_ERROR_BODY_TRUNCATE_LEN = 1024 * 1024  # 1 MB

# Deflate variant probe sizes
DEFLATE_PROBE_SIZE = 100
DEFLATE_PROBE_MAX_OUTPUT = 1000

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192

# Content-Encoding tokens
ENCODING_GZIP = "gzip"
ENCODING_X_GZIP = "x-gzip"
ENCODING_DEFLATE = "deflate"

# Unknown values reported by the URL-info collaborator
UNKNOWN_CONTENT_LENGTH = -1
UNKNOWN_LAST_MODIFIED = 0
