"""
Package-level constants for hardcoded pagination behavior.

These values define the cursor wire protocol and safety limits. They should
NEVER be changed via environment variables: a token produced by one process
must be readable by every other process sharing the overflow cache.

For configurable values (default page size, default sort, Redis location),
see cursorpage/settings.py.
"""

# ============================================================================
# Cursor Wire Protocol
# ============================================================================

# Largest token (in characters) handed to callers. Anything bigger is stored
# in the overflow cache and replaced by a token wrapping only the cache key.
CURSOR_MAX_LENGTH = 2048

# Lifetime (seconds) of an overflowed cursor payload in the cache
CURSOR_CACHE_TTL_SECONDS = 8 * 60 * 60

# Namespace for overflow cache keys
CURSOR_CACHE_KEY_PREFIX = "paginator_cursor"


# ============================================================================
# Paginator State
# ============================================================================

# per_page sentinel meaning "a single page holding every row"
ALL = "all"

# Metadata flag marking a paginator produced from a results snapshot
SNAPSHOT_METADATA_KEY = "snapshot"


# ============================================================================
# Pagination Safety Limits
# ============================================================================

# Maximum allowed numeric page size, regardless of what the client requests
MAX_PAGE_SIZE = 1000
