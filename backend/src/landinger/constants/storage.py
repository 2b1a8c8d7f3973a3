"""Storage layout constants.

Every backend exposes the same logical keys, so these prefixes and content
types are shared by the publisher and all ObjectStore implementations.
"""

PAGES_PREFIX = "pages/"
METADATA_PREFIX = "metadata/"

HTML_SUFFIX = ".html"
METADATA_SUFFIX = ".json"

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"

# Sent with blob writes and with /view responses so a republished page is
# visible on the very next read.
NO_CACHE_CONTROL = "no-cache, no-store, must-revalidate"

STORAGE_BACKENDS = ("memory", "filesystem", "blob", "database")
