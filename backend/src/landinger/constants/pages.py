"""Page generation constants."""

# Markers the model is told to start and end its output with. The extractor
# matches them case-insensitively and also accepts a bare <html> start.
DOCUMENT_START_MARKER = "<!DOCTYPE html>"
DOCUMENT_END_MARKER = "</html>"

DEFAULT_PAGE_TYPE = "landing"

# Route prefix published pages are served under by this app
VIEW_ROUTE_PREFIX = "/view"
