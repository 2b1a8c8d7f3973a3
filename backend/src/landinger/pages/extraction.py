"""Extract the HTML document from a free-text model response.

Models sometimes wrap the page in conversational text ("Sure! Here is...")
or a Markdown fence despite being told not to. Extraction keeps the span from
the first document-start marker through the last ``</html>`` and drops the
rest. It never fails: a response with no start marker is returned unchanged.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Case-insensitive forms of DOCUMENT_START_MARKER (with a bare <html> fallback)
# and DOCUMENT_END_MARKER from landinger.constants.pages
START_PATTERNS = (
    re.compile(r"<!doctype\s+html", re.IGNORECASE),
    re.compile(r"<html\b", re.IGNORECASE),
)
END_PATTERN = re.compile(r"</html\s*>", re.IGNORECASE)


@dataclass
class ExtractionResult:
    """Extracted body plus which markers were found."""

    body: str
    found_start: bool
    found_end: bool

    @property
    def is_well_formed(self) -> bool:
        return self.found_start and self.found_end


def _find_start(raw_text: str) -> int:
    for pattern in START_PATTERNS:
        match = pattern.search(raw_text)
        if match:
            return match.start()
    return -1


def extract_document(raw_text: str) -> ExtractionResult:
    """Isolate the HTML document in raw model output.

    Args:
        raw_text: The model's response.

    Returns:
        ExtractionResult whose body runs from the first start marker through
        the last end marker, inclusive. Without a start marker the body is
        raw_text unmodified; without an end marker everything after the start
        is kept.
    """
    start = _find_start(raw_text)
    if start == -1:
        logger.warning(
            f"No HTML document marker in model output ({len(raw_text)} chars); publishing as-is"
        )
        return ExtractionResult(body=raw_text, found_start=False, found_end=False)

    body = raw_text[start:]

    last_end = None
    for last_end in END_PATTERN.finditer(body):
        pass
    if last_end is None:
        logger.warning("Model output has no closing </html>; keeping text after the start marker")
        return ExtractionResult(body=body, found_start=True, found_end=False)

    return ExtractionResult(body=body[: last_end.end()], found_start=True, found_end=True)


def extract_html(raw_text: str) -> str:
    """Return only the extracted document body."""
    return extract_document(raw_text).body
