# backend/src/landinger/pages/prompts.py
"""Prompt templates for page generation and revision."""

from dataclasses import dataclass
from typing import Any

from landinger.constants.pages import (
    DEFAULT_PAGE_TYPE,
    DOCUMENT_END_MARKER,
    DOCUMENT_START_MARKER,
)
from landinger.pages.schemas import PageDocument


@dataclass
class PromptTemplate:
    """A template for generating prompts with variable substitution."""

    template: str

    def render(self, **kwargs: Any) -> str:
        """Render the template with the given variables.

        Args:
            **kwargs: Variables to substitute into the template.

        Returns:
            The rendered template string.

        Raises:
            KeyError: If a required variable is missing.
        """
        return self.template.format(**kwargs)


# =============================================================================
# System Prompt
# =============================================================================

SYSTEM_PROMPT = """You are an expert web developer who writes complete, production-ready
HTML pages. You always answer with a single HTML document and nothing else: no
explanations, no greetings, no Markdown code fences."""


# =============================================================================
# Output Format Rules
# =============================================================================
# Appended to both templates. The extractor relies on these markers to strip
# anything the model adds around the document.

OUTPUT_RULES = f"""Output format:
- Return ONLY the complete HTML code, nothing else.
- Do not add any introduction, explanation, summary or closing remarks.
- Do not wrap the document in Markdown code fences.
- Start your response with {DOCUMENT_START_MARKER} and end it with {DOCUMENT_END_MARKER}."""


# =============================================================================
# Create Template
# =============================================================================

CREATE_TEMPLATE = PromptTemplate(
    """Create a complete, modern, responsive {page_type} page based on these instructions:

{instruction}

Requirements:
- Create a single self-contained HTML file with embedded CSS and JavaScript
- Make it fully responsive and mobile-friendly
- Use modern CSS (flexbox, grid, animations)
- Include semantic HTML5 elements
- Add smooth scrolling and interactive elements where appropriate
- Use a professional color scheme and typography
- Include all necessary meta tags for SEO
- Add a viewport meta tag for mobile responsiveness
{navigation}
{output_rules}"""
)


# =============================================================================
# Update Template
# =============================================================================
# The existing document is quoted verbatim between fences so the model can tell
# where it starts and ends.

UPDATE_TEMPLATE = PromptTemplate(
    """Update the existing HTML page below by applying exactly one change.

Requested change:
{instruction}

Current HTML to modify:
<<<CURRENT_HTML
{existing_body}
CURRENT_HTML

Requirements:
- Apply ONLY the requested change
- Leave everything else exactly as it is: structure, content, styles, scripts, links and forms
- Return the complete updated page, not a fragment or a diff
{navigation}
{output_rules}"""
)


NAVIGATION_TEMPLATE = PromptTemplate(
    """- This page is part of a website with these other pages: {sibling_list}.
  Add appropriate navigation or links to these pages where relevant."""
)


def _navigation_section(sibling_pages: list[str]) -> str:
    siblings = [p for p in sibling_pages if p.strip()]
    if not siblings:
        return ""
    return NAVIGATION_TEMPLATE.render(sibling_list=", ".join(siblings))


def compose_prompt(
    instruction: str,
    existing: PageDocument | None,
    sibling_pages: list[str] | None = None,
    page_type: str = DEFAULT_PAGE_TYPE,
) -> str:
    """Build the user prompt for creating or revising a page.

    When ``existing`` is given the prompt quotes its body verbatim and asks
    for only the requested change; otherwise it asks for a new page from
    scratch. Both variants pin the output to a bare HTML document.

    Args:
        instruction: The natural-language request.
        existing: Currently published document, or None for a new page.
        sibling_pages: Other page identifiers to link to where relevant.
        page_type: Kind of page to create (ignored for updates).

    Returns:
        The rendered prompt.
    """
    navigation = _navigation_section(sibling_pages or [])

    if existing is not None:
        return UPDATE_TEMPLATE.render(
            instruction=instruction.strip(),
            existing_body=existing.body,
            navigation=navigation,
            output_rules=OUTPUT_RULES,
        )

    return CREATE_TEMPLATE.render(
        page_type=page_type.strip() or DEFAULT_PAGE_TYPE,
        instruction=instruction.strip(),
        navigation=navigation,
        output_rules=OUTPUT_RULES,
    )
