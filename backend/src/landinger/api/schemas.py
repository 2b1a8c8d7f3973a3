"""Pydantic schemas for API requests and responses.

Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from landinger.constants.pages import DEFAULT_PAGE_TYPE
from landinger.pages.schemas import PageMetadata


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateRequest(CamelModel):
    """Request to create or revise a page.

    Required fields default to empty so the service reports them as a
    validation failure instead of a schema error.
    """

    instructions: str = Field("", description="What to build, or the change to apply")
    page_name: str = Field("", description="Free-form page name")
    sibling_pages: list[str] = Field(
        default_factory=list, description="Other pages of the site to link to"
    )
    page_type: str = Field(DEFAULT_PAGE_TYPE, description="Kind of page to create")


class GenerateResponse(CamelModel):
    """Result of a generate request."""

    success: bool = True
    canonical_key: str
    public_url: str
    body: str
    created: bool
    message: str


class PageResponse(CamelModel):
    """A published page with its metadata."""

    success: bool = True
    canonical_key: str
    body: str
    metadata: PageMetadata | None = None
    public_url: str


class DeleteResponse(CamelModel):
    """Result of a delete request."""

    success: bool = True
    canonical_key: str
    message: str


class PageListResponse(CamelModel):
    """All published pages, newest first."""

    success: bool = True
    pages: list[PageMetadata]


class HealthResponse(CamelModel):
    """Storage health check response."""

    status: str
    backend: str
    storage_configured: bool
    storage_reachable: bool
    orphaned_pages: list[str] = Field(default_factory=list)
    message: str
