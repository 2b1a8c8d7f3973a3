"""Page document and metadata schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PageDocument(BaseModel):
    """A published HTML document."""

    canonical_key: str = Field(..., description="Normalized page identifier")
    body: str = Field(..., description="Full HTML document text")


class PageMetadata(BaseModel):
    """Sidecar record describing a published page.

    Field aliases are the JSON keys stored in ``metadata/<key>.json``.
    """

    model_config = ConfigDict(populate_by_name=True)

    canonical_key: str = Field(..., alias="name", description="Normalized page identifier")
    display_title: str = Field(..., alias="title", description="Page name as the caller typed it")
    last_instruction: str = Field(
        "", alias="instructions", description="Edit request that produced the current body"
    )
    created_at: datetime | None = Field(
        None, alias="createdAt", description="First publish time, never changed afterwards"
    )
    updated_at: datetime | None = Field(None, alias="updatedAt", description="Latest publish time")
    public_url: str | None = Field(None, alias="pageUrl", description="Public URL of the page")
    file_name: str | None = Field(None, alias="fileName", description="Stored HTML file name")
    storage_url: str | None = Field(
        None, alias="storageUrl", description="Backend URL of the stored body"
    )

    def to_json(self) -> str:
        """Serialize with the sidecar's JSON keys."""
        return self.model_dump_json(by_alias=True)


class PublishResult(BaseModel):
    """Outcome of a successful publish."""

    canonical_key: str
    public_url: str
    created: bool = Field(..., description="True if no page existed under this key before")
    metadata: PageMetadata


class HealthReport(BaseModel):
    """Storage health as seen by the page service."""

    status: str = Field(..., description="ok, degraded or unavailable")
    backend: str
    storage_configured: bool
    storage_reachable: bool
    orphaned_pages: list[str] = Field(default_factory=list)
    message: str = ""
