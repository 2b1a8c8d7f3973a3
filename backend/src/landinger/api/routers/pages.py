"""Page generation, listing, deletion and viewing endpoints."""

import logging
from html import escape
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse

from landinger.api.deps import get_page_service
from landinger.api.schemas import (
    DeleteResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    PageListResponse,
    PageResponse,
)
from landinger.constants.storage import NO_CACHE_CONTROL
from landinger.errors import (
    GenerationFailure,
    LandingerError,
    PageNotFoundError,
    StorageFailure,
    ValidationFailure,
)
from landinger.pages.service import PageService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])

ERROR_STATUS: dict[type[LandingerError], int] = {
    ValidationFailure: status.HTTP_400_BAD_REQUEST,
    PageNotFoundError: status.HTTP_404_NOT_FOUND,
    GenerationFailure: status.HTTP_502_BAD_GATEWAY,
    StorageFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

NO_CACHE_HEADERS = {
    "Cache-Control": NO_CACHE_CONTROL,
    "Pragma": "no-cache",
    "Expires": "0",
}

NOT_FOUND_PAGE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>Page not found</title></head>
<body><h1>Page not found</h1><p>No page named <code>{name}</code> has been published.</p></body>
</html>"""


def _raise_http(e: LandingerError) -> NoReturn:
    """Convert a domain error into an HTTPException with a structured body."""
    status_code = ERROR_STATUS.get(type(e), status.HTTP_500_INTERNAL_SERVER_ERROR)
    raise HTTPException(status_code=status_code, detail=e.to_dict()) from e


@router.post("/generate", response_model=GenerateResponse)
async def generate_page(
    request: GenerateRequest,
    service: PageService = Depends(get_page_service),
) -> GenerateResponse:
    """Create a page, or revise it in place if one exists under the same name.

    Returns 400 for missing input, 502 when the model call fails and 500 when
    the page could not be stored. A 500 with ``partial: true`` means the page
    is live but missing from listings.
    """
    try:
        result, body = await service.generate_page(
            instructions=request.instructions,
            page_name=request.page_name,
            sibling_pages=request.sibling_pages,
            page_type=request.page_type,
        )
    except LandingerError as e:
        _raise_http(e)

    action = "created" if result.created else "updated"
    return GenerateResponse(
        canonical_key=result.canonical_key,
        public_url=result.public_url,
        body=body,
        created=result.created,
        message=f"Page '{result.canonical_key}' {action}",
    )


@router.get("/page", response_model=PageResponse)
async def get_page(
    name: str = Query("", description="Page name"),
    service: PageService = Depends(get_page_service),
) -> PageResponse:
    """Get a published page body and its metadata."""
    try:
        document, metadata = service.get_page(name)
    except LandingerError as e:
        _raise_http(e)

    public_url = metadata.public_url if metadata and metadata.public_url else None
    return PageResponse(
        canonical_key=document.canonical_key,
        body=document.body,
        metadata=metadata,
        public_url=public_url or service.publisher.public_url_for(document.canonical_key),
    )


@router.delete("/page", response_model=DeleteResponse)
async def delete_page(
    name: str = Query("", description="Page name"),
    service: PageService = Depends(get_page_service),
) -> DeleteResponse:
    """Delete a page and its metadata."""
    try:
        canonical_key = service.delete_page(name)
    except LandingerError as e:
        _raise_http(e)
    return DeleteResponse(canonical_key=canonical_key, message=f"Page '{canonical_key}' deleted")


@router.get("/pages", response_model=PageListResponse)
async def list_pages(
    service: PageService = Depends(get_page_service),
) -> PageListResponse:
    """List all published pages, newest first."""
    try:
        pages = service.list_pages()
    except LandingerError as e:
        _raise_http(e)
    return PageListResponse(pages=pages)


@router.get("/health", response_model=HealthResponse)
async def health_check(
    service: PageService = Depends(get_page_service),
) -> HealthResponse:
    """Report storage reachability and pages left without metadata."""
    report = service.health()
    return HealthResponse.model_validate(report.model_dump())


@router.get("/view/{name}", response_class=HTMLResponse)
async def view_page(
    name: str,
    service: PageService = Depends(get_page_service),
) -> HTMLResponse:
    """Serve a published page as HTML, never cached."""
    try:
        document, _ = service.get_page(name)
    except (PageNotFoundError, ValidationFailure):
        return HTMLResponse(
            NOT_FOUND_PAGE.format(name=escape(name)),
            status_code=status.HTTP_404_NOT_FOUND,
            headers=NO_CACHE_HEADERS,
        )
    except StorageFailure as e:
        logger.error(f"Failed to serve page {name}: {e.details}")
        return HTMLResponse(
            "<!DOCTYPE html><html><body><h1>Page unavailable</h1></body></html>",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            headers=NO_CACHE_HEADERS,
        )
    return HTMLResponse(document.body, headers=NO_CACHE_HEADERS)
