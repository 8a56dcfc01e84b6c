"""Site metadata routes: metadata document, sitemap, robots.txt and manifest."""
import json
from typing import Dict, Any

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response

from ..services import site_metadata

router = APIRouter(tags=["site"])


@router.get("/api/site/metadata")
async def get_metadata() -> Dict[str, Any]:
    """Site-wide metadata (title, description, robots, social previews)."""
    return site_metadata.build_metadata()


@router.get("/sitemap.xml")
async def sitemap() -> Response:
    """sitemaps.org sitemap of the public routes."""
    xml = site_metadata.render_sitemap_xml(site_metadata.sitemap_entries())
    return Response(content=xml, media_type="application/xml")


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots() -> str:
    return site_metadata.render_robots_txt()


@router.get("/manifest.webmanifest")
async def manifest() -> Response:
    return Response(
        content=json.dumps(site_metadata.build_manifest()),
        media_type="application/manifest+json",
    )
