"""Static site metadata, sitemap, robots.txt, web manifest and security headers."""
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from xml.sax.saxutils import escape

from ..config import settings

SITE_DESCRIPTION = (
    "FitPass helps you discover and book fitness classes: view schedules, "
    "reserve spots, and manage bookings in one place."
)

KEYWORDS = [
    "fitness class booking",
    "book fitness classes",
    "gym classes",
    "yoga booking",
    "HIIT classes",
    "pilates booking",
    "fitness schedule",
    "workout classes",
]

THEME_COLOR = "#0B1220"

PERMISSIONS_POLICY = ", ".join([
    "geolocation=()",
    "microphone=()",
    "camera=()",
    "autoplay=()",
    "payment=()",
    "publickey-credentials-get=()",
    "screen-wake-lock=()",
    "usb=()",
    "web-share=()",
    "fullscreen=(self)",
    "picture-in-picture=(self)",
    "display-capture=()",
    "encrypted-media=()",
    "gyroscope=()",
    "magnetometer=()",
    "midi=()",
])

SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Permissions-Policy": PERMISSIONS_POLICY,
}

# (path, change frequency, priority)
STATIC_ROUTES = [
    ("", "weekly", 1.0),
    ("/classes", "daily", 0.9),
    ("/venues", "weekly", 0.7),
    ("/pricing", "monthly", 0.6),
]

SitemapEntry = Dict[str, Any]
DynamicEntriesFn = Callable[[datetime], List[SitemapEntry]]


def _site_url() -> str:
    return settings.site_url.rstrip("/")


def default_title() -> str:
    return f"{settings.site_name} | Fitness Class Booking Platform"


def build_metadata() -> Dict[str, Any]:
    """Site-wide metadata document (title, robots, social previews, icons)."""
    site_url = _site_url()
    site_name = settings.site_name
    title = default_title()
    og_image = f"{site_url}/og.png"

    return {
        "metadataBase": site_url,
        "title": {"default": title, "template": f"%s | {site_name}"},
        "description": SITE_DESCRIPTION,
        "applicationName": site_name,
        "referrer": "origin-when-cross-origin",
        "category": "fitness",
        "alternates": {"canonical": "/"},
        "keywords": KEYWORDS,
        "robots": {
            "index": True,
            "follow": True,
            "googleBot": {
                "index": True,
                "follow": True,
                "max-image-preview": "large",
                "max-snippet": -1,
                "max-video-preview": -1,
            },
        },
        "openGraph": {
            "type": "website",
            "url": site_url,
            "title": title,
            "description": SITE_DESCRIPTION,
            "siteName": site_name,
            "images": [
                {"url": og_image, "width": 1200, "height": 630, "alt": f"{site_name} preview"}
            ],
            "locale": "en_US",
        },
        "twitter": {
            "card": "summary_large_image",
            "title": title,
            "description": SITE_DESCRIPTION,
            "images": [og_image],
        },
        "icons": {
            "icon": [{"url": "/favicon.ico"}, {"url": "/icon.png", "type": "image/png"}],
            "apple": [{"url": "/apple-touch-icon.png"}],
        },
        "manifest": "/manifest.webmanifest",
        "viewport": {
            "width": "device-width",
            "initialScale": 1,
            "themeColor": THEME_COLOR,
        },
    }


def build_manifest() -> Dict[str, Any]:
    """Web app manifest."""
    return {
        "name": default_title(),
        "short_name": settings.site_name,
        "description": SITE_DESCRIPTION,
        "start_url": "/",
        "display": "standalone",
        "background_color": THEME_COLOR,
        "theme_color": THEME_COLOR,
        "icons": [
            {"src": "/icon.png", "sizes": "512x512", "type": "image/png"},
            {"src": "/apple-touch-icon.png", "sizes": "180x180", "type": "image/png"},
        ],
    }


def sitemap_entries(
    now: Optional[datetime] = None,
    dynamic_entries: Optional[DynamicEntriesFn] = None,
) -> List[SitemapEntry]:
    """Fixed routes plus any dynamically generated ones, all stamped with ``now``."""
    now = now or datetime.now(timezone.utc)
    site_url = _site_url()

    entries = [
        {
            "url": f"{site_url}{path}",
            "lastModified": now,
            "changeFrequency": frequency,
            "priority": priority,
        }
        for path, frequency, priority in STATIC_ROUTES
    ]
    if dynamic_entries:
        entries.extend(dynamic_entries(now))
    return entries


def render_sitemap_xml(entries: List[SitemapEntry]) -> str:
    """Render entries as a sitemaps.org ``urlset`` document."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for entry in entries:
        lines.append("  <url>")
        lines.append(f"    <loc>{escape(entry['url'])}</loc>")
        lines.append(f"    <lastmod>{entry['lastModified'].isoformat()}</lastmod>")
        lines.append(f"    <changefreq>{entry['changeFrequency']}</changefreq>")
        lines.append(f"    <priority>{entry['priority']}</priority>")
        lines.append("  </url>")
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"


def render_robots_txt() -> str:
    """robots.txt derived from the robots directives."""
    robots = build_metadata()["robots"]
    rule = "Allow: /" if robots["index"] else "Disallow: /"
    return f"User-agent: *\n{rule}\n\nSitemap: {_site_url()}/sitemap.xml\n"
