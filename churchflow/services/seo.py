"""
Sitemap, robots.txt and JSON-LD rendering for church websites
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional
from xml.sax.saxutils import escape

from churchflow.core.clock import utcnow
from churchflow.models import Church, Event, WebPage

XML_ATTR_ENTITIES = {"\"": "&quot;", "'": "&apos;"}


@dataclass
class SitemapUrl:
    loc: str
    lastmod: datetime
    changefreq: str
    priority: str


# Fixed sections of every church site: (path, priority, changefreq)
SITE_SECTIONS = (
    ("", "1.0", "weekly"),
    ("/about", "0.8", "monthly"),
    ("/contact", "0.7", "monthly"),
    ("/events", "0.9", "daily"),
    ("/sermons", "0.9", "weekly"),
    ("/give", "0.7", "monthly"),
    ("/visit", "0.8", "monthly"),
)


def site_base_url(church: Church, public_site_url: str) -> str:
    return (church.website or f"{public_site_url}/c/{church.slug}").rstrip("/")


def collect_urls(
    church: Church,
    base_url: str,
    pages: Iterable[WebPage],
    events: Iterable[Event],
) -> List[SitemapUrl]:
    now = utcnow()
    church_updated = church.updated_at or church.created_at
    urls = [
        SitemapUrl(
            loc=f"{base_url}{path}",
            lastmod=now if changefreq == "daily" else church_updated,
            changefreq=changefreq,
            priority=priority,
        )
        for path, priority, changefreq in SITE_SECTIONS
    ]
    urls.extend(
        SitemapUrl(f"{base_url}/{page.slug}", page.updated_at or page.created_at, "monthly", "0.6")
        for page in pages
    )
    urls.extend(
        SitemapUrl(f"{base_url}/events/{event.id}", event.updated_at or event.created_at, "weekly", "0.7")
        for event in events
    )
    return urls


def render_sitemap(urls: Iterable[SitemapUrl]) -> str:
    entries = "\n".join(
        "  <url>\n"
        f"    <loc>{escape(url.loc, XML_ATTR_ENTITIES)}</loc>\n"
        f"    <lastmod>{url.lastmod.date().isoformat()}</lastmod>\n"
        f"    <changefreq>{url.changefreq}</changefreq>\n"
        f"    <priority>{url.priority}</priority>\n"
        "  </url>"
        for url in urls
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{entries}\n"
        "</urlset>"
    )


def render_robots(sitemap_url: str) -> str:
    return f"""# Robots.txt for ChurchFlow church websites

User-agent: *
Allow: /
Disallow: /api/
Disallow: /dashboard/
Disallow: /auth/
Disallow: /onboarding/
Disallow: /settings/
Disallow: /profile/
Allow: /api/v1/seo/sitemap
Crawl-delay: 1

Sitemap: {sitemap_url}

User-agent: GPTBot
Disallow: /

User-agent: CCBot
Disallow: /
"""


# JSON-LD structured data

SCHEMA_CONTEXT = "https://schema.org"

# Default Sunday service window advertised for a place of worship
SERVICE_HOURS = {"dayOfWeek": "Sunday", "opens": "09:00", "closes": "12:00"}


def _compact(data: dict) -> dict:
    return {key: value for key, value in data.items() if value is not None}


def postal_address(church: Church) -> Optional[dict]:
    if not church.address:
        return None
    return _compact({
        "@type": "PostalAddress",
        "streetAddress": church.address,
        "addressLocality": church.city,
        "addressRegion": church.state,
        "postalCode": church.postal_code,
        "addressCountry": church.country,
    })


def organization_schema(church: Church, base_url: str) -> dict:
    return _compact({
        "@context": SCHEMA_CONTEXT,
        "@type": "ReligiousOrganization",
        "@id": f"{base_url}/#organization",
        "name": church.name,
        "description": church.description,
        "url": base_url,
        "logo": church.logo,
        "email": church.email,
        "telephone": church.phone,
        "address": postal_address(church),
        "sameAs": [],
    })


def place_of_worship_schema(church: Church, base_url: str) -> dict:
    return _compact({
        "@context": SCHEMA_CONTEXT,
        "@type": "PlaceOfWorship",
        "@id": f"{base_url}/#place",
        "name": church.name,
        "description": church.description,
        "url": base_url,
        "image": church.logo,
        "email": church.email,
        "telephone": church.phone,
        "address": postal_address(church),
        "openingHoursSpecification": [
            {"@type": "OpeningHoursSpecification", **SERVICE_HOURS},
        ],
    })


def events_schema(events: Iterable[Event], base_url: str) -> List[dict]:
    """One schema.org Event per upcoming website event"""
    return [
        _compact({
            "@context": SCHEMA_CONTEXT,
            "@type": "Event",
            "name": event.title,
            "description": event.description,
            "startDate": event.start_date.isoformat(),
            "endDate": event.end_date.isoformat() if event.end_date else None,
            "location": _compact({
                "@type": "Place",
                "name": event.location,
                "address": event.address,
            }) if event.location else None,
            "url": f"{base_url}/events/{event.id}",
            "eventStatus": "https://schema.org/EventScheduled",
            "eventAttendanceMode": "https://schema.org/OfflineEventAttendanceMode",
        })
        for event in events
    ]
