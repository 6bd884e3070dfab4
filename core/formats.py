"""
Output formats for API resources.

The format is negotiated from the Accept header. Every resource can be
rendered as JSON-LD (hydra), plain JSON, HAL, CSV or an HTML table.
Routers hand over already-serialized dicts (read group only); this module
only decides how they are wrapped.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from math import ceil
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from core.exceptions import UnsupportedFormatError
from core.iri import API_PREFIX, collection_iri, item_iri
from core.templating import templates

logger = logging.getLogger(__name__)

FORMATS = {
    "jsonld": "application/ld+json",
    "json": "application/json",
    "html": "text/html",
    "csv": "text/csv",
    "jsonhal": "application/hal+json",
}
DEFAULT_FORMAT = "jsonld"


@dataclass(frozen=True)
class ResourceMeta:
    """Describes how a resource is exposed"""

    short_name: str
    columns: list[str]
    items_per_page: int
    # Fields holding IRIs of related items
    relations: tuple[str, ...] = field(default_factory=tuple)

    @property
    def path(self) -> str:
        return collection_iri(self.short_name)

    @property
    def context(self) -> str:
        return f"{API_PREFIX}/contexts/{self.short_name}"


def negotiate_format(accept: Optional[str]) -> str:
    """
    Pick the output format for an Accept header.
    Media ranges are tried by decreasing quality, then in header order.
    """
    if not accept or not accept.strip():
        return DEFAULT_FORMAT

    candidates = []
    for position, part in enumerate(accept.split(",")):
        media_type, _, params = part.strip().partition(";")
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key.strip() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        candidates.append((-quality, position, media_type.strip().lower()))

    for negative_quality, _, media_type in sorted(candidates):
        if negative_quality >= 0:
            continue
        if media_type in ("*/*", "application/*"):
            return DEFAULT_FORMAT
        if media_type == "text/*":
            return "html"
        for name, mime in FORMATS.items():
            if mime == media_type:
                return name

    logger.warning(f"No supported format for Accept: {accept}")
    raise UnsupportedFormatError(accept)


def get_output_format(request: Request) -> str:
    """Dependency returning the negotiated format for the current request"""
    return negotiate_format(request.headers.get("accept"))


# --- Member representations ---


def _jsonld_member(resource: ResourceMeta, item: dict[str, Any]) -> dict[str, Any]:
    return {
        "@id": item_iri(resource.short_name, item["id"]),
        "@type": resource.short_name,
        **item,
    }


def _hal_member(resource: ResourceMeta, item: dict[str, Any]) -> dict[str, Any]:
    links: dict[str, Any] = {"self": {"href": item_iri(resource.short_name, item["id"])}}
    for relation in resource.relations:
        if item.get(relation):
            links[relation] = {"href": item[relation]}

    body = {key: value for key, value in item.items() if key not in resource.relations}
    return {"_links": links, **body}


def _csv_body(resource: ResourceMeta, items: list[dict[str, Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(resource.columns)
    for item in items:
        writer.writerow(
            ["" if item.get(column) is None else item[column] for column in resource.columns]
        )
    return buffer.getvalue()


def _page_url(resource: ResourceMeta, page: int) -> str:
    return f"{resource.path}?page={page}"


def _page_links(page: int, last_page: int) -> dict[str, int]:
    links = {"first": 1, "last": last_page}
    if page > 1:
        links["previous"] = page - 1
    if page < last_page:
        links["next"] = page + 1
    return links


# --- Responses ---


def render_item(
    request: Request,
    output_format: str,
    resource: ResourceMeta,
    item: dict[str, Any],
    status_code: int = 200,
) -> Response:
    """Render a single serialized item in the requested format"""
    media_type = FORMATS[output_format]

    if output_format == "jsonld":
        content = {"@context": resource.context, **_jsonld_member(resource, item)}
        return JSONResponse(content, status_code=status_code, media_type=media_type)

    if output_format == "jsonhal":
        return JSONResponse(
            _hal_member(resource, item), status_code=status_code, media_type=media_type
        )

    if output_format == "csv":
        return Response(
            _csv_body(resource, [item]), status_code=status_code, media_type=media_type
        )

    if output_format == "html":
        return templates.TemplateResponse(
            request,
            "api/item.html",
            {"resource": resource, "item": item},
            status_code=status_code,
        )

    return JSONResponse(item, status_code=status_code, media_type=media_type)


def render_collection(
    request: Request,
    output_format: str,
    resource: ResourceMeta,
    items: list[dict[str, Any]],
    page: int,
    total: int,
) -> Response:
    """Render one page of a collection in the requested format"""
    media_type = FORMATS[output_format]
    last_page = max(1, ceil(total / resource.items_per_page))
    links = _page_links(page, last_page)

    if output_format == "jsonld":
        content: dict[str, Any] = {
            "@context": resource.context,
            "@id": resource.path,
            "@type": "hydra:Collection",
            "hydra:member": [_jsonld_member(resource, item) for item in items],
            "hydra:totalItems": total,
        }
        if last_page > 1:
            view = {"@id": _page_url(resource, page), "@type": "hydra:PartialCollectionView"}
            for name, target in links.items():
                view[f"hydra:{name}"] = _page_url(resource, target)
            content["hydra:view"] = view
        return JSONResponse(content, media_type=media_type)

    if output_format == "jsonhal":
        hal_links: dict[str, Any] = {"self": {"href": _page_url(resource, page)}}
        for name, target in links.items():
            hal_name = "prev" if name == "previous" else name
            hal_links[hal_name] = {"href": _page_url(resource, target)}
        content = {
            "_links": hal_links,
            "totalItems": total,
            "itemsPerPage": resource.items_per_page,
            "_embedded": {"item": [_hal_member(resource, item) for item in items]},
        }
        return JSONResponse(content, media_type=media_type)

    if output_format == "csv":
        return Response(_csv_body(resource, items), media_type=media_type)

    if output_format == "html":
        return templates.TemplateResponse(
            request,
            "api/collection.html",
            {
                "resource": resource,
                "items": items,
                "page": page,
                "total": total,
                "links": {name: _page_url(resource, target) for name, target in links.items()},
            },
        )

    return JSONResponse(items, media_type=media_type)
