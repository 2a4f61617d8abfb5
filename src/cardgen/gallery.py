"""Gallery listing built from the art cache."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Any

from cardgen.types import GalleryFilter, GalleryItem, GalleryPage, Pagination

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 12


def popularity(token_id: str) -> int:
    try:
        return int(token_id) % 100
    except ValueError:
        return 0


def gallery_items(entries: Iterable[tuple[str, Any]]) -> list[GalleryItem]:
    """One item per token, keeping the highest version of its art."""
    best: dict[str, GalleryItem] = {}
    for key, entry in entries:
        if not isinstance(entry, dict) or not entry.get("url"):
            continue
        token_id = str(entry.get("tokenId") or key.split("_v")[0])
        item = GalleryItem(
            tokenId=token_id,
            url=entry["url"],
            allImageUrls=entry.get("allImageUrls") or [entry["url"]],
            timestamp=entry.get("created") or entry.get("timestamp") or "",
            version=entry.get("version") or 1,
            popularity=popularity(token_id),
        )
        current = best.get(token_id)
        if current is None or item.version > current.version:
            best[token_id] = item
    return list(best.values())


def build_gallery(
    entries: Iterable[tuple[str, Any]],
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    filter: GalleryFilter = GalleryFilter.ALL,
    search: str = "",
) -> GalleryPage:
    """Filter, sort and paginate cached art.

    ``search`` matches token id substrings. ``recent`` sorts newest first,
    ``popular`` by popularity score; ``all`` keeps cache order.
    """
    page = max(page, 1)
    limit = max(limit, 1)

    items = gallery_items(entries)
    if search:
        items = [i for i in items if search in i.tokenId]

    if filter == GalleryFilter.RECENT:
        items.sort(key=lambda i: i.timestamp, reverse=True)
    elif filter == GalleryFilter.POPULAR:
        items.sort(key=lambda i: i.popularity, reverse=True)

    total = len(items)
    start = (page - 1) * limit
    logger.debug("Gallery: %d items, page %d of size %d", total, page, limit)
    return GalleryPage(
        data=items[start:start + limit],
        pagination=Pagination(
            page=page,
            limit=limit,
            totalItems=total,
            totalPages=math.ceil(total / limit),
        ),
    )
