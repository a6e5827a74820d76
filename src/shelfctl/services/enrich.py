"""Post-projection enrichment of item and series payloads.

Enrichers never mutate their input: each returns a new payload with the
extra fields merged in. Absent enrichments leave the payload untouched.
"""

from __future__ import annotations

from typing import Any

Payload = dict[str, Any]


def enrich_item(
    item: Payload,
    *,
    rss_feed: Payload | None = None,
    size: int | None = None,
    series_sequence: Payload | None = None,
) -> Payload:
    """Attach an open feed, backfill the media size, or add the series position.

    *size* is copied into ``media.size`` only when the media size is empty or zero.
    """
    enriched = dict(item)
    if rss_feed is not None:
        enriched["rssFeed"] = rss_feed
    if size and not (enriched.get("media") or {}).get("size"):
        enriched["media"] = {**(enriched.get("media") or {}), "size": size}
    if series_sequence is not None:
        media = dict(enriched.get("media") or {})
        metadata = dict(media.get("metadata") or {})
        metadata["series"] = {
            "id": series_sequence["id"],
            "name": series_sequence["name"],
            "sequence": series_sequence.get("sequence"),
        }
        media["metadata"] = metadata
        enriched["media"] = media
    return enriched


def enrich_series(series: Payload, *, rss_feed: Payload | None = None) -> Payload:
    """Attach an open feed to a projected series."""
    enriched = dict(series)
    if rss_feed is not None:
        enriched["rssFeed"] = rss_feed
    return enriched
