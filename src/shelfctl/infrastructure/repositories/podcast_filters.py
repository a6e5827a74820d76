"""Podcast library strategy.

Podcasts have no series, ebooks, or book-level progress, so those groups
are ignored rather than rejected. Groups that only make sense for books
(authors, narrators, publishers, tracks) raise
:class:`~shelfctl.domain.errors.UnsupportedFilterGroupError`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, func, select

from shelfctl.domain.types import FilterGroup, IncludeFlag, MediaType
from shelfctl.infrastructure.database.schema import (
    media_genres,
    media_progresses,
    media_tags,
    podcast_episodes,
    podcasts,
)
from shelfctl.infrastructure.repositories.catalog import (
    CatalogFilterStrategy,
    GroupPredicate,
    common_missing,
    has_issues,
    has_label,
    has_open_feed,
    is_blank,
    missing_predicate,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncConnection

_MISSING_FIELDS: dict[str, Callable[[], ColumnElement[bool]]] = {
    **common_missing(podcasts),
    "author": lambda: is_blank(podcasts.c.author),
    "feedUrl": lambda: is_blank(podcasts.c.feed_url),
    "imageUrl": lambda: is_blank(podcasts.c.image_url),
    "itunesId": lambda: is_blank(podcasts.c.itunes_id),
}


class PodcastFilterStrategy(CatalogFilterStrategy):
    """Catalog queries for podcast libraries."""

    media_type = MediaType.PODCAST
    media_table = podcasts
    ignored_groups = frozenset({FilterGroup.SERIES, FilterGroup.EBOOKS, FilterGroup.PROGRESS})

    def group_predicates(self) -> dict[FilterGroup, GroupPredicate]:
        return {
            FilterGroup.GENRES: lambda v, _u: has_label(media_genres, "genre", podcasts.c.id, v),
            FilterGroup.TAGS: lambda v, _u: has_label(media_tags, "tag", podcasts.c.id, v),
            FilterGroup.LANGUAGES: lambda v, _u: podcasts.c.language == v,
            FilterGroup.MISSING: lambda v, _u: missing_predicate(_MISSING_FIELDS, v),
        }

    def flag_predicates(self) -> dict[str, Callable[[], ColumnElement[bool]]]:
        return {
            "issues": has_issues,
            "feed-open": has_open_feed,
            "explicit": lambda: podcasts.c.explicit == 1,
        }

    def sort_expressions(self, user_id: str | None) -> dict[str, ColumnElement[Any]]:
        num_episodes = (
            select(func.count(podcast_episodes.c.id))
            .where(podcast_episodes.c.podcast_id == podcasts.c.id)
            .scalar_subquery()
        )
        return {
            **super().sort_expressions(user_id),
            "media.metadata.author": podcasts.c.author.collate("NOCASE"),
            "media.metadata.releaseDate": podcasts.c.release_date,
            "media.numEpisodes": num_episodes,
        }

    async def load_media(
        self,
        conn: AsyncConnection,
        media_ids: list[str],
        *,
        user_id: str | None,
        include: frozenset[IncludeFlag],
    ) -> dict[str, dict[str, Any]]:
        if not media_ids:
            return {}

        rows = (await conn.execute(select(podcasts).where(podcasts.c.id.in_(media_ids)))).mappings()
        media = {str(r["id"]): dict(r) for r in rows.all()}
        genres, tags = await self.load_common_labels(conn, media_ids)

        episode_stmt = (
            select(podcast_episodes.c.podcast_id, func.count(podcast_episodes.c.id))
            .where(podcast_episodes.c.podcast_id.in_(media_ids))
            .group_by(podcast_episodes.c.podcast_id)
        )
        num_episodes = {str(pid): int(n) for pid, n in (await conn.execute(episode_stmt)).all()}

        incomplete: dict[str, int] | None = None
        if IncludeFlag.NUM_EPISODES_INCOMPLETE in include:
            finished = await self._finished_episode_counts(conn, media_ids, user_id)
            incomplete = {mid: num_episodes.get(mid, 0) - finished.get(mid, 0) for mid in media_ids}

        loaded: dict[str, dict[str, Any]] = {}
        for media_id, row in media.items():
            payload = {
                **row,
                "genres": genres.get(media_id, []),
                "tags": tags.get(media_id, []),
                "num_episodes": num_episodes.get(media_id, 0),
            }
            if incomplete is not None:
                payload["num_episodes_incomplete"] = incomplete.get(media_id, 0)
            loaded[media_id] = payload
        return loaded

    async def _finished_episode_counts(
        self,
        conn: AsyncConnection,
        media_ids: list[str],
        user_id: str | None,
    ) -> dict[str, int]:
        if not user_id:
            return {}
        p = media_progresses
        stmt = (
            select(podcast_episodes.c.podcast_id, func.count(p.c.id))
            .join(
                p,
                and_(
                    p.c.media_item_id == podcast_episodes.c.id,
                    p.c.user_id == user_id,
                    p.c.is_finished == 1,
                ),
            )
            .where(podcast_episodes.c.podcast_id.in_(media_ids))
            .group_by(podcast_episodes.c.podcast_id)
        )
        return {str(pid): int(n) for pid, n in (await conn.execute(stmt)).all()}
