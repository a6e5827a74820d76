"""Media kinds, filter groups, progress states, and include flags.

These enums are the closed vocabularies the catalog engine dispatches on.
Raw filter flags are deliberately *not* an enum: any string that is not a
known group is passed through to the strategy, which decides whether the
flag exists for its media kind.
"""

from __future__ import annotations

from enum import StrEnum


class MediaType(StrEnum):
    """Kinds of library content."""

    BOOK = "book"
    PODCAST = "podcast"


class FilterGroup(StrEnum):
    """Recognised filter-token groups, in parser precedence order."""

    GENRES = "genres"
    TAGS = "tags"
    SERIES = "series"
    AUTHORS = "authors"
    PROGRESS = "progress"
    NARRATORS = "narrators"
    PUBLISHERS = "publishers"
    MISSING = "missing"
    LANGUAGES = "languages"
    TRACKS = "tracks"
    EBOOKS = "ebooks"


class ProgressState(StrEnum):
    """Per-user listening/reading state derived from progress records."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    FINISHED = "finished"
    EBOOK_IN_PROGRESS = "ebook-in-progress"
    AUDIO_IN_PROGRESS = "audio-in-progress"


class IncludeFlag(StrEnum):
    """Optional enrichments a caller can request."""

    RSS_FEED = "rssfeed"
    NUM_EPISODES_INCOMPLETE = "numepisodesincomplete"
