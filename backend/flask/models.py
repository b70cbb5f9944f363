# models.py - records read from the catalog store and access decisions
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Title:
    id: int
    name: str
    release_year: int | None
    duration: int | None
    genre: str
    poster: str | None
    video_path: str | None
    # legacy play counter, kept for display only; ranking never reads it
    views: int = 0

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row["id"],
            name=row["name"],
            release_year=row["release_year"],
            duration=row["duration"],
            genre=row["genre"] or "",
            poster=row["poster"],
            video_path=row["video_path"],
            views=row["views"] or 0,
        )

    def to_dict(self, include_asset=False):
        data = {
            "id": self.id,
            "name": self.name,
            "release_year": self.release_year,
            "duration": self.duration,
            "genre": self.genre,
            "poster": self.poster,
            "views": self.views,
        }
        if include_asset:
            data["video_path"] = self.video_path
        return data


@dataclass(frozen=True)
class InteractionEvent:
    id: int
    title_id: int
    viewer_id: str
    watched_at: float
    progress: float

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row["id"],
            title_id=row["title_id"],
            viewer_id=row["viewer_id"],
            watched_at=row["watched_at"],
            progress=row["progress"],
        )


class SubscriptionState(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    NONE = "none"          # never subscribed
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value):
        """Map a collaborator-supplied value (any casing) onto a state.

        Raises ValueError for anything that is not one of the four states.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"not a subscription state: {value!r}")
        return cls(value.strip().lower())


@dataclass(frozen=True)
class Authorized:
    title: Title

    @property
    def video_path(self):
        return self.title.video_path


@dataclass(frozen=True)
class Denied:
    reason: SubscriptionState
