"""Value objects decoded from the Quay.io tag-listing API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Tag:
    """A single image tag of a Quay.io repository.

    Attributes:
        name: Tag name (e.g. ``v1.0.0``).
        manifest_digest: Digest of the manifest the tag points to.
        size: Image size in bytes.
        last_modified: Informational timestamp as returned by the API.
        expiration: Informational expiration timestamp.
        start_ts: Epoch seconds at which the tag became active.
        end_ts: Epoch seconds at which the tag stopped being active.
    """

    name: str
    manifest_digest: str | None = None
    size: int | None = None
    last_modified: str | None = None
    expiration: str | None = None
    start_ts: int | None = None
    end_ts: int | None = None

    @property
    def recency(self) -> int:
        """Return the sort key, ``0`` when the tag carries no ``start_ts``."""
        if self.start_ts is not None:
            return self.start_ts
        return 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        """Build a :class:`Tag` from one element of the API ``tags`` array.

        Unknown keys are ignored.
        """
        return cls(
            name=data["name"],
            manifest_digest=data.get("manifest_digest"),
            size=data.get("size"),
            last_modified=data.get("last_modified"),
            expiration=data.get("expiration"),
            start_ts=data.get("start_ts"),
            end_ts=data.get("end_ts"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the tag using the API field names."""
        return {
            "name": self.name,
            "manifest_digest": self.manifest_digest,
            "size": self.size,
            "last_modified": self.last_modified,
            "expiration": self.expiration,
            "start_ts": self.start_ts,
            "end_ts": self.end_ts,
        }

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TagPage:
    """One page of the tag-listing response.

    ``page`` and ``has_additional`` are carried for completeness only; a
    single page is all that is ever requested.
    """

    tags: tuple[Tag, ...] = ()
    page: int | None = None
    has_additional: bool | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TagPage:
        """Decode a response body. A missing or ``null`` tag list is empty."""
        raw_tags = data.get("tags") or []
        return cls(
            tags=tuple(Tag.from_dict(item) for item in raw_tags),
            page=data.get("page"),
            has_additional=data.get("has_additional"),
        )


def sort_by_recency(tags: list[Tag] | tuple[Tag, ...]) -> list[Tag]:
    """Return *tags* most recent first.

    A tag without ``start_ts`` goes after one whose ``start_ts`` is an
    explicit ``0``. The sort is stable, so tags otherwise tied keep their
    response order.
    """
    return sorted(
        tags,
        key=lambda tag: (tag.recency, tag.start_ts is not None),
        reverse=True,
    )
