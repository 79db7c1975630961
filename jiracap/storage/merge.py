"""Merging of import batches into a snapshot.

All functions are pure: they return a new Snapshot and leave their input
untouched, so a failed operation never leaves a half-merged state behind.
"""

from collections.abc import Callable

from jiracap.api.models import ImportBatch, Snapshot, TeamMember

MANUAL_TAG_PREFIX = "MANUAL-IMPORT-"


class SnapshotError(Exception):
    """Base class for rejected snapshot operations."""


class DuplicateSourceError(SnapshotError):
    """The source is already connected."""

    def __init__(self, source_tag: str):
        super().__init__(f"Source {source_tag} is already connected.")
        self.source_tag = source_tag


class UnknownSourceError(SnapshotError):
    """The source is not connected."""

    def __init__(self, source_tag: str):
        super().__init__(f"Source {source_tag} is not connected.")
        self.source_tag = source_tag


class UnknownMemberError(SnapshotError):
    """No team member has the given id."""

    def __init__(self, member_id: str):
        super().__init__(f"Team member {member_id} not found.")
        self.member_id = member_id


def merge_team(existing: list[TeamMember], incoming: list[TeamMember]) -> list[TeamMember]:
    """Merge members by id, last write wins.

    A capacity the user edited survives re-imports of the same member.
    """
    merged = {member.id: member for member in existing}
    for member in incoming:
        current = merged.get(member.id)
        if current is not None and current.capacity_edited:
            member = member.model_copy(
                update={
                    "capacity_per_sprint": current.capacity_per_sprint,
                    "capacity_edited": True,
                }
            )
        merged[member.id] = member
    return list(merged.values())


def merge_batch(snapshot: Snapshot, batch: ImportBatch, source_tag: str) -> Snapshot:
    """Integrate a normalized batch as a new source.

    Issues and sprints are tagged and appended, never deduplicated against
    other sources. While the snapshot only holds bootstrap data, the batch
    replaces it instead.

    Raises:
        DuplicateSourceError: If source_tag is already connected
    """
    if source_tag in snapshot.sources:
        raise DuplicateSourceError(source_tag)

    tagged_issues = [i.model_copy(update={"source_tag": source_tag}) for i in batch.issues]
    tagged_sprints = [s.model_copy(update={"source_tag": source_tag}) for s in batch.sprints]

    if snapshot.is_bootstrap:
        base = Snapshot()
    else:
        base = snapshot

    return Snapshot(
        team=merge_team(base.team, batch.team),
        issues=[*base.issues, *tagged_issues],
        sprints=[*base.sprints, *tagged_sprints],
        sources=[*snapshot.sources, source_tag],
    )


def remove_source(
    snapshot: Snapshot,
    source_tag: str,
    defaults: Callable[[], Snapshot],
) -> Snapshot:
    """Drop the issues and sprints of one source.

    Team members are kept, even when no remaining source references them.
    Removing the last source returns ``defaults()``.

    Raises:
        UnknownSourceError: If source_tag is not connected
    """
    if source_tag not in snapshot.sources:
        raise UnknownSourceError(source_tag)

    sources = [s for s in snapshot.sources if s != source_tag]
    if not sources:
        return defaults()

    return Snapshot(
        team=list(snapshot.team),
        issues=[i for i in snapshot.issues if i.source_tag != source_tag],
        sprints=[s for s in snapshot.sprints if s.source_tag != source_tag],
        sources=sources,
    )


def update_capacity(snapshot: Snapshot, member_id: str, capacity: float) -> Snapshot:
    """Replace one member's capacity per sprint.

    Raises:
        ValueError: If capacity is negative
        UnknownMemberError: If no member has member_id
    """
    if capacity < 0:
        raise ValueError("Capacity cannot be negative.")
    if snapshot.member(member_id) is None:
        raise UnknownMemberError(member_id)

    team = [
        m.model_copy(update={"capacity_per_sprint": capacity, "capacity_edited": True})
        if m.id == member_id
        else m
        for m in snapshot.team
    ]
    return Snapshot(
        team=team,
        issues=list(snapshot.issues),
        sprints=list(snapshot.sprints),
        sources=list(snapshot.sources),
    )


def next_manual_tag(sources: list[str]) -> str:
    """Return the first free MANUAL-IMPORT-<n> tag, starting at len(sources) + 1."""
    n = len(sources) + 1
    while f"{MANUAL_TAG_PREFIX}{n}" in sources:
        n += 1
    return f"{MANUAL_TAG_PREFIX}{n}"


def replace_defaults(batch: ImportBatch, defaults: Callable[[], Snapshot]) -> Snapshot:
    """Use generated sample data in place of the bootstrap data.

    The result has no sources, so it stays demo data: the first real import
    replaces it and ``reset`` brings the bootstrap data back. Sprints come
    from ``defaults()`` when the batch has none.
    """
    return Snapshot(
        team=list(batch.team),
        issues=[i.model_copy(update={"source_tag": None}) for i in batch.issues],
        sprints=list(batch.sprints) or defaults().sprints,
        sources=[],
    )
