"""The snapshot store: sole owner of the working set."""

import logging

from jiracap.api.models import ImportBatch, Snapshot
from jiracap.config.defaults import bootstrap_snapshot
from jiracap.storage import merge
from jiracap.storage.local import LocalStorage

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Hold the current snapshot and apply mutations to it.

    Every mutation computes a complete new snapshot first and only then
    replaces the current one, so readers never see a partial merge. After a
    successful mutation the snapshot is persisted; a failed save is logged
    and does not roll the in-memory state back.
    """

    def __init__(
        self,
        snapshot: Snapshot | None = None,
        storage: LocalStorage | None = None,
    ) -> None:
        self._snapshot = snapshot if snapshot is not None else bootstrap_snapshot()
        self._storage = storage

    @classmethod
    def load(cls, storage: LocalStorage) -> "SnapshotStore":
        """Restore the saved workspace, falling back to bootstrap data."""
        return cls(storage.load_workspace(), storage)

    @property
    def snapshot(self) -> Snapshot:
        """The current snapshot. Treat it as read-only."""
        return self._snapshot

    def has_source(self, source_tag: str) -> bool:
        """Check if a source is already connected."""
        return source_tag in self._snapshot.sources

    def import_batch(self, batch: ImportBatch, source_tag: str) -> Snapshot:
        """Merge a batch as a new source.

        Raises:
            DuplicateSourceError: If source_tag is already connected
        """
        snapshot = merge.merge_batch(self._snapshot, batch, source_tag)
        logger.info(
            "Imported %s: %d issues, %d sprints, %d members",
            source_tag,
            len(batch.issues),
            len(batch.sprints),
            len(batch.team),
        )
        return self._commit(snapshot)

    def import_manual(self, batch: ImportBatch) -> tuple[str, Snapshot]:
        """Merge a pasted batch under the next free manual import tag."""
        source_tag = merge.next_manual_tag(self._snapshot.sources)
        return source_tag, self.import_batch(batch, source_tag)

    def remove_source(self, source_tag: str) -> Snapshot:
        """Remove a source; removing the last one restores bootstrap data.

        Raises:
            UnknownSourceError: If source_tag is not connected
        """
        snapshot = merge.remove_source(self._snapshot, source_tag, bootstrap_snapshot)
        logger.info("Removed source %s", source_tag)
        return self._commit(snapshot, clear=snapshot.is_bootstrap)

    def set_capacity(self, member_id: str, capacity: float) -> Snapshot:
        """Change one member's capacity per sprint.

        Raises:
            UnknownMemberError: If no member has member_id
        """
        return self._commit(merge.update_capacity(self._snapshot, member_id, capacity))

    def load_sample(self, batch: ImportBatch) -> Snapshot:
        """Replace the whole working set with generated sample data.

        Connected sources are dropped; the sample counts as demo data.
        """
        snapshot = merge.replace_defaults(batch, bootstrap_snapshot)
        logger.info(
            "Loaded sample data: %d issues, %d members", len(batch.issues), len(batch.team)
        )
        return self._commit(snapshot)

    def reset(self) -> Snapshot:
        """Drop all sources and return to bootstrap data."""
        return self._commit(bootstrap_snapshot(), clear=True)

    def _commit(self, snapshot: Snapshot, clear: bool = False) -> Snapshot:
        self._snapshot = snapshot
        self._persist(clear)
        return snapshot

    def _persist(self, clear: bool) -> None:
        if self._storage is None:
            return
        try:
            if clear:
                self._storage.clear_workspace()
            else:
                self._storage.save_workspace(self._snapshot)
        except OSError as e:
            logger.warning("Failed to save workspace: %s", e)
