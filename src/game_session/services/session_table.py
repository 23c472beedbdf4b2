"""In-process table of game sessions keyed by user."""

from dataclasses import dataclass, field

from game_session.domain.sessions import SessionRecord, SessionSnapshot


@dataclass
class SessionTable:
    """Owns every session record; records are never deleted."""

    _records: dict[str, SessionRecord] = field(default_factory=dict)

    def get(self, user: str) -> SessionRecord | None:
        """Return the record for a user without creating one."""
        return self._records.get(user)

    def get_or_create(self, user: str) -> SessionRecord:
        """Return the record for a user, creating a fresh one if missing."""
        record = self._records.get(user)
        if record is None:
            record = SessionRecord()
            self._records[user] = record
        return record

    def snapshot(self) -> tuple[tuple[str, SessionSnapshot], ...]:
        """Return an immutable copy of every record."""
        return tuple(
            (user, record.snapshot()) for user, record in self._records.items()
        )

    def __len__(self) -> int:
        return len(self._records)
