# -*- coding: utf-8 -*-
"""
Provenance Tracking for GreenScore

Every calculation, ESG score report and compliance check carries a SHA-256
hash of its inputs and outputs. The tracker appends those hashes to a
single hash chain so that a reviewer can later confirm a reported figure
was produced from the recorded inputs and not edited afterwards.

Each entry links to the chain head at the time it was recorded:

    chain_hash = sha256({previous, data, action, timestamp})

so removing, reordering or editing an entry breaks every later link.

Example:
    >>> from greenscore.provenance import ProvenanceTracker, compute_hash
    >>> tracker = ProvenanceTracker()
    >>> _ = tracker.record("calculation", "ACT-1", "calculate", compute_hash({"co2": 267.0}))
    >>> tracker.verify_chain("calculation", "ACT-1")[0]
    True

Author: GreenScore Platform Team
Status: Production Ready
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

GENESIS_HASH = hashlib.sha256(b"greenscore-provenance-genesis").hexdigest()


def compute_hash(data: Any) -> str:
    """SHA-256 of ``data`` serialised as canonical JSON (sorted keys)."""
    serialized = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def link_hash(previous_hash: str, data_hash: str, action: str, timestamp: str) -> str:
    """Chain hash binding an operation to the chain head before it."""
    return compute_hash({
        "previous": previous_hash,
        "data": data_hash,
        "action": action,
        "timestamp": timestamp,
    })


@dataclass(frozen=True)
class ProvenanceEntry:
    """One recorded operation."""

    entity_type: str
    entity_id: str
    action: str
    data_hash: str
    timestamp: str
    previous_hash: str
    chain_hash: str

    @property
    def key(self) -> str:
        return f"{self.entity_type}:{self.entity_id}"

    def is_intact(self) -> bool:
        return self.chain_hash == link_hash(
            self.previous_hash, self.data_hash, self.action, self.timestamp,
        )

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class ProvenanceTracker:
    """
    Append-only, chain-hashed log of GreenScore operations.

    Entries are kept in recording order and indexed by
    ``entity_type:entity_id`` for per-entity lookups. All methods are
    thread-safe.
    """

    def __init__(self) -> None:
        self._entries: List[ProvenanceEntry] = []
        self._by_entity: Dict[str, List[ProvenanceEntry]] = {}
        self._head = GENESIS_HASH
        self._lock = threading.Lock()

    def record(self, entity_type: str, entity_id: str, action: str, data_hash: str) -> str:
        """
        Append an operation to the chain.

        Args:
            entity_type: calculation, esg_score, compliance, ...
            entity_id: Identifier of the entity within its type.
            action: calculate, score, check, ...
            data_hash: SHA-256 of the operation payload.

        Returns:
            The new chain head.
        """
        timestamp = datetime.now(timezone.utc).replace(microsecond=0).isoformat()
        with self._lock:
            entry = ProvenanceEntry(
                entity_type=entity_type,
                entity_id=entity_id,
                action=action,
                data_hash=data_hash,
                timestamp=timestamp,
                previous_hash=self._head,
                chain_hash=link_hash(self._head, data_hash, action, timestamp),
            )
            self._entries.append(entry)
            self._by_entity.setdefault(entry.key, []).append(entry)
            self._head = entry.chain_hash

        logger.debug("Provenance %s %s -> %s", entry.key, action, entry.chain_hash[:16])
        return entry.chain_hash

    def get_chain(self, entity_type: str, entity_id: str) -> List[ProvenanceEntry]:
        """Entries recorded for one entity, oldest first."""
        with self._lock:
            return list(self._by_entity.get(f"{entity_type}:{entity_id}", []))

    def verify_chain(self, entity_type: str, entity_id: str) -> Tuple[bool, List[ProvenanceEntry]]:
        """Recompute the chain hash of every entry recorded for an entity."""
        chain = self.get_chain(entity_type, entity_id)
        for entry in chain:
            if not entry.is_intact():
                logger.warning("Provenance chain broken for %s at %s", entry.key, entry.timestamp)
                return False, chain
        return True, chain

    @property
    def head(self) -> str:
        return self._head

    @property
    def entry_count(self) -> int:
        with self._lock:
            return len(self._entries)

    def export_json(self) -> str:
        """All entries, in recording order, as a JSON array."""
        with self._lock:
            entries = [entry.to_dict() for entry in self._entries]
        return json.dumps(entries, indent=2)

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()
            self._by_entity.clear()
            self._head = GENESIS_HASH


# ---------------------------------------------------------------------------
# Process-wide tracker
# ---------------------------------------------------------------------------

_tracker: Optional[ProvenanceTracker] = None
_tracker_lock = threading.Lock()


def get_provenance_tracker() -> ProvenanceTracker:
    global _tracker
    if _tracker is None:
        with _tracker_lock:
            if _tracker is None:
                _tracker = ProvenanceTracker()
    return _tracker


def reset_provenance_tracker() -> None:
    """Discard the process-wide tracker (test teardown)."""
    global _tracker
    with _tracker_lock:
        _tracker = None


__all__ = [
    "GENESIS_HASH",
    "ProvenanceEntry",
    "ProvenanceTracker",
    "compute_hash",
    "link_hash",
    "get_provenance_tracker",
    "reset_provenance_tracker",
]
