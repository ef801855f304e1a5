"""
BlockGov Ledger Storage

Append-only, crash-safe persistence for decision ledger entries.

STORE GUARANTEES:
1. Append-only: no rewrites, no reordering
2. Crash-safe: flush + fsync after each record (configurable)
3. Replay-deterministic: loading the file yields the entries in append order
4. A failed append is cut back to the previous length before the error
   propagates; if that is impossible the store refuses further appends

FILE FORMAT:
    One canonical JSON object per line (UTF-8), each the ``to_dict`` form
    of a Decision, fingerprint included. A torn final line (a crash in the
    middle of a write) is dropped when the file is reopened for appending.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import IO, Iterator, Optional, Protocol, Union

from ..canon import canonical_json
from ..exceptions import LedgerIntegrityError
from ..models import Decision

logger = logging.getLogger(__name__)


class LedgerStore(Protocol):
    """Backing storage for a DecisionLedger."""

    def append(self, decision: Decision) -> None:
        """Durably record one entry. Raises OSError on failure."""
        ...

    def load(self) -> Iterator[Decision]:
        """Yield stored entries in append order."""
        ...


class JsonlLedgerStore:
    """
    JSON-lines ledger file.

    Usage:
        store = JsonlLedgerStore("var/ledger.jsonl")
        ledger = DecisionLedger.from_store(store)
        ...
        store.close()

    Or with context manager:
        with JsonlLedgerStore(path) as store:
            ledger = DecisionLedger.from_store(store)
    """

    def __init__(self, path: Union[str, Path], fsync: bool = True):
        self._path = Path(path)
        self._fsync = fsync
        self._file: Optional[IO[str]] = None
        self._poisoned = False

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Iterator[Decision]:
        """
        Yield stored entries in order.

        Raises:
            LedgerIntegrityError: If a complete line cannot be parsed
        """
        if not self._path.exists():
            return
        with open(self._path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.endswith("\n"):
                    logger.warning(
                        "Ignoring torn final record in %s (line %d)", self._path, line_no
                    )
                    return
                if not line.strip():
                    continue
                try:
                    yield Decision.from_dict(json.loads(line))
                except (ValueError, KeyError, TypeError) as exc:
                    raise LedgerIntegrityError(
                        message=f"Unreadable ledger record at line {line_no}",
                        details={"path": str(self._path), "line": line_no, "error": str(exc)},
                    ) from exc

    def append(self, decision: Decision) -> None:
        """
        Write one entry and sync it to disk.

        If the write, flush or fsync fails, the file is cut back to its
        length before this call and the OSError is re-raised. When even
        that fails, the store refuses every later append.
        """
        if self._poisoned:
            raise OSError(f"Ledger file {self._path} needs recovery after a failed append")
        f = self._open_for_append()
        offset = os.fstat(f.fileno()).st_size
        try:
            f.write(canonical_json(decision.to_dict()) + "\n")
            f.flush()
            if self._fsync:
                os.fsync(f.fileno())
        except OSError:
            self._rollback(offset)
            raise

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> JsonlLedgerStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _open_for_append(self) -> IO[str]:
        if self._file is None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._truncate_torn_tail()
            self._file = open(self._path, "a", encoding="utf-8")
        return self._file

    def _truncate_torn_tail(self) -> None:
        if not self._path.exists():
            return
        with open(self._path, "r+b") as f:
            data = f.read()
            if not data or data.endswith(b"\n"):
                return
            f.truncate(data.rfind(b"\n") + 1)

    def _rollback(self, offset: int) -> None:
        """Drop whatever a failed append left past ``offset``."""
        file, self._file = self._file, None
        try:
            file.close()
        except OSError as exc:
            # Unflushed bytes are cut by the truncate below
            logger.warning("Closing %s after failed append: %s", self._path, exc)
        try:
            with open(self._path, "r+b") as raw:
                raw.truncate(offset)
                raw.flush()
                os.fsync(raw.fileno())
        except OSError as exc:
            self._poisoned = True
            logger.error(
                "Could not roll back failed append to %s; refusing further appends: %s",
                self._path,
                exc,
            )
            return
        logger.warning("Rolled back failed append to %s at byte %d", self._path, offset)
