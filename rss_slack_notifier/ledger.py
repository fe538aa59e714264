"""
Plain-text ledger of delivered items.

Keeps one item identifier per line in an append-only file so that items
delivered in an earlier run are not sent again.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Raised when the ledger file cannot be created, read or written."""

    pass


class SentLedger:
    """
    Append-only record of delivered item identifiers.

    The file is read once per run with :meth:`load`; callers keep the
    returned set up to date themselves instead of re-reading the file.
    Concurrent runs against the same file are not supported.
    """

    def __init__(self, path: str | Path):
        """
        Initialize the ledger with its file path.

        Parameters
        ----------
        path : str | Path
            Path to the ledger file.
        """
        self.path = Path(path)

    def ensure_exists(self) -> None:
        """
        Create an empty ledger file if it does not exist yet.

        Parent directories are created as needed.

        Raises
        ------
        LedgerError
            If the file or its directory cannot be created.
        """
        if self.path.exists():
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()
        except OSError as e:
            raise LedgerError(f"Error creating sent news file {self.path}: {e}") from e

        logger.info("Created sent news file at %s", self.path)

    def load(self) -> set[str]:
        """
        Read every identifier recorded so far.

        Lines are split on newline characters only. Blank lines,
        including the one after the final newline, are ignored. Bytes
        that are not valid UTF-8 are kept as surrogate escapes so they
        are written back unchanged.

        Returns
        -------
        set[str]
            Identifiers of all previously delivered items.

        Raises
        ------
        LedgerError
            If the file cannot be read.
        """
        try:
            text = self.path.read_bytes().decode("utf-8", errors="surrogateescape")
        except OSError as e:
            raise LedgerError(f"Error reading sent news file {self.path}: {e}") from e

        identifiers = {line.strip() for line in text.split("\n")}
        identifiers.discard("")

        logger.debug("Loaded %d sent item(s) from %s", len(identifiers), self.path)
        return identifiers

    def append(self, identifier: str) -> None:
        """
        Record a delivered item.

        The write is flushed to disk before returning.

        Parameters
        ----------
        identifier : str
            Identifier of the delivered item.

        Raises
        ------
        LedgerError
            If the identifier cannot be stored on a single line or the
            write fails.
        """
        if not identifier or not identifier.strip():
            raise LedgerError("Cannot record an empty identifier")
        if "\n" in identifier or "\r" in identifier:
            raise LedgerError(f"Identifier contains a line break: {identifier!r}")

        try:
            with open(self.path, "a", encoding="utf-8", errors="surrogateescape") as f:
                f.write(identifier + "\n")
                f.flush()
                os.fsync(f.fileno())
        except (OSError, UnicodeError) as e:
            raise LedgerError(f"Error writing to sent news file {self.path}: {e}") from e

        logger.debug("Recorded sent item: %s", identifier[:80])
