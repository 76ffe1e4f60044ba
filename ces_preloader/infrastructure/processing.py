"""
Infrastructure adapters for hashing and re-encoding extracted entries.
"""

import asyncio
import hashlib
import logging

from ..application.domain import DigestTable, Microdata, Verifier
from ..application.exceptions import (
    DigestMismatchError,
    NoReferenceDigestError,
)


def latin1_to_text(data: bytes) -> str:
    """
    Convert bytes encoded in ISO-8859-1 to a str.

    Latin-1 maps every byte 0-255 to the code point of the same value, so
    this never fails and keeps one character per input byte.
    """
    return data.decode("latin-1")


def md5_hex(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


class Md5Verifier(Verifier):
    """An adapter that implements the Verifier port using MD5."""

    def __init__(self, digests: DigestTable):
        """Initializes the verifier with the (table, year) -> md5 table."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.digests = digests

    def expected_digest(self, table: Microdata, year: int) -> str:
        expected = self.digests.get(table, {}).get(year)
        if expected is None:
            raise NoReferenceDigestError(
                f"[{year}] No reference checksum for {table.token}"
            )
        return expected.lower()

    async def verify(self, entry: bytes, table: Microdata, year: int):
        """
        Compare the MD5 of the untouched entry bytes with the pinned value.

        This public method fulfills the Verifier port contract. The digest
        is computed in a worker thread since entries run to tens of
        megabytes.

        Args:
            entry: The raw bytes of the selected archive entry.
            table: The table the entry belongs to.
            year: The year the entry belongs to.

        Raises:
            NoReferenceDigestError: If no digest is pinned for the year.
            DigestMismatchError: If the digests differ.
        """

        expected = self.expected_digest(table, year)

        self.logger.info(f"[{year}] Computing checksum...")
        actual = await asyncio.to_thread(md5_hex, entry)

        if actual != expected:
            raise DigestMismatchError(
                f"[{year}] Checksum mismatch for {table.token}. "
                f"Expected {expected}, got {actual}",
                expected=expected,
                actual=actual,
            )

        self.logger.info(f"[{year}] Checksum verified successfully.")
