"""ZIP implementation of the Selector port."""

import asyncio
import io
import logging
import zipfile
import zlib

from ..application.domain import MICRODATA_PREFIX, Ces, Microdata, Selector
from ..application.exceptions import CorruptArchiveError, EntryNotFoundError

# Raised by zipfile while reading a damaged, encrypted or unsupported member.
_READ_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    RuntimeError,
)


class ZipEntrySelector(Selector):
    """An adapter that picks a single member out of an in-memory archive."""

    def __init__(self, family_prefix: str = MICRODATA_PREFIX):
        """Initializes the selector."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.family_prefix = family_prefix

    def select_entry(
        self, raw: bytes, family_prefix: str, table_token: str
    ) -> bytes:
        """
        Read the first member whose name contains both substrings.

        Matching is case-sensitive and follows the order of the archive's
        central directory, which zipfile preserves.

        Raises:
            CorruptArchiveError: If the bytes are not a readable archive.
            EntryNotFoundError: If no member matches.
        """
        try:
            with zipfile.ZipFile(io.BytesIO(raw)) as archive:
                names = [
                    name
                    for name in archive.namelist()
                    if family_prefix in name and table_token in name
                ]
                if not names:
                    raise EntryNotFoundError(
                        f"No entry containing {family_prefix!r} and "
                        f"{table_token!r} in archive"
                    )
                if len(names) > 1:
                    self.logger.warning(
                        f"{len(names)} entries match {table_token!r}, "
                        f"using {names[0]}"
                    )
                return archive.read(names[0])
        except _READ_ERRORS as e:
            raise CorruptArchiveError(f"Unreadable archive: {e}") from e

    async def extract(self, ces: Ces, raw: bytes, table: Microdata) -> bytes:
        """
        Take the table's entry out of the archive in a worker thread.

        Scanning and inflating an archive of tens of megabytes is CPU-bound,
        so it runs off the event loop to keep other years' downloads going.
        """
        self.logger.info(f"[{ces.year}] Extracting {table.token} microdata...")
        entry = await asyncio.to_thread(
            self.select_entry, raw, self.family_prefix, table.token
        )
        self.logger.debug(f"[{ces.year}] Extracted {len(entry)} bytes")
        return entry
