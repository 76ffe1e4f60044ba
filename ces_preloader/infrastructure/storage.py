"""Filesystem implementation of the Store port."""

import asyncio
import contextlib
import logging
import os
from pathlib import Path
from typing import Generator, Iterator

import pandas

from ..application.domain import Microdata, Store
from ..application.exceptions import StorageError

CSV_SEPARATOR = ";"


class CsvStore(Store):
    """Keeps one UTF-8 CSV extract per (table, year) under a base directory."""

    def __init__(self, input_dir: Path):
        """Initializes the store."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.input_dir = Path(input_dir)

    def path_for(self, table: Microdata, year: int) -> Path:
        return self.input_dir / f"{table.stem}.{year}.csv"

    async def exists(self, table: Microdata, year: int) -> bool:
        path = self.path_for(table, year)
        try:
            return await asyncio.to_thread(path.exists)
        except OSError as e:
            raise StorageError(f"Cannot check {path}: {e}") from e

    @contextlib.contextmanager
    def _atomic_target(self, destination: Path) -> Generator[Path, None, None]:
        """Provides a temporary '.part' path and ensures cleanup."""
        part_path = destination.with_suffix(destination.suffix + ".part")
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            yield part_path
        finally:
            part_path.unlink(missing_ok=True)

    def _blocking_write(self, destination: Path, text: str):
        with self._atomic_target(destination) as part_path:
            # newline="" keeps the entry's line endings untouched
            with open(part_path, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(part_path, destination)

    async def write(self, table: Microdata, year: int, text: str) -> Path:
        """
        Persist an extract so that it appears at its path all at once.

        The text is written to a '.part' sibling and renamed over the final
        path, so a concurrent existence check never sees a half-written
        file.

        Raises:
            StorageError: If the directory or the file cannot be written.
        """

        destination = self.path_for(table, year)
        self.logger.info(f"[{year}] Writing {destination}...")
        try:
            await asyncio.to_thread(self._blocking_write, destination, text)
        except OSError as e:
            raise StorageError(f"Cannot write {destination}: {e}") from e
        return destination

    def read_cursos(
        self, year: int, chunksize: int = 100_000
    ) -> Iterator[pandas.DataFrame]:
        """
        Lazily read a persisted Cursos extract in chunks of rows.

        Raises:
            StorageError: If the extract has not been materialized yet.
        """
        path = self.path_for(Microdata.CURSOS, year)
        if not path.exists():
            raise StorageError(
                f"[{year}] {path} does not exist, run the preloader first"
            )
        return pandas.read_csv(
            path,
            sep=CSV_SEPARATOR,
            chunksize=chunksize,
            encoding="utf-8",
            dtype=str,
        )
