"""
The core application service and pipeline, containing pure business logic.

This module defines the main orchestrator (PreloaderService) that fans the
work out over all requested years, and the pipeline (CesPipeline) that
materializes the extract for a single year.
"""

import asyncio
import logging
from typing import Callable, Iterable, Optional

from tqdm.contrib.logging import logging_redirect_tqdm
from tqdm.asyncio import tqdm_asyncio

from .domain import *
from .exceptions import FleetError, PipelineError

logger = logging.getLogger(__name__)


class CesPipeline:
    """Encapsulates the full processing pipeline for a single year."""

    def __init__(
        self,
        fetcher: Fetcher,
        selector: Selector,
        verifier: Verifier,
        normalize: Callable[[bytes], str],
        store: Store,
        table: Microdata = Microdata.CURSOS,
    ):
        """Initializes the pipeline with necessary dependencies (ports)."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.fetcher = fetcher
        self.selector = selector
        self.verifier = verifier
        self.normalize = normalize
        self.store = store
        self.table = table

    async def already_downloaded(self, ces: Ces) -> bool:
        return await self.store.exists(self.table, ces.year)

    async def ensure_data(self, ces: Ces) -> YearOutcome:
        """Ensures that the extract for this year is materialized.

        Stages run strictly in sequence and stop at the first failure. Any
        exception, expected or not, is tagged with the stage it hit so the
        orchestrator can record it against this year alone.

        Args:
            ces: The year to materialize.

        Returns:
            A CACHED outcome if the extract already existed, DOWNLOADED
            otherwise.

        Raises:
            PipelineError: Wrapping the failure and the stage it hit.
        """

        year = ces.year
        stage = PipelineStage.CHECKING
        try:
            if await self.already_downloaded(ces):
                self.logger.info(f"[{year}] Data already exists. Skipping.")
                return YearOutcome(year, OutcomeStatus.CACHED)

            self.logger.info(f"[{year}] Starting download...")

            stage = PipelineStage.FETCHING
            raw = await self.fetcher.fetch(ces)

            stage = PipelineStage.EXTRACTING
            entry = await self.selector.extract(ces, raw, self.table)
            del raw

            stage = PipelineStage.VERIFYING
            await self.verifier.verify(entry, self.table, year)

            stage = PipelineStage.NORMALIZING
            text = self.normalize(entry)

            stage = PipelineStage.PERSISTING
            await self.store.write(self.table, year, text)
        except Exception as e:
            raise PipelineError(year, stage, e) from e

        self.logger.info(f"[{year}] Data downloaded!")
        return YearOutcome(year, OutcomeStatus.DOWNLOADED)


class PreloaderService:
    """Orchestrates the preloading of every requested year."""

    def __init__(self, pipeline: CesPipeline, concurrent_downloads: int):
        """Initializes the service with the reusable per-year pipeline."""
        self.pipeline = pipeline
        self.concurrent_downloads = max(1, concurrent_downloads)

    async def _run_pipeline_with_semaphore(
        self, ces: Ces, semaphore: asyncio.Semaphore
    ) -> YearOutcome:
        """Run one year's pipeline, turning its failure into an outcome."""
        async with semaphore:
            try:
                return await self.pipeline.ensure_data(ces)
            except PipelineError as e:
                logger.error(f"The data for one year failed: {e}")
                return YearOutcome(
                    ces.year, OutcomeStatus.FAILED, stage=e.stage, error=e.cause
                )

    def _log_summary(self, report: FleetReport):
        failures = report.failures
        if not failures:
            logger.info(f"All {len(report.outcomes)} years are ok!")
            return

        logger.error(
            f"{len(failures)} of {len(report.outcomes)} years failed:"
        )
        for year, outcome in sorted(failures.items()):
            logger.error(
                f"  {year}: while {outcome.stage.value}: {outcome.error}"
            )

    async def ensure_all(
        self, years: Optional[Iterable[int]] = None
    ) -> FleetReport:
        """Ensures that the extracts for all requested years are on disk.

        Every year runs in its own task; a failing year never cancels the
        others. The outcomes are inspected only once all tasks are done.

        Args:
            years: The years to materialize. Defaults to every supported year.

        Returns:
            The per-year outcomes, when every year succeeded.

        Raises:
            ConstructionError: If any requested year is unsupported.
            FleetError: If one or more years failed, carrying the report.
        """

        if years is None:
            years = SUPPORTED_YEARS
        datasets = sorted(
            {Ces(year) for year in years}, key=lambda ces: ces.year
        )
        if not datasets:
            logger.info("No years to process.")
            return FleetReport(outcomes={})

        semaphore = asyncio.Semaphore(self.concurrent_downloads)
        tasks = [
            asyncio.create_task(
                self._run_pipeline_with_semaphore(ces, semaphore)
            )
            for ces in datasets
        ]

        logger.info(
            f"Starting {len(tasks)} pipelines with a concurrency "
            f"limit of {self.concurrent_downloads}..."
        )

        with logging_redirect_tqdm():
            outcomes = await tqdm_asyncio.gather(
                *tasks, desc="Overall Progress", unit="year"
            )

        report = FleetReport(
            outcomes={outcome.year: outcome for outcome in outcomes}
        )
        self._log_summary(report)

        if not report.ok:
            raise FleetError(report)
        return report
