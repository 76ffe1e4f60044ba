"""
Dependency Injection container for the ces_preloader component.

This container uses the `dependency-injector` library to wire together all
the components of the application, such as services and infrastructure adapters,
based on the application's configuration.
"""

from pathlib import Path

from dependency_injector import containers, providers
import httpx

from ..application.domain import *
from ..application.service import CesPipeline, PreloaderService
from ..settings import settings

from .archive import ZipEntrySelector
from .decorators import RetryingFetcher
from .fetcher import HttpFetcher, build_tls_verify
from .manifest import load_digest_table
from .processing import Md5Verifier, latin1_to_text
from .storage import CsvStore


def _first_set(*values):
    return next((value for value in values if value is not None), None)


class Container(containers.DeclarativeContainer):
    """DI container for wiring the application components."""

    cli_args = providers.Configuration()

    config = providers.Object(settings)

    http_client = providers.Singleton(
        httpx.AsyncClient,
        verify=providers.Callable(
            build_tls_verify,
            verify_tls=settings.preloader.verify_tls,
            ca_bundle=settings.preloader.ca_bundle,
        ),
        follow_redirects=True,
    )

    fetcher: providers.Factory[Fetcher] = providers.Factory(
        RetryingFetcher,
        inner=providers.Factory(
            HttpFetcher,
            client=http_client,
            url_template=settings.preloader.url_template,
            timeout=settings.preloader.timeout,
            chunk_size=settings.preloader.chunk_size,
        ),
        attempts=settings.preloader.fetch_attempts,
    )

    selector: providers.Factory[Selector] = providers.Factory(ZipEntrySelector)

    verifier: providers.Factory[Verifier] = providers.Factory(
        Md5Verifier,
        digests=providers.Singleton(
            load_digest_table, settings.preloader.digest_manifest
        ),
    )

    store: providers.Factory[Store] = providers.Factory(
        CsvStore,
        input_dir=providers.Callable(
            Path,
            providers.Callable(
                _first_set, cli_args.input_dir, settings.paths.input_dir
            ),
        ),
    )

    pipeline = providers.Factory(
        CesPipeline,
        fetcher=fetcher,
        selector=selector,
        verifier=verifier,
        normalize=providers.Object(latin1_to_text),
        store=store,
        table=Microdata.CURSOS,
    )

    preloader_service = providers.Factory(
        PreloaderService,
        pipeline=pipeline,
        concurrent_downloads=providers.Callable(
            _first_set,
            cli_args.concurrent_downloads,
            settings.preloader.concurrent_downloads,
        ),
    )
