"""HTTP implementation of the Fetcher port."""

import io
import logging
import ssl
from typing import Optional

import httpx
from tqdm import tqdm

from ..application.domain import Ces, Fetcher
from ..application.exceptions import ConfigurationError, FetchError

from .base_client import BaseClient

logger = logging.getLogger(__name__)

DEFAULT_URL_TEMPLATE = (
    "https://download.inep.gov.br/microdados/"
    "microdados_censo_da_educacao_superior_{year}.zip"
)


def _is_retryable(error: httpx.HTTPError) -> bool:
    if isinstance(error, (httpx.TimeoutException, httpx.ConnectError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return False


class HttpFetcher(BaseClient, Fetcher):
    """
    A fetcher that downloads a year's archive into memory.

    The INEP origin does not send its intermediate certificate, so the
    shared client is usually built with TLS verification disabled (see
    build_tls_verify below). That trades away protection against an
    on-path attacker; pinning a CA bundle through 'ca_bundle' restores it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url_template: str = DEFAULT_URL_TEMPLATE,
        timeout: float = 300,
        chunk_size: int = 1 << 20,
    ):
        """Initializes the fetcher adapter."""
        super().__init__(client, url_template)
        self.timeout = timeout
        self.chunk_size = chunk_size

    def url(self, ces: Ces) -> str:
        return self.url_template.format(year=ces.year)

    async def _read_body(self, response: httpx.Response, desc: str) -> bytes:
        """Accumulate the response body while updating a progress bar."""
        expected = response.headers.get("Content-Length")
        total = int(expected) if expected and expected.isdigit() else None
        # Content-Length counts encoded bytes; only compare identity bodies.
        encoded = response.headers.get("Content-Encoding", "identity")
        buffer = io.BytesIO()

        with tqdm(
            total=total, unit="B", unit_scale=True, desc=desc, leave=False
        ) as progress_bar:
            async for chunk in response.aiter_bytes(self.chunk_size):
                buffer.write(chunk)
                progress_bar.update(len(chunk))

        received = buffer.tell()
        if total is not None and encoded == "identity" and received != total:
            raise httpx.RemoteProtocolError(
                f"Size mismatch: {received} != {total}",
                request=response.request,
            )

        return buffer.getvalue()

    async def fetch(self, ces: Ces) -> bytes:
        """
        Download the archive for a year.

        This is the public method that fulfills the Fetcher port contract.
        It issues exactly one request and never returns partial bytes.

        Args:
            ces: The year to download.

        Returns:
            The raw bytes of the ZIP archive.

        Raises:
            FetchError: If the request, the status or the body read fails.
        """

        url = self.url(ces)
        self.logger.info(f"[{ces.year}] Sending request to {url}")

        try:
            async with self.client.stream(
                "GET", url, timeout=self.timeout, follow_redirects=True
            ) as response:
                response.raise_for_status()
                content = await self._read_body(response, f"{ces.year}.zip")
        except httpx.HTTPError as e:
            raise FetchError(ces.year, e, retryable=_is_retryable(e)) from e

        self.logger.info(
            f"[{ces.year}] Downloaded {len(content)} bytes from {url}"
        )
        return content


def build_tls_verify(verify_tls: bool, ca_bundle: Optional[str] = None):
    """
    Build the 'verify' argument for the shared httpx client.

    A configured CA bundle takes precedence and keeps verification on,
    trusting only that bundle. Otherwise verification follows 'verify_tls'.

    Raises:
        ConfigurationError: If the bundle cannot be read or parsed.
    """
    if ca_bundle:
        try:
            return ssl.create_default_context(cafile=ca_bundle)
        except OSError as e:
            # ssl.SSLError is an OSError too
            raise ConfigurationError(
                f"Cannot load CA bundle {ca_bundle!r}: {e}"
            ) from e
    if not verify_tls:
        logger.warning(
            "TLS certificate verification is disabled for the INEP origin."
        )
    return bool(verify_tls)
