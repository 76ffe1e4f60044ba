"""Base class for async HTTP clients."""

import logging
import httpx

from ..application.exceptions import ConfigurationError


class BaseClient:
    """A base client that holds an async client and a URL template."""

    def __init__(self, client: httpx.AsyncClient, url_template: str):
        """
        Initializes the base client.

        Args:
            client: An instance of httpx.AsyncClient.
            url_template: A URL with a '{year}' placeholder.

        Raises:
            ConfigurationError: If the template is missing or has no
                                '{year}' placeholder.
        """

        if not url_template or "{year}" not in url_template:
            raise ConfigurationError(
                f"URL template for {self.__class__.__name__} must contain "
                f"a '{{year}}' placeholder, got {url_template!r}. "
                f"Please check your config files."
            )

        self.client = client
        self.url_template = url_template
        self.logger = logging.getLogger(self.__class__.__name__)
