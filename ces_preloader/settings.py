"""
Initializes the Dynaconf settings object for the ces_preloader component.
This module is the single source of truth for all configuration.
"""

from pathlib import Path
from dynaconf import Dynaconf, Validator

from .application.domain import SUPPORTED_YEARS
from .infrastructure.fetcher import DEFAULT_URL_TEMPLATE

PROJECT_ROOT = Path(__file__).parent.parent

settings = Dynaconf(
    root_path=PROJECT_ROOT,
    settings_files=["config/settings.toml"],
    secrets=["config/.secrets.toml"],
    envvar_prefix="CES",
    validators=[
        Validator("preloader.url_template", default=DEFAULT_URL_TEMPLATE),
        Validator("preloader.timeout", default=300, gt=0),
        Validator("preloader.verify_tls", default=False, is_type_of=bool),
        Validator("preloader.ca_bundle", default=None),
        Validator(
            "preloader.concurrent_downloads",
            default=len(SUPPORTED_YEARS),
            gte=1,
        ),
        Validator("preloader.fetch_attempts", default=1, gte=1),
        Validator("preloader.chunk_size", default=1048576, gt=0),
        Validator("preloader.digest_manifest", default=None),
        Validator("paths.input_dir", default="input"),
        Validator("logging.level", default="INFO"),
    ],
)
