"""
Pydantic models for validating an external digest manifest.

By default the checksums pinned in the domain module are used. A manifest
lets the expected checksums be updated without a new release; it must be a
JSON document shaped like:

    {"version": 1, "digests": {"CURSOS": {"2009": "677421fb..."}}}
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, StringConstraints, ValidationError
from typing_extensions import Annotated

from ..application.domain import DigestTable, Microdata, builtin_digests
from ..application.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

Md5Hex = Annotated[str, StringConstraints(pattern=r"^[0-9a-f]{32}$")]


class DigestManifest(BaseModel):
    """A versioned (table, year) -> md5 mapping."""

    version: int
    digests: Dict[Microdata, Dict[int, Md5Hex]]


def load_digest_table(manifest_path: Optional[str] = None) -> DigestTable:
    """
    Return the digest table to verify against.

    Raises:
        ConfigurationError: If the manifest cannot be read or is invalid.
    """
    if not manifest_path:
        return builtin_digests()

    path = Path(manifest_path)
    try:
        manifest = DigestManifest.model_validate_json(path.read_bytes())
    except (OSError, ValidationError) as e:
        raise ConfigurationError(
            f"Invalid digest manifest {path}: {e}"
        ) from e

    logger.info(f"Using digest manifest {path} (version {manifest.version})")
    return manifest.digests
