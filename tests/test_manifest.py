"""
Tests for loading the digest table.
"""

import json

import pytest

from ces_preloader.application.domain import Microdata, builtin_digests
from ces_preloader.application.exceptions import ConfigurationError
from ces_preloader.infrastructure.manifest import load_digest_table


def test_defaults_to_builtin_table():
    assert load_digest_table(None) == builtin_digests()
    assert load_digest_table("") == builtin_digests()


def test_loads_a_valid_manifest(tmp_path):
    manifest = tmp_path / "digests.json"
    manifest.write_text(
        json.dumps(
            {
                "version": 2,
                "digests": {"CURSOS": {"2022": "0123456789abcdef0123456789abcdef"}},
            }
        )
    )

    table = load_digest_table(str(manifest))

    assert table == {
        Microdata.CURSOS: {2022: "0123456789abcdef0123456789abcdef"}
    }


@pytest.mark.parametrize(
    "digest", ["not-hex", "0123456789ABCDEF0123456789ABCDEF", "abc"]
)
def test_rejects_malformed_digests(tmp_path, digest):
    manifest = tmp_path / "digests.json"
    manifest.write_text(
        json.dumps({"version": 1, "digests": {"CURSOS": {"2011": digest}}})
    )

    with pytest.raises(ConfigurationError):
        load_digest_table(str(manifest))


def test_rejects_unknown_tables(tmp_path):
    manifest = tmp_path / "digests.json"
    manifest.write_text(
        json.dumps({"version": 1, "digests": {"ALUNOS": {"2011": "0" * 32}}})
    )

    with pytest.raises(ConfigurationError):
        load_digest_table(str(manifest))


def test_missing_manifest_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        load_digest_table(str(tmp_path / "absent.json"))
