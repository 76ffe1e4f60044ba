"""Shared fixtures for the ces_preloader tests."""

import hashlib
import io
import zipfile

import pytest

from ces_preloader.application.domain import Microdata


def make_zip(entries, compression=zipfile.ZIP_DEFLATED) -> bytes:
    """Build an in-memory archive from a name -> bytes mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def cursos_content(year: int) -> bytes:
    """A small Cursos extract encoded in ISO-8859-1."""
    return (
        "NU_ANO_CENSO;CO_IES;NO_CURSO;NO_MUNICIPIO\r\n"
        f"{year};1;Administração;São Paulo\r\n"
        f"{year};2;Educação Física;Brasília\r\n"
    ).encode("latin-1")


def cursos_archive(year: int, content: bytes = None) -> bytes:
    """An archive shaped like the INEP distribution for a year."""
    if content is None:
        content = cursos_content(year)
    return make_zip(
        {
            f"microdados_educacao_superior_{year}/leia-me/dicionario.txt": b"x",
            f"microdados_educacao_superior_{year}/dados/"
            f"MICRODADOS_CADASTRO_IES_{year}.CSV": b"CO_IES\r\n1\r\n",
            f"microdados_educacao_superior_{year}/dados/"
            f"MICRODADOS_CADASTRO_CURSOS_{year}.CSV": content,
        }
    )


def md5_of(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


@pytest.fixture
def digests_for():
    """Build a digest table matching the fixture content of some years."""

    def _build(*years):
        return {
            Microdata.CURSOS: {
                year: md5_of(cursos_content(year)) for year in years
            }
        }

    return _build


def with_encryption_flag(raw: bytes) -> bytes:
    """Mark every member as encrypted without actually encrypting it."""
    data = bytearray(raw)
    # general purpose flag offsets in local and central directory headers
    for signature, offset in ((b"PK\x03\x04", 6), (b"PK\x01\x02", 8)):
        start = data.find(signature)
        while start != -1:
            data[start + offset] |= 0x01
            start = data.find(signature, start + len(signature))
    return bytes(data)
