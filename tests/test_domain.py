"""
Tests for the domain models.
"""

import dataclasses

import pytest

from ces_preloader.application.domain import (
    MIN_YEAR,
    SUPPORTED_YEARS,
    Ces,
    FleetReport,
    Microdata,
    OutcomeStatus,
    PipelineStage,
    YearOutcome,
    builtin_digests,
)
from ces_preloader.application.exceptions import ConstructionError


class TestCes:
    """Test suite for the per-year handle."""

    @pytest.mark.parametrize("year", [2008, 2000, 1995, 0, -1])
    def test_years_before_2009_are_rejected(self, year):
        with pytest.raises(ConstructionError):
            Ces(year)

    @pytest.mark.parametrize("year", list(SUPPORTED_YEARS) + [2030])
    def test_years_from_2009_are_accepted(self, year):
        assert Ces(year).year == year

    @pytest.mark.parametrize("year", ["2011", 2011.0, True, None])
    def test_non_integer_years_are_rejected(self, year):
        with pytest.raises(ConstructionError):
            Ces(year)

    def test_is_immutable(self):
        ces = Ces(2011)
        with pytest.raises(dataclasses.FrozenInstanceError):
            ces.year = 2012

    def test_all_covers_supported_years(self):
        years = [ces.year for ces in Ces.all()]
        assert years == list(range(2009, 2022))
        assert min(years) == MIN_YEAR

    def test_equal_years_are_equal(self):
        assert Ces(2011) == Ces(2011)
        assert len({Ces(2011), Ces(2011), Ces(2012)}) == 2


class TestMicrodata:
    """Test suite for the table descriptor and its pinned digests."""

    def test_cursos_names(self):
        assert Microdata.CURSOS.token == "CURSOS"
        assert Microdata.CURSOS.stem == "cursos"

    def test_pinned_digest_for_2011(self):
        assert (
            Microdata.CURSOS.original_md5(2011)
            == "f626dd6d17e8f31f78ddf90f680ace48"
        )

    def test_every_supported_year_has_a_digest(self):
        for year in SUPPORTED_YEARS:
            digest = Microdata.CURSOS.original_md5(year)
            assert digest is not None
            assert len(digest) == 32
            assert digest == digest.lower()

    def test_unknown_year_has_no_digest(self):
        assert Microdata.CURSOS.original_md5(2008) is None
        assert Microdata.CURSOS.original_md5(2030) is None

    def test_builtin_digests_is_a_copy(self):
        table = builtin_digests()
        table[Microdata.CURSOS][2011] = "0" * 32
        assert (
            Microdata.CURSOS.original_md5(2011)
            == "f626dd6d17e8f31f78ddf90f680ace48"
        )


class TestFleetReport:
    """Test suite for the aggregate report."""

    def test_splits_failures_from_successes(self):
        error = RuntimeError("boom")
        report = FleetReport(
            outcomes={
                2009: YearOutcome(
                    2009, OutcomeStatus.FAILED, PipelineStage.VERIFYING, error
                ),
                2010: YearOutcome(2010, OutcomeStatus.DOWNLOADED),
                2011: YearOutcome(2011, OutcomeStatus.CACHED),
            }
        )

        assert not report.ok
        assert set(report.failures) == {2009}
        assert set(report.succeeded) == {2010, 2011}
        assert report.failures[2009].error is error

    def test_empty_report_is_ok(self):
        assert FleetReport(outcomes={}).ok
