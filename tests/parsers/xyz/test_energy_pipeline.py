import logging

import pytest

from fakeg.parsers.xyz.energy import (
    DEFAULT_EXTRACTORS,
    MOLCLUS_EXTRACTOR,
    ORCA_EXTRACTOR,
    XTB_EXTRACTOR,
    EnergyPipeline,
)

ORCA_COMMENT = "Coordinates from ORCA-job input E -76.328012345678"
MOLCLUS_COMMENT = "  Energy =   -40.51234567 a.u.  #Cluster:    1"
XTB_COMMENT = " energy: -5.070201123456 gnorm: 0.012345678901 xtb: 6.6.1 (8d0f1dd)"


@pytest.mark.parametrize(
    "extractor, comment, expected",
    [
        (ORCA_EXTRACTOR, ORCA_COMMENT, -76.328012345678),
        (MOLCLUS_EXTRACTOR, MOLCLUS_COMMENT, -40.51234567),
        (XTB_EXTRACTOR, XTB_COMMENT, -5.070201123456),
    ],
)
def test_each_extractor_reads_its_own_convention(extractor, comment: str, expected: float) -> None:
    assert extractor.extract(comment) == pytest.approx(expected)


def test_extractors_ignore_foreign_comments() -> None:
    assert ORCA_EXTRACTOR.extract(XTB_COMMENT) is None
    assert XTB_EXTRACTOR.extract(MOLCLUS_COMMENT) is None
    assert MOLCLUS_EXTRACTOR.extract("0 1") is None


def test_default_order() -> None:
    assert [e.format_name for e in DEFAULT_EXTRACTORS] == ["ORCA", "molclus", "xtb"]


def test_first_matching_extractor_wins() -> None:
    """A comment carrying both an ORCA tag and an xtb tag takes the ORCA value."""
    pipeline = EnergyPipeline()
    comment = "Coordinates from ORCA-job run E -1.5 energy: -2.5"
    assert pipeline.extract(comment) == pytest.approx(-1.5)


def test_no_match_returns_none() -> None:
    assert EnergyPipeline().extract("just a title") is None


def test_format_announced_once_per_session(caplog: pytest.LogCaptureFixture) -> None:
    # Arrange
    pipeline = EnergyPipeline(logger=logging.getLogger("fakeg"))

    # Act
    with caplog.at_level(logging.INFO, logger="fakeg"):
        for _ in range(3):
            pipeline.extract(XTB_COMMENT)
        pipeline.extract(ORCA_COMMENT)

    # Assert
    announcements = [r.getMessage() for r in caplog.records if "Detected" in r.getMessage()]
    assert announcements == [
        ">> Detected xtb output format - energy information available",
        ">> Detected ORCA output format - energy information available",
    ]


def test_reset_allows_a_new_announcement(caplog: pytest.LogCaptureFixture) -> None:
    pipeline = EnergyPipeline(logger=logging.getLogger("fakeg"))
    with caplog.at_level(logging.INFO, logger="fakeg"):
        pipeline.extract(XTB_COMMENT)
        pipeline.reset()
        pipeline.extract(XTB_COMMENT)

    assert sum("Detected xtb" in r.getMessage() for r in caplog.records) == 2
