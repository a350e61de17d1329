"""
Unit Tests for the Data Completeness Grader

Test cases:
- test_full_evidence_is_gra
- test_missing_sentiment_is_grb
- test_no_options_is_grb: Underlying without listed options is not a data gap
- test_pending_chain_is_grc
- test_missing_price_field_is_grc
- test_missing_macro_is_grc
"""

from dataclasses import replace

from alpha_engine.analytics.models import ChainStatus
from alpha_engine.completeness.grader import CompletenessGrade, grade_completeness
from alpha_engine.evidence.models import ABSENT, CatalystEvidence, Evidence, MacroEvidence, OptionsEvidence


def test_full_evidence_is_gra(full_evidence):
    report = grade_completeness(full_evidence)

    assert report.grade == CompletenessGrade.GRA
    assert report.present == report.total == 10
    assert report.missing == []
    assert report.drives_decision is True


def test_missing_sentiment_is_grb(full_evidence):
    evidence = replace(full_evidence, catalyst=CatalystEvidence())

    report = grade_completeness(evidence)

    assert report.grade == CompletenessGrade.GRB
    assert report.missing == ["catalyst.sentiment"]
    assert report.advisory is True


def test_no_options_is_grb(full_evidence):
    evidence = replace(full_evidence, options=OptionsEvidence(status=ChainStatus.NO_OPTIONS))

    report = grade_completeness(evidence)

    assert report.grade == CompletenessGrade.GRB
    assert report.groups["structure"] is False


def test_pending_chain_is_grc(full_evidence):
    evidence = replace(full_evidence, options=OptionsEvidence(status=ChainStatus.PENDING))

    assert grade_completeness(evidence).grade == CompletenessGrade.GRC


def test_missing_price_field_is_grc(full_evidence):
    evidence = replace(full_evidence, price=replace(full_evidence.price, vwap=ABSENT))

    report = grade_completeness(evidence)

    assert report.grade == CompletenessGrade.GRC
    assert "price.vwap" in report.missing


def test_missing_macro_is_grc(full_evidence):
    evidence = replace(full_evidence, macro=MacroEvidence())

    assert grade_completeness(evidence).grade == CompletenessGrade.GRC


def test_nothing_present():
    report = grade_completeness(Evidence(ticker="EMPTY"))

    assert report.grade == CompletenessGrade.GRC
    assert report.present == 0
    assert report.to_dict()["grade"] == "GRC"
