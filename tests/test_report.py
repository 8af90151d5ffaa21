from __future__ import annotations

import json

import pytest

from ubuntu_report.report import (
    REPORT_SCHEMA_VERSION,
    OptOutMarker,
    Report,
    build_report,
    record_from_payload,
)


def test_build_report_always_has_version() -> None:
    report = build_report({})
    assert '"Version":' in report.to_json()
    assert report.version == REPORT_SCHEMA_VERSION


def test_build_report_keeps_category_order_and_drops_missing() -> None:
    report = build_report({"OEM": {"Vendor": "LENOVO"}, "GPU": None, "RAM": 7.7, "Version": "bogus"})
    assert list(report.data) == ["Version", "OEM", "RAM"]
    assert report.data["Version"] == REPORT_SCHEMA_VERSION


def test_report_is_read_only() -> None:
    report = build_report({"RAM": 7.7})
    with pytest.raises(TypeError):
        report.data["RAM"] = 1  # type: ignore[index]


def test_report_json_round_trips() -> None:
    facts = {"CPU": {"CPUs": "4"}, "Screens": [{"Resolution": "1920x1080"}], "Autologin": False}
    report = build_report(facts)
    assert record_from_payload(json.loads(report.to_json())) == report


def test_opt_out_marker_literal() -> None:
    assert OptOutMarker().to_json() == '{"OptOut": true}'


def test_record_from_payload_shapes() -> None:
    assert record_from_payload({"OptOut": True}) == OptOutMarker()
    assert isinstance(record_from_payload({"Version": "1", "RAM": 2}), Report)
    assert record_from_payload({"OptOut": False}) is None
    assert record_from_payload({"RAM": 2}) is None
    assert record_from_payload(["Version"]) is None


def test_report_requires_version() -> None:
    with pytest.raises(ValueError):
        Report({"RAM": 2})


def test_nested_facts_are_read_only() -> None:
    facts = {"OEM": {"Vendor": "LENOVO"}, "GPU": [{"Vendor": "8086"}]}
    report = build_report(facts)
    with pytest.raises(TypeError):
        report.data["OEM"]["Vendor"] = "ACME"  # type: ignore[index]
    with pytest.raises(AttributeError):
        report.data["GPU"].append({})  # type: ignore[union-attr]
    facts["OEM"]["Vendor"] = "ACME"
    assert report.to_payload() == {"Version": REPORT_SCHEMA_VERSION, "OEM": {"Vendor": "LENOVO"}, "GPU": [{"Vendor": "8086"}]}
