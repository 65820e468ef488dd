from __future__ import annotations

from chat_viz.engine.field_classifier import Categorical, Numeric, classify_fields, probe_value


def test_classify_fields_mixed_record() -> None:
    result = classify_fields({"Size": "Mid", "Claim": 1200})

    assert result.categorical == ("Size",)
    assert result.numeric == ("Claim",)
    assert result.probes["Claim"] == Numeric(1200.0)
    assert result.probes["Size"] == Categorical("Mid")


def test_classify_fields_partitions_every_field_in_order() -> None:
    record = {
        "region": "East",
        "total": "1,200",
        "count": "42",
        "ratio": 0.5,
        "note": None,
        "flag": True,
        "blank": "",
        "sci": "-3e2",
    }
    result = classify_fields(record)

    assert set(result.categorical).isdisjoint(result.numeric)
    assert set(result.categorical) | set(result.numeric) == set(record)
    assert result.categorical == ("region", "total", "note", "flag", "blank")
    assert result.numeric == ("count", "ratio", "sci")
    assert result.fields == tuple(record)


def test_probe_value_numeric_strings() -> None:
    assert probe_value("10.5") == Numeric(10.5)
    assert probe_value(" 42 ") == Numeric(42.0)
    assert probe_value(".5") == Numeric(0.5)
    assert isinstance(probe_value("12abc"), Categorical)
    assert isinstance(probe_value("2024-01"), Categorical)
    assert isinstance(probe_value("nan"), Categorical)


def test_probe_value_bool_and_none_are_categorical() -> None:
    assert probe_value(True) == Categorical("true")
    assert probe_value(None) == Categorical("")


def test_classify_fields_only_probes_given_record() -> None:
    records = [{"val": "10"}, {"val": "string"}]

    result = classify_fields(records[0])

    assert result.numeric == ("val",)
    assert result.is_numeric("val")


def test_probe_value_out_of_float_range_is_categorical() -> None:
    huge = 10**400

    assert probe_value(huge) == Categorical(str(huge))
    assert probe_value(float("inf")) == Categorical("inf")
    assert isinstance(probe_value("1e400"), Categorical)


def test_classify_fields_huge_integer_is_not_numeric() -> None:
    result = classify_fields({"Region": "East", "Total": 10**400})

    assert result.numeric == ()
    assert result.categorical == ("Region", "Total")
