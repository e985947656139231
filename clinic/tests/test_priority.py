import math

import pytest

from clinic.services.priority import (
    Band,
    DEFAULT_BANDS,
    PriorityLevel,
    VitalReading,
    breached_vitals,
    classify,
    sanitize_vital,
)

E, U, N = PriorityLevel.EMERGENCY, PriorityLevel.URGENT, PriorityLevel.NORMAL


def test_all_vitals_missing_is_normal():
    assert classify(VitalReading()) == N
    assert classify(VitalReading(0, 0, 0, 0)) == N


def test_normal_vitals():
    assert classify(VitalReading(systolic_bp=120, heart_rate=80, temperature=37.0, spo2=98)) == N


@pytest.mark.parametrize('field,value,expected', [
    # systolic
    ('systolic_bp', 90, E), ('systolic_bp', 91, U), ('systolic_bp', 100, U), ('systolic_bp', 101, N),
    ('systolic_bp', 199, N), ('systolic_bp', 200, U), ('systolic_bp', 219, U), ('systolic_bp', 220, E),
    # heart rate
    ('heart_rate', 40, E), ('heart_rate', 41, U), ('heart_rate', 50, U), ('heart_rate', 51, N),
    ('heart_rate', 109, N), ('heart_rate', 110, U), ('heart_rate', 129, U), ('heart_rate', 130, E),
    # temperature
    ('temperature', 35.0, E), ('temperature', 35.1, U), ('temperature', 36.0, U), ('temperature', 36.1, N),
    ('temperature', 38.0, N), ('temperature', 38.1, U), ('temperature', 39.0, U), ('temperature', 39.1, E),
    # spo2
    ('spo2', 91, E), ('spo2', 92, U), ('spo2', 95, U), ('spo2', 96, N), ('spo2', 100, N),
])
def test_inclusive_boundaries(field, value, expected):
    assert classify(VitalReading(**{field: value})) == expected


def test_examples():
    assert classify(VitalReading(systolic_bp=85, heart_rate=80, temperature=37.0, spo2=98)) == E
    assert classify(VitalReading(systolic_bp=120, heart_rate=115, temperature=37.0, spo2=98)) == U
    assert classify(VitalReading(systolic_bp=120, heart_rate=80, temperature=37.0, spo2=91)) == E
    assert classify(VitalReading(systolic_bp=0, heart_rate=0, temperature=0, spo2=0)) == N


def test_zero_is_never_a_breach():
    # a zero reading would otherwise breach every low bound
    for field in ('systolic_bp', 'heart_rate', 'temperature', 'spo2'):
        assert classify(VitalReading(**{field: 0})) == N


def test_partial_input_uses_only_measured_vitals():
    assert classify(VitalReading(spo2=93)) == U
    assert classify(VitalReading(systolic_bp=0, spo2=90)) == E
    assert classify(VitalReading(heart_rate=None, temperature=39.5)) == E


def test_most_severe_breach_wins():
    # urgent temperature plus emergency spo2
    assert classify(VitalReading(temperature=38.5, spo2=90)) == E


def test_worsening_one_vital_never_lowers_priority():
    base = dict(systolic_bp=120, heart_rate=80, temperature=37.0, spo2=98)
    previous = classify(VitalReading(**base))
    for spo2 in range(98, 70, -1):
        current = classify(VitalReading(**{**base, 'spo2': spo2}))
        assert current.rank <= previous.rank
        previous = current


@pytest.mark.parametrize('raw,expected', [
    (None, None), ('', None), ('  ', None), ('abc', None), (True, None),
    (-5, None), (0, None), ('0', None), (float('nan'), None), (float('inf'), None),
    ('98', 98.0), (' 37.5 ', 37.5), (120, 120.0),
])
def test_sanitize_vital(raw, expected):
    assert sanitize_vital(raw) == expected


def test_from_raw_sanitizes_form_values():
    reading = VitalReading.from_raw(systolic_bp='', heart_rate='abc', temperature='39.2', spo2=-1)
    assert reading.provided() == {'temperature': 39.2}
    assert classify(reading) == E


def test_classify_never_raises_on_odd_floats():
    assert classify(VitalReading(systolic_bp=math.nan, spo2=-3)) == N


def test_custom_bands_table():
    strict = (
        (E, {'heart_rate': Band(high=100)}),
        (U, {'heart_rate': Band(high=90)}),
    )
    assert classify(VitalReading(heart_rate=95), bands=strict) == U
    assert classify(VitalReading(heart_rate=100), bands=strict) == E
    # the default table is untouched
    assert classify(VitalReading(heart_rate=95)) == N


def test_breached_vitals_lists_offending_fields():
    vitals = VitalReading(systolic_bp=85, heart_rate=135, temperature=37.0, spo2=98)
    assert sorted(breached_vitals(vitals, E)) == ['heart_rate', 'systolic_bp']
    assert breached_vitals(VitalReading(spo2=98), N, DEFAULT_BANDS) == []


def test_priority_rank_order():
    assert [level.rank for level in PriorityLevel] == [0, 1, 2]
    assert PriorityLevel('Urgent') is U


@pytest.mark.parametrize('vitals,expected', [
    ({'systolic_bp': 90}, E), ({'systolic_bp': 95}, U), ({'systolic_bp': 110}, N),
    ({'heart_rate': 130}, E), ({'temperature': 38.1}, U), ({'spo2': 91}, E), ({'spo2': 96}, N),
])
def test_single_vital_examples(vitals, expected):
    assert classify(VitalReading(**vitals)) == expected


def test_falling_systolic_never_lowers_priority():
    levels = [classify(VitalReading(systolic_bp=bp)) for bp in range(130, 60, -1)]
    assert [lvl.rank for lvl in levels] == sorted((lvl.rank for lvl in levels), reverse=True)
