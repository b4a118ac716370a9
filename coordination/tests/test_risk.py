import pytest

from coordination.services.risk import (
    MAX_CONTRIBUTION_PER_VITAL, calculate_risk_score, deviation_score, parse_blood_pressure, risk_bucket,
)


def test_all_vitals_in_range_score_zero():
    score, alerts = calculate_risk_score({
        'heart_rate': 72, 'blood_pressure': '118/76', 'spo2': 99, 'temperature': 98.6, 'respiratory_rate': 14,
    })
    assert (score, alerts) == (0, [])


def test_no_readings_score_zero():
    assert calculate_risk_score({}) == (0, [])
    assert calculate_risk_score({'heart_rate': None, 'spo2': '', 'blood_pressure': 'n/a'}) == (0, [])


def test_moderate_tachycardia_with_normal_others():
    # deviation (130-100)/80 = .375 -> 22.96 pts * .25 = 5.74 weighted; 5.74/1.0/.3 = 19.1
    score, alerts = calculate_risk_score({
        'heart_rate': 130, 'blood_pressure': '120/80', 'spo2': 98, 'temperature': 98, 'respiratory_rate': 16,
    })
    assert score == 19
    assert alerts == ['Heart Rate deviation (+6pts)']
    assert risk_bucket(score) == 'low'


def test_single_severe_vital_saturates():
    score, alerts = calculate_risk_score({'spo2': 75})
    assert score == 100
    assert len(alerts) == 1 and alerts[0].startswith('SpO₂ deviation')


def test_deviation_is_capped_per_vital():
    assert deviation_score('heart_rate', 250) == MAX_CONTRIBUTION_PER_VITAL
    assert deviation_score('heart_rate', 80) == 0
    assert deviation_score('unknown', 10) == 0
    low = deviation_score('temperature', 96)   # (97-96)/(97-94) = 1/3
    assert low == pytest.approx((1 / 3) ** 1.5 * 100)


def test_small_deviation_has_no_alert():
    score, alerts = calculate_risk_score({'heart_rate': 105, 'spo2': 97})
    assert alerts == []
    assert 0 < score < 30


def test_blood_pressure_parsing():
    assert parse_blood_pressure('120/80') == (120, 80)
    assert parse_blood_pressure(' 90 / 60 ') == (90, 60)
    assert parse_blood_pressure('120') == (None, None)
    assert parse_blood_pressure('abc/def') == (None, None)
    assert parse_blood_pressure(None) == (None, None)


def test_low_weight_vitals_saturate_without_alerts():
    score, alerts = calculate_risk_score({'blood_pressure': '200/130'})
    # both components at the ceiling: 35 * .10 and 35 * .05, neither above 4 points
    assert alerts == []
    assert score == 100


@pytest.mark.parametrize('score,bucket', [
    (0, 'low'), (29, 'low'), (30, 'medium'), (59, 'medium'), (60, 'high'), (79, 'high'), (80, 'critical'), (100, 'critical'),
    (None, 'low'),
])
def test_buckets(score, bucket):
    assert risk_bucket(score) == bucket
