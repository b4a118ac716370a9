"""
Weighted vitals risk score.

Each vital contributes a deviation score in ``[0, 35]`` that grows with
``deviation ** 1.5`` outside its ideal range; contributions are weighted,
normalised by the weight of the vitals actually present and scaled so
that a single severely deviating vital lands in the high band.
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple

MAX_CONTRIBUTION_PER_VITAL = 35
ALERT_MIN_POINTS = 4
SCALE = 1 / 0.3

# key: (range low, range high, ideal low, ideal high, weight, label)
VITAL_CONFIG = {
    'spo2': (70, 100, 95, 100, 0.30, 'SpO₂'),
    'heart_rate': (40, 180, 60, 100, 0.25, 'Heart Rate'),
    'respiratory_rate': (8, 40, 12, 20, 0.20, 'Resp. Rate'),
    'bp_systolic': (70, 200, 90, 140, 0.10, 'BP Systolic'),
    'bp_diastolic': (40, 130, 60, 90, 0.05, 'BP Diastolic'),
    'temperature': (94, 106, 97, 99, 0.10, 'Temperature'),
}

BUCKETS = ((80, 'critical'), (60, 'high'), (30, 'medium'))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _number(value: Any) -> Optional[float]:
    # zero and unparseable values count as "not measured"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number or None


def parse_blood_pressure(value: Any) -> Tuple[Optional[float], Optional[float]]:
    """``"120/80"`` -> ``(120.0, 80.0)``; anything else -> ``(None, None)``."""
    if not value or not isinstance(value, str):
        return None, None
    parts = value.split('/')
    if len(parts) != 2:
        return None, None
    try:
        return float(int(parts[0].strip())), float(int(parts[1].strip()))
    except ValueError:
        return None, None


def deviation_score(key: str, value: Optional[float]) -> float:
    if value is None or key not in VITAL_CONFIG:
        return 0.0
    low, high, ideal_low, ideal_high, _weight, _label = VITAL_CONFIG[key]
    if ideal_low <= value <= ideal_high:
        return 0.0
    if value < ideal_low:
        deviation = (ideal_low - value) / (ideal_low - low)
    else:
        deviation = (value - ideal_high) / (high - ideal_high)
    deviation = max(0.0, min(1.0, deviation))
    return min(deviation ** 1.5 * 100, MAX_CONTRIBUTION_PER_VITAL)


def calculate_risk_score(vitals: Dict[str, Any]) -> Tuple[int, List[str]]:
    """Return ``(score, alerts)`` for a vitals reading; score is 0..100."""
    readings = {
        'heart_rate': _number(vitals.get('heart_rate')),
        'spo2': _number(vitals.get('spo2')),
        'respiratory_rate': _number(vitals.get('respiratory_rate')),
        'temperature': _number(vitals.get('temperature')),
    }
    readings['bp_systolic'], readings['bp_diastolic'] = parse_blood_pressure(vitals.get('blood_pressure'))

    total = 0.0
    total_weight = 0.0
    alerts: List[str] = []
    for key, (_low, _high, _il, _ih, weight, label) in VITAL_CONFIG.items():
        value = readings.get(key)
        if value is None:
            continue
        weighted = deviation_score(key, value) * weight
        total += weighted
        total_weight += weight
        if weighted > ALERT_MIN_POINTS:
            alerts.append(f'{label} deviation (+{_round_half_up(weighted)}pts)')

    if not total_weight:
        return 0, alerts
    score = _round_half_up((total / total_weight) * SCALE)
    return min(score, 100), alerts


def risk_bucket(score: Optional[int]) -> str:
    score = score or 0
    for floor, name in BUCKETS:
        if score >= floor:
            return name
    return 'low'
