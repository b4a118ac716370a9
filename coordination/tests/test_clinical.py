import re
from datetime import timedelta

import pytest
from django.utils import timezone

from coordination.models import Evacuation, Patient, RegionMapping, TenantStatus, VitalsLog
from coordination.services.patients import generate_patient_code

pytestmark = pytest.mark.django_db

NORMAL = {'heart_rate': 80, 'blood_pressure': '120/80', 'spo2': 98, 'temperature': 98.2, 'respiratory_rate': 16}


def test_patient_code_format():
    code = generate_patient_code(timezone.now().replace(year=2026))
    assert re.fullmatch(r'PAT-2026-[A-Z0-9]{5}', code)


def test_create_patient(clinic_a, events):
    client, clinic = clinic_a
    r = client.post('/api/patients', {'name': 'Anita', 'age': 31, 'gender': 'female', 'blood_type': 'O+'}, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['status'] == 'stable' and data['clinic_id'] == clinic.id
    assert re.fullmatch(r'PAT-\d{4}-[A-Z0-9]{5}', data['patient_code'])
    assert data['bucket'] == 'low'
    assert events.names(f'clinic.{clinic.id}') == ['patient:created']


def test_list_filters_and_risk_sort(clinic_a, make_patient):
    client, clinic = clinic_a
    make_patient(clinic, name='Low', risk_score=10)
    make_patient(clinic, name='High', risk_score=85, is_critical=True, status=Patient.STATUS_CRITICAL)
    make_patient(clinic, name='Mid', risk_score=45)

    ranked = client.get('/api/patients', {'sort': 'risk'}).data['data']
    assert [p['name'] for p in ranked] == ['High', 'Mid', 'Low']
    assert [p['bucket'] for p in ranked] == ['critical', 'medium', 'low']

    crit = client.get('/api/patients', {'is_critical': 'true'}).data
    assert crit['count'] == 1 and crit['data'][0]['name'] == 'High'
    assert client.get('/api/patients', {'status': 'critical'}).data['count'] == 1
    assert client.get('/api/patients', {'status': 'bogus'}).status_code == 400


def test_patient_detail_includes_recent_vitals(clinic_a, make_patient):
    client, clinic = clinic_a
    p = make_patient(clinic)
    now = timezone.now()
    for i in range(25):
        VitalsLog.objects.create(patient=p, heart_rate=70 + i, recorded_by='x',
                                 recorded_at=now - timedelta(minutes=i))
    r = client.get(f'/api/patients/{p.id}')
    assert r.status_code == 200
    assert len(r.data['data']['vitals']) == 20
    assert r.data['data']['vitals'][0]['heart_rate'] == 70


def test_patch_patient_to_critical_emits(clinic_a, make_patient, events):
    client, clinic = clinic_a
    p = make_patient(clinic)
    r = client.patch(f'/api/patients/{p.id}', {'status': 'critical'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['is_critical'] is True
    assert events.names(f'clinic.{clinic.id}') == ['patient:critical']


def test_log_normal_vitals(clinic_a, make_patient, events):
    client, clinic = clinic_a
    p = make_patient(clinic)
    r = client.post('/api/vitals', {'patient_id': p.id, **NORMAL}, format='json')
    assert r.status_code == 201
    assert r.data['score'] == 0
    assert r.data['alerts'] == [] and r.data['warning'] is False and r.data['isCritical'] is False
    p.refresh_from_db()
    assert (p.heart_rate, p.oxygen_saturation, p.blood_pressure) == (80, 98, '120/80')
    assert p.status == Patient.STATUS_STABLE
    assert events.names(f'clinic.{clinic.id}') == ['vitals:logged']


def test_log_critical_vitals_escalates(clinic_a, make_patient, events):
    client, clinic = clinic_a
    p = make_patient(clinic)
    r = client.post('/api/vitals', {'patient_id': p.id, 'spo2': 80, 'heart_rate': 150}, format='json')
    assert r.status_code == 201
    assert r.data['score'] == 100
    assert r.data['isCritical'] is True and r.data['warning'] is True
    assert 'Heart Rate deviation (+9pts)' in r.data['alerts']
    p.refresh_from_db()
    assert (p.status, p.is_critical, p.risk_score) == (Patient.STATUS_CRITICAL, True, 100)
    assert events.names(f'clinic.{clinic.id}') == ['vitals:critical', 'vitals:logged']
    assert events.payloads('vitals:critical')[0][1]['score'] == 100


def test_vitals_require_a_reading(clinic_a, make_patient):
    client, clinic = clinic_a
    p = make_patient(clinic)
    assert client.post('/api/vitals', {'patient_id': p.id}, format='json').status_code == 400
    assert client.post('/api/vitals', {'patient_id': p.id, 'blood_pressure': 'high'}, format='json').status_code == 400


def test_vitals_session_lifecycle(clinic_a, make_patient):
    client, clinic = clinic_a
    p = make_patient(clinic)
    for hr in (80, 90):
        client.post('/api/vitals', {'patient_id': p.id, 'heart_rate': hr}, format='json')
    assert client.get('/api/vitals', {'patient_id': p.id, 'active_session': 'true'}).data['count'] == 2

    r = client.post('/api/vitals/complete-session', {'patient_id': p.id}, format='json')
    assert r.status_code == 200 and r.data['data']['closed'] == 2
    assert client.get('/api/vitals', {'patient_id': p.id, 'active_session': 'true'}).data['count'] == 0
    assert client.get('/api/vitals', {'patient_id': p.id, 'limit': 1}).data['count'] == 1


def test_request_evacuation(clinic_a, make_patient, events):
    client, clinic = clinic_a
    p = make_patient(clinic)
    r = client.post('/api/evacuations', {'patient_id': p.id, 'reason': 'head injury'}, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['urgency'] == 'medium' and data['status'] == 'requested'
    assert data['requested_by'] == client.principal.id
    assert data['patient']['id'] == p.id
    p.refresh_from_db()
    assert p.status == Patient.STATUS_EVACUATION_REQUESTED
    assert events.names(f'clinic.{clinic.id}') == ['evacuation:requested']
    assert events.names('admin') == ['evacuation:requested']


def test_evacuation_transitions(clinic_a, make_patient, events):
    client, clinic = clinic_a
    p = make_patient(clinic)
    evac_id = client.post('/api/evacuations', {'patient_id': p.id, 'urgency': 'high'}, format='json').data['data']['id']

    r = client.patch(f'/api/evacuations/{evac_id}', {'status': 'in_transit', 'transport_id': 'boat-7'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['departed_at'] and r.data['data']['transport_id'] == 'boat-7'

    r = client.patch(f'/api/evacuations/{evac_id}', {'status': 'completed'}, format='json')
    assert r.data['data']['completed_at']
    assert 'evacuation:updated' in events.names(f'clinic.{clinic.id}')

    r = client.patch(f'/api/evacuations/{evac_id}', {'status': 'requested'}, format='json')
    assert r.status_code == 409
    assert client.get('/api/evacuations', {'status': 'completed'}).data['count'] == 1


def test_dashboard_stats(clinic_a, make_patient):
    client, clinic = clinic_a
    p = make_patient(clinic)
    make_patient(clinic)
    client.post('/api/vitals', {'patient_id': p.id, **NORMAL}, format='json')
    Evacuation.objects.create(patient=p, origin_clinic=clinic, requested_by='x', status=Evacuation.STATUS_IN_TRANSIT)
    r = client.get('/api/dashboard/stats')
    assert r.status_code == 200
    assert r.data['data']['stats'] == {'totalPatients': 2, 'todayVitals': 1, 'evacuations': 1}
    assert len(r.data['data']['recentPatients']) == 2


def test_hospital_directory(login, make_hospital):
    client = login('anyone')
    make_hospital('h-a', name='Alpha', region='Chennai')
    make_hospital('h-b', name='Beta', region='Kochi')
    make_hospital('h-c', name='Pending', region='Chennai', status=TenantStatus.PENDING_APPROVAL)
    RegionMapping.objects.create(origin_region='Lakshadweep', target_region='Kochi')

    assert client.get('/api/hospitals/active').data['count'] == 2
    names = [h['name'] for h in client.get('/api/hospitals/by-region/Chennai').data['data']]
    assert names == ['Alpha']
    assert client.get('/api/hospitals/region-mapping/Lakshadweep').data['data'] == {
        'origin_region': 'Lakshadweep', 'target_region': 'Kochi',
    }
    assert client.get('/api/hospitals/region-mapping/Nowhere').data['data']['target_region'] == 'Chennai'
    assert client.get('/api/hospitals/stats').data['data'] == {'active': 2, 'pending': 1}


def test_nearby_and_share(clinic_a, make_patient, make_hospital):
    client, clinic = clinic_a
    RegionMapping.objects.create(origin_region='Andaman', target_region='Chennai')
    h = make_hospital('h-near', region='Chennai')
    make_hospital('h-far', region='Kochi')
    make_hospital('h-off', region='Chennai', status=TenantStatus.SUSPENDED)

    r = client.get('/api/critical/nearby')
    assert r.data['targetRegion'] == 'Chennai'
    assert [x['id'] for x in r.data['data']] == [h.id]

    p = make_patient(clinic)
    first = client.post('/api/critical/share', {'patient_id': p.id, 'hospital_id': h.id, 'notes': 'SpO2 falling'}, format='json')
    assert first.status_code == 201 and first.data['isExisting'] is False
    again = client.post('/api/critical/share', {'patient_id': p.id, 'hospital_id': h.id}, format='json')
    assert again.status_code == 200 and again.data['isExisting'] is True
    assert again.data['data']['id'] == first.data['data']['id']
    p.refresh_from_db()
    assert p.is_critical is True


def test_share_with_inactive_hospital_is_404(clinic_a, make_patient, make_hospital):
    client, clinic = clinic_a
    h = make_hospital('h-sus', status=TenantStatus.SUSPENDED)
    r = client.post('/api/critical/share', {'patient_id': make_patient(clinic).id, 'hospital_id': h.id}, format='json')
    assert r.status_code == 404
