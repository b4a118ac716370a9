"""
URL mappings for the coordination API.

Trailing slashes are deliberately omitted to match the portal clients.
Literal segments (``me``, ``pending``, ``active``) are registered before
the id routes they would otherwise shadow.
"""
from django.urls import path, include

from .views import clinics, critical, dashboard, evacuations, health, hospitals, patients, vitals


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # Clinics
    path('api/clinics', clinics.clinics, name='clinics'),
    path('api/clinics/me', clinics.my_clinic, name='clinic-me'),
    path('api/clinics/<int:clinic_id>', clinics.clinic_detail, name='clinic-detail'),
    path('api/clinics/<int:clinic_id>/approve', clinics.approve_clinic, name='clinic-approve'),
    path('api/clinics/<int:clinic_id>/reject', clinics.reject_clinic, name='clinic-reject'),

    # Hospitals
    path('api/hospitals', hospitals.hospitals, name='hospitals'),
    path('api/hospitals/me', hospitals.my_hospital, name='hospital-me'),
    path('api/hospitals/pending', hospitals.pending_hospitals, name='hospital-pending'),
    path('api/hospitals/active', hospitals.active_hospitals, name='hospital-active'),
    path('api/hospitals/stats', hospitals.hospital_stats, name='hospital-stats'),
    path('api/hospitals/by-region/<str:region>', hospitals.hospitals_by_region, name='hospital-by-region'),
    path('api/hospitals/region-mapping/<str:origin>', hospitals.region_mapping, name='hospital-region-mapping'),
    path('api/hospitals/<int:hospital_id>', hospitals.hospital_detail, name='hospital-detail'),
    path('api/hospitals/<int:hospital_id>/approve', hospitals.approve_hospital, name='hospital-approve'),
    path('api/hospitals/<int:hospital_id>/reject', hospitals.reject_hospital, name='hospital-reject'),

    # Patients
    path('api/patients', patients.patients, name='patients'),
    path('api/patients/<int:patient_id>', patients.patient_detail, name='patient-detail'),

    # Evacuations
    path('api/evacuations', evacuations.evacuations, name='evacuations'),
    path('api/evacuations/<int:evacuation_id>', evacuations.evacuation_detail, name='evacuation-detail'),

    # Vitals
    path('api/vitals', vitals.vitals, name='vitals'),
    path('api/vitals/complete-session', vitals.complete_session, name='vitals-complete-session'),

    # Critical cases
    path('api/critical/nearby', critical.nearby_hospitals, name='critical-nearby'),
    path('api/critical/share', critical.share_case, name='critical-share'),
    path('api/critical/clinic', critical.clinic_cases, name='critical-clinic'),
    path('api/critical/hospital', critical.hospital_cases, name='critical-hospital'),
    path('api/critical/<int:case_id>/acknowledge', critical.acknowledge_case, name='critical-acknowledge'),
    path('api/critical/patient/<int:patient_id>', critical.case_patient, name='critical-patient'),

    # Dashboard
    path('api/dashboard/stats', dashboard.dashboard_stats, name='dashboard-stats'),
]
