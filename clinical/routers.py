"""
URL mappings for the clinical API.

Paths follow the legacy client (``/api/admissions/getNextProgressiveIdInYear``
and friends).  Trailing slashes are deliberately omitted.
"""
from django.urls import include, path

from .views import admissions, health, vaccines

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Admissions
    path('api/admissions', admissions.admissions, name='admissions'),
    path('api/admissions/current', admissions.current_admission_view, name='admission-current'),
    path('api/admissions/allAdmittedPatients', admissions.all_admitted_patients, name='admitted-patients-all'),
    path('api/admissions/admittedPatients', admissions.admitted_patients_view, name='admitted-patients'),
    path('api/admissions/getNextProgressiveIdInYear', admissions.next_progressive_id, name='admission-next-prog'),
    path('api/admissions/getBedsOccupationInWard', admissions.beds_occupation, name='admission-beds'),
    path('api/admissions/discharge', admissions.discharge_patient, name='admission-discharge'),
    path('api/admissions/<int:pk>', admissions.admission_detail, name='admission-detail'),
    # Vaccines
    path('api/vaccines', vaccines.vaccines, name='vaccines'),
    path('api/vaccines/check/<str:code>', vaccines.check_vaccine_code, name='vaccine-check'),
    path('api/vaccines/<str:code>', vaccines.vaccine_by_code, name='vaccine-by-code'),
]
