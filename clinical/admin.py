"""
Django admin registrations for the clinical models.

Reference catalogs share one admin class; admissions get filters on
the fields staff usually browse by (ward, admitted, deleted).
"""
from django.contrib import admin

from .models import (
    Admission,
    AdmissionType,
    DeliveryResultType,
    DeliveryType,
    DischargeType,
    Disease,
    Operation,
    Patient,
    PregnantTreatmentType,
    Vaccine,
    VaccineType,
    Ward,
)


class CatalogAdmin(admin.ModelAdmin):
    list_display = ('code', 'description')
    search_fields = ('code', 'description')


for model in (AdmissionType, DischargeType, Disease, PregnantTreatmentType, DeliveryType, DeliveryResultType, VaccineType):
    admin.site.register(model, CatalogAdmin)


@admin.register(Ward)
class WardAdmin(CatalogAdmin):
    list_display = ('code', 'description', 'beds', 'is_opd')


@admin.register(Operation)
class OperationAdmin(CatalogAdmin):
    list_display = ('code', 'description', 'major')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'sex', 'birth_date', 'city')
    search_fields = ('name', 'first_name', 'second_name', 'city')


@admin.register(Admission)
class AdmissionAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'ward', 'yprog', 'adm_date', 'dis_date', 'admitted', 'deleted')
    list_filter = ('ward', 'admitted', 'deleted', 'adm_type')
    search_fields = ('patient__name',)
    raw_id_fields = ('patient',)


@admin.register(Vaccine)
class VaccineAdmin(admin.ModelAdmin):
    list_display = ('code', 'description', 'vaccine_type')
    list_filter = ('vaccine_type',)
