"""
Database models for the hospital information system.

Reference catalogs (wards, admission types, diseases, ...) are keyed by
a short string code that clients send back when they create or update
an admission.  Patients are keyed by a numeric code.  Admissions are
never physically removed; the ``deleted`` flag hides them from every
query issued by the service layer.
"""
from __future__ import annotations

from django.db import models


class CatalogEntry(models.Model):
    """Common shape of a reference catalog row: a unique code and a label."""
    code = models.CharField(max_length=10, primary_key=True)
    description = models.CharField(max_length=255)

    class Meta:
        abstract = True
        ordering = ['code']

    def __str__(self) -> str:
        return f"{self.description} ({self.code})"


class Ward(CatalogEntry):
    beds = models.PositiveIntegerField(default=0)
    is_opd = models.BooleanField(default=False, help_text="Outpatient department")


class AdmissionType(CatalogEntry):
    pass


class DischargeType(CatalogEntry):
    pass


class Disease(CatalogEntry):
    pass


class Operation(CatalogEntry):
    major = models.BooleanField(default=False)


class PregnantTreatmentType(CatalogEntry):
    pass


class DeliveryType(CatalogEntry):
    pass


class DeliveryResultType(CatalogEntry):
    pass


class Patient(models.Model):
    """Registry entry for a person that may be admitted."""
    SEX_CHOICES = [
        ('M', 'Male'),
        ('F', 'Female'),
    ]
    code = models.AutoField(primary_key=True)
    first_name = models.CharField(max_length=50)
    second_name = models.CharField(max_length=50, blank=True)
    name = models.CharField(max_length=101, blank=True, db_index=True)
    sex = models.CharField(max_length=1, choices=SEX_CHOICES, blank=True)
    birth_date = models.DateField(null=True, blank=True)
    city = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        if not self.name:
            self.name = f"{self.first_name} {self.second_name}".strip()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} (#{self.code})"


class AdmissionQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(deleted=False)

    def current(self):
        return self.filter(deleted=False, admitted=Admission.ADMITTED)


class Admission(models.Model):
    """A hospitalisation episode linking a patient to a ward.

    ``admitted`` is 1 while the patient is in the ward and becomes 0 on
    discharge, at which point ``dis_date``, ``disease_out1`` and
    ``dis_type`` are filled in.  ``yprog`` is the progressive number of
    the admission inside its ward for the year of ``adm_date``.
    """
    ADMITTED = 1
    DISCHARGED = 0
    ADMITTED_CHOICES = [
        (ADMITTED, 'Admitted'),
        (DISCHARGED, 'Discharged'),
    ]
    TYPE_CHOICES = [
        ('I', 'Inpatient'),
        ('O', 'Outpatient'),
    ]

    admitted = models.PositiveSmallIntegerField(choices=ADMITTED_CHOICES, default=ADMITTED, db_index=True)
    type = models.CharField(max_length=1, choices=TYPE_CHOICES, default='I')
    ward = models.ForeignKey(Ward, on_delete=models.PROTECT, related_name='admissions')
    yprog = models.PositiveIntegerField(default=0)
    fhu = models.CharField(max_length=50, blank=True, help_text="Referring health unit")
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='admissions')
    adm_date = models.DateTimeField()
    adm_type = models.ForeignKey(AdmissionType, on_delete=models.PROTECT, related_name='admissions')
    disease_in = models.ForeignKey(
        Disease, null=True, blank=True, on_delete=models.PROTECT, related_name='admissions_in'
    )
    disease_out1 = models.ForeignKey(
        Disease, null=True, blank=True, on_delete=models.PROTECT, related_name='admissions_out1'
    )
    disease_out2 = models.ForeignKey(
        Disease, null=True, blank=True, on_delete=models.PROTECT, related_name='admissions_out2'
    )
    disease_out3 = models.ForeignKey(
        Disease, null=True, blank=True, on_delete=models.PROTECT, related_name='admissions_out3'
    )
    operation = models.ForeignKey(
        Operation, null=True, blank=True, on_delete=models.PROTECT, related_name='admissions'
    )
    op_date = models.DateTimeField(null=True, blank=True)
    op_result = models.CharField(max_length=10, blank=True)
    dis_date = models.DateTimeField(null=True, blank=True)
    dis_type = models.ForeignKey(
        DischargeType, null=True, blank=True, on_delete=models.PROTECT, related_name='admissions'
    )
    note = models.TextField(blank=True)
    trans_unit = models.FloatField(null=True, blank=True)
    visit_date = models.DateTimeField(null=True, blank=True)
    # Obstetric context
    preg_treatment_type = models.ForeignKey(
        PregnantTreatmentType, null=True, blank=True, on_delete=models.PROTECT, related_name='admissions'
    )
    delivery_date = models.DateTimeField(null=True, blank=True)
    delivery_type = models.ForeignKey(
        DeliveryType, null=True, blank=True, on_delete=models.PROTECT, related_name='admissions'
    )
    delivery_result = models.ForeignKey(
        DeliveryResultType, null=True, blank=True, on_delete=models.PROTECT, related_name='admissions'
    )
    weight = models.FloatField(null=True, blank=True)
    ctrl_date1 = models.DateTimeField(null=True, blank=True)
    ctrl_date2 = models.DateTimeField(null=True, blank=True)
    abort_date = models.DateTimeField(null=True, blank=True)
    deleted = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AdmissionQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'admitted', 'deleted']),
            models.Index(fields=['ward', 'adm_date']),
        ]

    def __str__(self) -> str:
        return f"Admission #{self.pk} p={self.patient_id} w={self.ward_id}"


class VaccineType(CatalogEntry):
    pass


class Vaccine(models.Model):
    code = models.CharField(max_length=10, primary_key=True)
    description = models.CharField(max_length=255)
    vaccine_type = models.ForeignKey(VaccineType, on_delete=models.PROTECT, related_name='vaccines')

    class Meta:
        ordering = ['code']

    def __str__(self) -> str:
        return f"{self.description} ({self.code})"
