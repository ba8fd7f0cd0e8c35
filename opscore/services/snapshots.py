"""
Archive snapshot schemas.

``ArchivedRecord.original_data`` is a tagged union keyed by
``recordType``; each variant has its own serializer here.  Archiving
renders a record through its variant, reading validates the stored dict
against the same variant so consumers get a known shape back.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Type

from django.db import models
from rest_framework import serializers

from opscore.models import Appointment, LabOrder, Patient, Prescription


class SnapshotSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    updatedAt = serializers.DateTimeField(source='updated_at')

    record_type: str = ''

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['recordType'] = self.record_type
        return data


class PatientSnapshot(SnapshotSerializer):
    record_type = 'patient'
    mrn = serializers.CharField(allow_blank=True)
    firstName = serializers.CharField(source='first_name', allow_blank=True)
    lastName = serializers.CharField(source='last_name', allow_blank=True)
    dateOfBirth = serializers.DateField(source='date_of_birth', allow_null=True, required=False)
    phone = serializers.CharField(allow_blank=True, required=False)
    notes = serializers.CharField(allow_blank=True, required=False)


class _PatientRefMixin(serializers.Serializer):
    patientId = serializers.IntegerField(source='patient_id')
    patientName = serializers.CharField(source='patient.full_name', allow_blank=True)
    patientMrn = serializers.CharField(source='patient.mrn', allow_blank=True)


class PrescriptionSnapshot(_PatientRefMixin, SnapshotSerializer):
    record_type = 'prescription'
    prescriptionNumber = serializers.CharField(source='prescription_number')
    medicationName = serializers.CharField(source='medication_name')
    dosage = serializers.CharField(allow_blank=True, required=False)
    instructions = serializers.CharField(allow_blank=True, required=False)


class AppointmentSnapshot(_PatientRefMixin, SnapshotSerializer):
    record_type = 'appointment'
    scheduledAt = serializers.DateTimeField(source='scheduled_at')
    reason = serializers.CharField(allow_blank=True, required=False)
    notes = serializers.CharField(allow_blank=True, required=False)


class LabOrderSnapshot(_PatientRefMixin, SnapshotSerializer):
    record_type = 'lab_order'
    orderNumber = serializers.CharField(source='order_number')
    testName = serializers.CharField(source='test_name')
    notes = serializers.CharField(allow_blank=True, required=False)


@dataclass(frozen=True)
class ArchiveSource:
    """One record type the archival pipeline knows how to snapshot."""
    record_type: str
    model: Type[models.Model]
    serializer: Type[SnapshotSerializer]
    search_fields: tuple
    patient_of: Callable[[models.Model], Optional[Patient]]
    select_related: tuple = ()


ARCHIVE_SOURCES: tuple[ArchiveSource, ...] = (
    ArchiveSource(
        record_type='patient',
        model=Patient,
        serializer=PatientSnapshot,
        search_fields=('first_name', 'last_name', 'mrn', 'phone', 'notes'),
        patient_of=lambda obj: obj,
    ),
    ArchiveSource(
        record_type='prescription',
        model=Prescription,
        serializer=PrescriptionSnapshot,
        search_fields=('prescription_number', 'medication_name', 'dosage', 'instructions'),
        patient_of=lambda obj: obj.patient,
        select_related=('patient',),
    ),
    ArchiveSource(
        record_type='appointment',
        model=Appointment,
        serializer=AppointmentSnapshot,
        search_fields=('reason', 'notes'),
        patient_of=lambda obj: obj.patient,
        select_related=('patient',),
    ),
    ArchiveSource(
        record_type='lab_order',
        model=LabOrder,
        serializer=LabOrderSnapshot,
        search_fields=('order_number', 'test_name', 'notes'),
        patient_of=lambda obj: obj.patient,
        select_related=('patient',),
    ),
)

SOURCES_BY_TYPE = {source.record_type: source for source in ARCHIVE_SOURCES}
RECORD_TYPES = tuple(SOURCES_BY_TYPE)


def dump_snapshot(source: ArchiveSource, obj: models.Model) -> dict:
    return dict(source.serializer(obj).data)


def load_snapshot(data: dict) -> dict:
    """Validate a stored snapshot against the variant named by its tag."""
    if not data:
        return {}
    source = SOURCES_BY_TYPE.get(data.get('recordType'))
    if source is None:
        raise serializers.ValidationError({'recordType': f"unknown record type {data.get('recordType')!r}"})
    s = source.serializer(data=data)
    s.is_valid(raise_exception=True)
    return dict(data)


def searchable_text(source: ArchiveSource, obj: models.Model) -> str:
    parts = [str(getattr(obj, name, '') or '') for name in source.search_fields]
    patient = source.patient_of(obj)
    if patient is not None and patient is not obj:
        parts.extend([patient.first_name, patient.last_name, patient.mrn])
    return ' '.join(p.strip() for p in parts if p and p.strip()).lower()
