"""
Database models for the healthcare operations core.

Every tenant-owned table carries a ``tenant`` foreign key; rows are only
ever reached through :class:`opscore.services.tenancy.TenantGuard`, which
scopes them to the tenant of the calling session.  The two "at most one
open row per user" rules (active work shift, open time log) are partial
unique constraints so that the database is the final arbiter when two
requests race.
"""
from __future__ import annotations

import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q


class Tenant(models.Model):
    """An isolated organisation on the platform.

    ``kind`` is fixed at onboarding; changing it afterwards would move a
    pharmacy's data under hospital rules, so saves that alter it are
    refused.
    """
    KIND_HOSPITAL = 'hospital'
    KIND_CLINIC = 'clinic'
    KIND_PHARMACY = 'pharmacy'
    KIND_LABORATORY = 'laboratory'
    KIND_INSURANCE = 'insurance_provider'
    KIND_SUPPLIER = 'medical_supplier'
    KIND_PLATFORM = 'platform'
    KIND_CHOICES = [
        (KIND_HOSPITAL, 'Hospital'),
        (KIND_CLINIC, 'Clinic'),
        (KIND_PHARMACY, 'Pharmacy'),
        (KIND_LABORATORY, 'Laboratory'),
        (KIND_INSURANCE, 'Insurance provider'),
        (KIND_SUPPLIER, 'Medical supplier'),
        (KIND_PLATFORM, 'Platform'),
    ]

    STATUS_ACTIVE = 'active'
    STATUS_SUSPENDED = 'suspended'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_SUSPENDED, 'Suspended'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, unique=True)
    kind = models.CharField(max_length=32, choices=KIND_CHOICES)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            stored = Tenant.objects.filter(pk=self.pk).values_list('kind', flat=True).first()
            if stored is not None and stored != self.kind:
                raise ValueError('tenant kind cannot change after creation')
        super().save(*args, **kwargs)

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def __str__(self) -> str:
        return f"{self.name} ({self.kind})"


class User(AbstractUser):
    """Platform user bound to exactly one tenant.

    ``super_admin`` users live in the platform tenant and are the only
    role allowed to act across tenants.
    """
    ROLE_SUPER_ADMIN = 'super_admin'
    ROLE_TENANT_ADMIN = 'tenant_admin'
    ROLE_DIRECTOR = 'director'
    ROLE_PHYSICIAN = 'physician'
    ROLE_NURSE = 'nurse'
    ROLE_PHARMACIST = 'pharmacist'
    ROLE_LAB_TECHNICIAN = 'lab_technician'
    ROLE_RECEPTIONIST = 'receptionist'
    ROLE_BILLING_STAFF = 'billing_staff'
    ROLE_INSURANCE_MANAGER = 'insurance_manager'
    ROLE_PATIENT = 'patient'
    ROLE_CHOICES = [
        (ROLE_SUPER_ADMIN, 'Super administrator'),
        (ROLE_TENANT_ADMIN, 'Tenant administrator'),
        (ROLE_DIRECTOR, 'Director'),
        (ROLE_PHYSICIAN, 'Physician'),
        (ROLE_NURSE, 'Nurse'),
        (ROLE_PHARMACIST, 'Pharmacist'),
        (ROLE_LAB_TECHNICIAN, 'Lab technician'),
        (ROLE_RECEPTIONIST, 'Receptionist'),
        (ROLE_BILLING_STAFF, 'Billing staff'),
        (ROLE_INSURANCE_MANAGER, 'Insurance manager'),
        (ROLE_PATIENT, 'Patient'),
    ]

    email = models.EmailField(unique=True)
    tenant = models.ForeignKey(Tenant, on_delete=models.PROTECT, related_name='users')
    role = models.CharField(max_length=32, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


# ---------------------------------------------------------------------------
# Clinical records touched during shifts.  These are collaborator tables:
# screens elsewhere edit them, the archive only snapshots them.
# ---------------------------------------------------------------------------

class ClinicalRecord(models.Model):
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='+')
    last_modified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        abstract = True


class Patient(ClinicalRecord):
    mrn = models.CharField(max_length=64)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    date_of_birth = models.DateField(null=True, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'mrn'], name='patient_unique_mrn_per_tenant'),
        ]
        indexes = [
            models.Index(fields=['tenant', 'last_modified_by', 'updated_at'], name='patient_modified_idx'),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"{self.full_name} ({self.mrn})"


class Prescription(ClinicalRecord):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='prescriptions')
    prescription_number = models.CharField(max_length=64)
    medication_name = models.CharField(max_length=255)
    dosage = models.CharField(max_length=128, blank=True)
    instructions = models.TextField(blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['tenant', 'last_modified_by', 'updated_at'], name='prescription_modified_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.prescription_number} {self.medication_name}"


class Appointment(ClinicalRecord):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    scheduled_at = models.DateTimeField()
    reason = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['tenant', 'last_modified_by', 'updated_at'], name='appointment_modified_idx'),
        ]

    def __str__(self) -> str:
        return f"Appointment {self.id} @ {self.scheduled_at:%F %T}"


class LabOrder(ClinicalRecord):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='lab_orders')
    order_number = models.CharField(max_length=64)
    test_name = models.CharField(max_length=255)
    notes = models.TextField(blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['tenant', 'last_modified_by', 'updated_at'], name='laborder_modified_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.order_number} {self.test_name}"


# ---------------------------------------------------------------------------
# Shifts & archive
# ---------------------------------------------------------------------------

class WorkShift(models.Model):
    """A bounded period of clinical activity closed by an archival step."""
    TYPE_CHOICES = [
        ('morning', 'Morning'),
        ('afternoon', 'Afternoon'),
        ('evening', 'Evening'),
        ('night', 'Night'),
    ]

    STATUS_ACTIVE = 'active'
    STATUS_ENDED = 'ended'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_ENDED, 'Ended'),
    ]

    ARCHIVE_PENDING = 'pending'
    ARCHIVE_COMPLETED = 'completed'
    ARCHIVE_FAILED = 'failed'
    ARCHIVE_STATUS_CHOICES = [
        (ARCHIVE_PENDING, 'Pending'),
        (ARCHIVE_COMPLETED, 'Completed'),
        (ARCHIVE_FAILED, 'Failed'),
    ]

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='work_shifts')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='work_shifts')
    shift_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    notes = models.TextField(blank=True)
    summary = models.JSONField(default=dict, blank=True)
    archive_status = models.CharField(max_length=16, choices=ARCHIVE_STATUS_CHOICES, default=ARCHIVE_PENDING)
    archive_error = models.TextField(blank=True)
    archived_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'user'],
                condition=Q(status='active'),
                name='one_active_shift_per_user',
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'user', 'status'], name='workshift_user_status_idx'),
            models.Index(fields=['tenant', 'start_time'], name='workshift_start_idx'),
        ]

    def __str__(self) -> str:
        return f"Shift(u={self.user_id}, {self.shift_type}, {self.status})"


class ArchivedRecord(models.Model):
    """Immutable snapshot of a record touched during a shift.

    Only the access bookkeeping columns (and redaction once retention has
    lapsed) change after creation.
    """
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='archived_records')
    work_shift = models.ForeignKey(WorkShift, on_delete=models.PROTECT, related_name='archived_records')
    patient = models.ForeignKey(Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    record_type = models.CharField(max_length=32, db_index=True)
    record_id = models.CharField(max_length=64)

    patient_name = models.CharField(max_length=255, blank=True)
    patient_mrn = models.CharField(max_length=64, blank=True, db_index=True)
    tags = models.JSONField(default=list, blank=True)

    original_data = models.JSONField(default=dict)
    searchable_content = models.TextField(blank=True)

    archived_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name='+'
    )
    archived_at = models.DateTimeField(auto_now_add=True)
    last_accessed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    last_accessed_at = models.DateTimeField(null=True, blank=True)
    access_count = models.PositiveIntegerField(default=0)
    retention_period = models.PositiveIntegerField(help_text='Retention in days')
    redacted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['work_shift', 'record_type', 'record_id'],
                name='archived_record_once_per_shift',
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'archived_at'], name='archive_tenant_time_idx'),
            models.Index(fields=['tenant', 'record_type'], name='archive_tenant_type_idx'),
        ]

    def snapshot(self) -> dict:
        """Return ``original_data`` validated against its record type's schema."""
        from opscore.services.snapshots import load_snapshot
        return load_snapshot(self.original_data)

    def __str__(self) -> str:
        return f"Archived {self.record_type}:{self.record_id} (shift {self.work_shift_id})"


# ---------------------------------------------------------------------------
# Time & attendance
# ---------------------------------------------------------------------------

class TimeLog(models.Model):
    STATUS_CLOCKED_IN = 'clocked_in'
    STATUS_CLOCKED_OUT = 'clocked_out'
    STATUS_APPROVED = 'approved'
    STATUS_DISPUTED = 'disputed'
    STATUS_CHOICES = [
        (STATUS_CLOCKED_IN, 'Clocked in'),
        (STATUS_CLOCKED_OUT, 'Clocked out'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_DISPUTED, 'Disputed'),
    ]

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='time_logs')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='time_logs')
    clock_in_time = models.DateTimeField(db_index=True)
    clock_in_location = models.CharField(max_length=255, blank=True, null=True)
    clock_out_time = models.DateTimeField(null=True, blank=True)
    clock_out_location = models.CharField(max_length=255, blank=True, null=True)
    break_minutes = models.PositiveIntegerField(default=0)
    total_hours = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    overtime_hours = models.DecimalField(max_digits=6, decimal_places=2, default=0)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_CLOCKED_IN, db_index=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    dispute_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'user'],
                condition=Q(status='clocked_in'),
                name='one_open_time_log_per_user',
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'user', 'clock_in_time'], name='timelog_user_clockin_idx'),
        ]

    def __str__(self) -> str:
        return f"TimeLog(u={self.user_id}, {self.status})"


class AuditEvent(models.Model):
    tenant = models.ForeignKey(Tenant, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_time_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_time_idx'),
            models.Index(fields=['tenant', 'created_at'], name='audit_tenant_time_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
