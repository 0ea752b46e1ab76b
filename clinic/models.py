"""
Database models for the hospital operations backend.

The schema covers staff accounts and departments, patients and their
appointments, operating theaters with their surgery bookings, emergency
alerts, the department token queue, pharmacy and blood bank stock and the
public information displays.  Theater rows keep the "current occupant"
fields the dashboards render, while :class:`SurgeryBooking` holds every
booked interval so conflicts can be checked against more than one slot.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Department(models.Model):
    """A hospital department (Cardiology, Emergency, ...)."""
    STATUS_CHOICES = [
        ('Active', 'Active'),
        ('Inactive', 'Inactive'),
        ('Maintenance', 'Maintenance'),
    ]
    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    contact_number = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    operating_hours = models.CharField(max_length=120, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='Active', db_index=True)
    capacity = models.PositiveIntegerField(default=50)
    current_occupancy = models.PositiveIntegerField(default=0)
    specializations = models.JSONField(default=list, blank=True)
    equipment = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class User(AbstractUser):
    """Staff or patient account with a single role.

    Roles drive the dashboards exposed to the front-end: administrators
    manage departments and displays, doctors schedule surgeries, nurses run
    the token queue and raise alerts, technicians look after the blood bank
    and displays and pharmacists own the drug inventory.
    """
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('doctor', 'Doctor'),
        ('nurse', 'Nurse'),
        ('technician', 'Technician'),
        ('pharmacist', 'Pharmacist'),
        ('receptionist', 'Receptionist'),
        ('patient', 'Patient'),
    ]
    STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
    ]
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default='patient', db_index=True)
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='staff'
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='ACTIVE')

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(models.Model):
    STATUS_CHOICES = [
        ('Active', 'Active'),
        ('Inactive', 'Inactive'),
    ]
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=16, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    # Free text; the emergency queue matches keywords in it
    condition = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='Active', db_index=True)
    vitals = models.JSONField(default=dict, blank=True)
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='patients'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"


class Appointment(models.Model):
    TYPE_CHOICES = [
        ('REGULAR', 'Regular'),
        ('FOLLOW_UP', 'Follow up'),
        ('EMERGENCY', 'Emergency'),
    ]
    STATUS_CHOICES = [
        ('Scheduled', 'Scheduled'),
        ('Completed', 'Completed'),
        ('Cancelled', 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    doctor = models.ForeignKey(User, null=True, on_delete=models.SET_NULL, related_name='appointments')
    date = models.DateTimeField()
    time = models.CharField(max_length=16, blank=True)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default='REGULAR')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='Scheduled')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['doctor', 'date'], name='clinic_appo_doctor__a1f3c2_idx')]

    def __str__(self) -> str:
        return f"{self.type} {self.patient_id} @ {self.date:%F %H:%M}"


class Theater(models.Model):
    """An operating theater and its current (or next) occupant.

    ``status`` is the stored lifecycle label.  What the dashboards show is
    derived from it on every read by comparing ``start_time`` and
    ``estimated_end`` with the wall clock, see
    :func:`clinic.services.theaters.derive_theater_status`.
    """
    STATUS_AVAILABLE = 'Available'
    STATUS_SCHEDULED = 'Scheduled'
    STATUS_IN_PROGRESS = 'In Progress'
    STATUS_MAINTENANCE = 'Maintenance'
    STATUS_CLEANING = 'Cleaning'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, STATUS_AVAILABLE),
        (STATUS_SCHEDULED, STATUS_SCHEDULED),
        (STATUS_IN_PROGRESS, STATUS_IN_PROGRESS),
        (STATUS_MAINTENANCE, STATUS_MAINTENANCE),
        (STATUS_CLEANING, STATUS_CLEANING),
    ]
    IDLE_PROCEDURE = 'Available'

    id = models.CharField(max_length=20, primary_key=True, help_text="Theater code, e.g. 'OT-002'")
    name = models.CharField(max_length=120, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_AVAILABLE, db_index=True)
    patient_name = models.CharField(max_length=255, blank=True)
    procedure = models.CharField(max_length=255, default=IDLE_PROCEDURE)
    surgeon = models.CharField(max_length=255, blank=True)
    start_time = models.DateTimeField()
    estimated_end = models.DateTimeField()
    progress = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']

    @property
    def display_name(self) -> str:
        return self.name or f"Operating Theater {self.id.replace('OT-', '')}"

    @property
    def has_occupant(self) -> bool:
        return bool(self.patient_name) and self.procedure != self.IDLE_PROCEDURE

    def __str__(self) -> str:
        return f"{self.id} [{self.status}]"


class SurgeryBooking(models.Model):
    """One booked interval in a theater."""
    STATUS_CHOICES = [
        ('Scheduled', 'Scheduled'),
        ('Completed', 'Completed'),
        ('Cancelled', 'Cancelled'),
    ]
    theater = models.ForeignKey(Theater, on_delete=models.CASCADE, related_name='bookings')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='surgeries')
    surgeon = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='surgeries')
    surgeon_names = models.CharField(max_length=255, blank=True)
    procedure = models.CharField(max_length=255)
    priority = models.CharField(max_length=20, default='normal')
    notes = models.TextField(blank=True)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='Scheduled', db_index=True)
    appointment = models.OneToOneField(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='surgery'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['theater', 'start_time', 'end_time'], name='clinic_surg_theater_5b8e1d_idx')]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F('start_time')),
                name='surgery_booking_end_after_start',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.procedure} in {self.theater_id} {self.start_time:%F %H:%M}~{self.end_time:%H:%M}"


class EmergencyAlert(models.Model):
    STATUS_ACTIVE = 'active'
    STATUS_RESOLVED = 'resolved'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'active'),
        (STATUS_RESOLVED, 'resolved'),
    ]
    code_type = models.CharField(max_length=64)
    location = models.CharField(max_length=255)
    message = models.TextField(blank=True)
    # 1 is the most urgent, 5 the least
    priority = models.PositiveSmallIntegerField(
        default=3, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    broadcast_to = models.JSONField(default=list, blank=True)
    created_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='alerts')
    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=['status', 'priority'], name='clinic_emer_status_9c4a7e_idx')]

    def __str__(self) -> str:
        return f"{self.code_type} @ {self.location} (p{self.priority}, {self.status})"


class Token(models.Model):
    STATUS_WAITING = 'Waiting'
    STATUS_CALLED = 'Called'
    STATUS_IN_PROGRESS = 'In Progress'
    STATUS_COMPLETED = 'Completed'
    STATUS_CANCELLED = 'Cancelled'
    STATUS_CHOICES = [
        (STATUS_WAITING, STATUS_WAITING),
        (STATUS_CALLED, STATUS_CALLED),
        (STATUS_IN_PROGRESS, STATUS_IN_PROGRESS),
        (STATUS_COMPLETED, STATUS_COMPLETED),
        (STATUS_CANCELLED, STATUS_CANCELLED),
    ]
    ACTIVE_STATUSES = (STATUS_WAITING, STATUS_CALLED, STATUS_IN_PROGRESS)

    PRIORITY_CHOICES = [
        ('Normal', 'Normal'),
        ('Urgent', 'Urgent'),
        ('Emergency', 'Emergency'),
    ]

    token_number = models.CharField(max_length=32)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='tokens')
    patient_name = models.CharField(max_length=255)
    display_name = models.CharField(max_length=64, blank=True)
    department = models.ForeignKey(Department, on_delete=models.CASCADE, related_name='tokens')
    department_name = models.CharField(max_length=120)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_WAITING, db_index=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='Normal', db_index=True)
    estimated_wait_time = models.PositiveIntegerField(default=15, help_text="Minutes")
    actual_wait_time = models.PositiveIntegerField(null=True, blank=True, help_text="Minutes")
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    called_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=['department', 'status', 'created_at'], name='clinic_toke_departm_3e7f21_idx')]
        constraints = [
            models.UniqueConstraint(fields=['department', 'token_number'], name='token_number_per_department'),
        ]

    def __str__(self) -> str:
        return f"{self.token_number} [{self.status}]"


class TokenTransition(models.Model):
    """Records a status transition for a token."""
    token = models.ForeignKey(Token, related_name='transitions', on_delete=models.CASCADE)
    from_status = models.CharField(max_length=16, null=True, blank=True)
    to_status = models.CharField(max_length=16)
    operator = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='token_transitions')
    timestamp = models.DateTimeField(auto_now_add=True)
    reason = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.token_id}: {self.from_status} → {self.to_status}"


class Drug(models.Model):
    """A line in the pharmacy stock."""
    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=120, default='General')
    current_stock = models.PositiveIntegerField(default=0)
    min_stock = models.PositiveIntegerField(default=0)
    location = models.CharField(max_length=255, blank=True)
    batch_number = models.CharField(max_length=64, blank=True)
    expiry_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.current_stock})"


class Prescription(models.Model):
    """Medication order written by a doctor and dispensed by the pharmacy.

    Pending -> Processing (stock dispensed) -> Completed.
    """
    STATUS_PENDING = 'Pending'
    STATUS_PROCESSING = 'Processing'
    STATUS_COMPLETED = 'Completed'
    STATUS_CHOICES = [
        (STATUS_PENDING, STATUS_PENDING),
        (STATUS_PROCESSING, STATUS_PROCESSING),
        (STATUS_COMPLETED, STATUS_COMPLETED),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='prescriptions')
    doctor = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='prescriptions')
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Rx {self.id} for {self.patient_id} [{self.status}]"


class PrescriptionItem(models.Model):
    prescription = models.ForeignKey(Prescription, on_delete=models.CASCADE, related_name='items')
    drug = models.ForeignKey(Drug, on_delete=models.PROTECT, related_name='prescription_items')
    dosage = models.CharField(max_length=64)
    frequency = models.CharField(max_length=64)
    duration = models.CharField(max_length=64)
    instructions = models.CharField(max_length=255, blank=True)
    quantity_dispensed = models.PositiveIntegerField(default=0)

    def __str__(self) -> str:
        return f"{self.drug_id} {self.dosage} {self.frequency}"


class BloodUnit(models.Model):
    """Blood bank stock for one blood type batch."""
    BLOOD_TYPES = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']

    blood_type = models.CharField(max_length=4, choices=[(t, t) for t in BLOOD_TYPES])
    units_available = models.PositiveIntegerField(default=0)
    critical_level = models.PositiveIntegerField(default=5)
    status = models.CharField(max_length=32, default='Available')
    expiry_date = models.DateTimeField()
    donor_id = models.CharField(max_length=64, blank=True)
    collection_date = models.DateTimeField()
    location = models.CharField(max_length=255, blank=True)
    batch_number = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['blood_type']

    def __str__(self) -> str:
        return f"{self.blood_type}: {self.units_available}"


class Display(models.Model):
    """A public information screen (lobby, department, emergency ward)."""
    CONTENT_CHOICES = [
        ('Token Queue', 'Token Queue'),
        ('Department Token Queue', 'Department Token Queue'),
        ('Department Status', 'Department Status'),
        ('Emergency Alerts', 'Emergency Alerts'),
        ('Drug Inventory', 'Drug Inventory'),
        ('Blood Bank', 'Blood Bank'),
        ('Mixed Dashboard', 'Mixed Dashboard'),
    ]
    location = models.CharField(max_length=255)
    content = models.CharField(max_length=32, choices=CONTENT_CHOICES, default='Token Queue')
    status = models.CharField(max_length=16, default='offline')
    config = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)
    last_update = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.location} ({self.content}, {self.status})"
