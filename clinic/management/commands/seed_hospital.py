"""
Management command to populate the database with demo data.
"""
import random
from datetime import timedelta

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.models import BloodUnit, Department, Display, Drug, EmergencyAlert, Patient, User
from clinic.services import prescriptions as prescription_svc
from clinic.services import surgery as surgery_svc
from clinic.services import tokens as token_svc
from clinic.services.theaters import ensure_default_theaters


class Command(BaseCommand):
    help = 'Populate the database with demo departments, staff, patients and operational data'

    def add_arguments(self, parser):
        parser.add_argument('--seed', type=int, default=7, help='random seed for reproducible data')

    def handle(self, *args, **options):
        random.seed(options['seed'])
        self.stdout.write('Creating demo data...')

        departments = self.create_departments()
        doctors = self.create_staff(departments)
        patients = self.create_patients(departments)
        ensure_default_theaters()
        self.create_surgeries(patients, doctors)
        self.create_tokens(patients, departments)
        self.create_alerts()
        self.create_inventory()
        self.create_prescriptions(patients, doctors)
        self.create_displays(departments)

        self.stdout.write(self.style.SUCCESS('Demo data created.'))

    def create_departments(self):
        departments_data = [
            {'name': 'Cardiology', 'location': 'Block A, Floor 2', 'capacity': 40,
             'specializations': ['Interventional Cardiology', 'Electrophysiology']},
            {'name': 'Emergency', 'location': 'Ground Floor', 'capacity': 60,
             'operating_hours': '24/7', 'specializations': ['Trauma', 'Critical Care']},
            {'name': 'Surgery', 'location': 'Block B, Floor 3', 'capacity': 30,
             'specializations': ['General Surgery', 'Orthopedics']},
            {'name': 'Pharmacy', 'location': 'Ground Floor', 'capacity': 10},
            {'name': 'Radiology', 'location': 'Block C, Floor 1', 'capacity': 20,
             'equipment': ['MRI', 'CT Scanner', 'X-Ray']},
        ]
        departments = []
        for data in departments_data:
            dept, created = Department.objects.get_or_create(
                name=data['name'],
                defaults={
                    'description': f"{data['name']} department",
                    'operating_hours': '08:00 - 20:00',
                    'current_occupancy': random.randint(0, data['capacity'] // 2),
                    **data,
                },
            )
            departments.append(dept)
            self.stdout.write(f'Department: {dept.name}')
        return departments

    def create_staff(self, departments):
        by_name = {d.name: d for d in departments}
        staff_data = [
            ('admin1', 'Asha', 'Menon', 'admin', None),
            ('doctor1', 'Ravi', 'Kumar', 'doctor', 'Surgery'),
            ('doctor2', 'Meera', 'Iyer', 'doctor', 'Cardiology'),
            ('doctor3', 'Arjun', 'Nair', 'doctor', 'Emergency'),
            ('nurse1', 'Divya', 'Pillai', 'nurse', 'Emergency'),
            ('tech1', 'Karthik', 'Raj', 'technician', 'Radiology'),
            ('pharm1', 'Lakshmi', 'Das', 'pharmacist', 'Pharmacy'),
            ('reception1', 'Vijay', 'Shankar', 'receptionist', None),
        ]
        doctors = []
        for username, first, last, role, dept in staff_data:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={
                    'email': f'{username}@hospital.local',
                    'password': make_password('123456'),
                    'role': role,
                    'first_name': first,
                    'last_name': last,
                    'department': by_name.get(dept),
                },
            )
            if role == 'doctor':
                doctors.append(user)
            self.stdout.write(f'Staff: {user.username} ({user.role})')
        return doctors

    def create_patients(self, departments):
        names = ['John Doe', 'Priya Sharma', 'Anil Verma', 'Fatima Khan', 'George Thomas',
                 'Sneha Reddy', 'Rahul Gupta', 'Maria Joseph']
        conditions = ['Hypertension', 'Critical - chest pain', 'Fracture', 'Urgent - high fever',
                      'Diabetes', 'Emergency - road accident', 'Asthma', 'Migraine']
        patients = []
        for name, condition in zip(names, conditions):
            patient, created = Patient.objects.get_or_create(
                name=name,
                defaults={
                    'age': random.randint(18, 80),
                    'gender': random.choice(['Male', 'Female']),
                    'phone': f'98{random.randint(10000000, 99999999)}',
                    'condition': condition,
                    'department': random.choice(departments),
                    'vitals': {'temp': '98.6', 'bp': '120/80', 'pulse': '72', 'spo2': '98'},
                },
            )
            patients.append(patient)
        self.stdout.write(f'Patients: {len(patients)}')
        return patients

    def create_surgeries(self, patients, doctors):
        if not doctors:
            return
        now = timezone.now().replace(minute=0, second=0, microsecond=0)
        plan = [
            ('OT-001', patients[0], 'Appendectomy', now - timedelta(hours=1), '2 hours'),
            ('OT-002', patients[2], 'Knee Arthroscopy', now + timedelta(hours=3), '1.5 hours'),
            ('OT-004', patients[4], 'Cholecystectomy', now + timedelta(hours=5), '2 hours'),
        ]
        for theater_id, patient, procedure, start, duration in plan:
            if surgery_svc.check_conflict(theater_id, start, duration):
                continue
            surgery_svc.schedule_surgery(
                patient_id=patient.id,
                procedure=procedure,
                theater_id=theater_id,
                scheduled_time=start,
                estimated_duration=duration,
                surgeon_id=random.choice(doctors).id,
            )
            self.stdout.write(f'Surgery: {procedure} in {theater_id}')

    def create_tokens(self, patients, departments):
        priorities = ['Normal', 'Normal', 'Urgent', 'Emergency']
        for patient in patients[:6]:
            token_svc.create_token(
                patient_id=patient.id,
                department_id=random.choice(departments).id,
                priority=random.choice(priorities),
            )
        self.stdout.write('Tokens issued')

    def create_alerts(self):
        EmergencyAlert.objects.get_or_create(
            code_type='CODE_BLUE', location='ICU Bed 4',
            defaults={'message': 'CODE_BLUE at ICU Bed 4', 'priority': 1, 'broadcast_to': ['ALL']},
        )

    def create_inventory(self):
        drugs = [
            ('Paracetamol 500mg', 'Analgesic', 400, 100),
            ('Amoxicillin 250mg', 'Antibiotic', 60, 80),
            ('Insulin Glargine', 'Antidiabetic', 15, 40),
            ('Atorvastatin 10mg', 'Cardiac', 220, 50),
        ]
        for name, category, stock, minimum in drugs:
            Drug.objects.get_or_create(
                name=name,
                defaults={
                    'category': category,
                    'current_stock': stock,
                    'min_stock': minimum,
                    'location': 'Main Pharmacy',
                    'batch_number': f'B{random.randint(1000, 9999)}',
                    'expiry_date': timezone.now() + timedelta(days=random.randint(60, 600)),
                },
            )
        now = timezone.now()
        for blood_type in BloodUnit.BLOOD_TYPES:
            BloodUnit.objects.get_or_create(
                blood_type=blood_type,
                defaults={
                    'units_available': random.randint(2, 30),
                    'expiry_date': now + timedelta(days=random.randint(3, 40)),
                    'collection_date': now - timedelta(days=random.randint(1, 20)),
                    'location': 'Blood Bank Fridge 1',
                },
            )
        self.stdout.write('Inventory stocked')

    def create_prescriptions(self, patients, doctors):
        plan = [
            (patients[1], [('Atorvastatin 10mg', '10mg', 'Once daily', '30 days')]),
            (patients[3], [('Paracetamol 500mg', '500mg', 'Every 6 hours', '5 days'),
                           ('Amoxicillin 250mg', '250mg', 'Three times daily', '7 days')]),
        ]
        for patient, meds in plan:
            if patient.prescriptions.exists():
                continue
            prescription_svc.create_prescription(
                patient_id=patient.id,
                doctor=random.choice(doctors) if doctors else None,
                medications=[
                    {'drugName': name, 'dosage': dose, 'frequency': freq, 'duration': days}
                    for name, dose, freq, days in meds
                ],
            )
        self.stdout.write('Prescriptions written')

    def create_displays(self, departments):
        Display.objects.get_or_create(location='Main Lobby', defaults={'content': 'Token Queue'})
        Display.objects.get_or_create(location='Emergency Ward', defaults={'content': 'Emergency Alerts'})
        Display.objects.get_or_create(
            location=f'{departments[0].name} Waiting Area',
            defaults={'content': 'Department Token Queue', 'config': {'departmentId': departments[0].id}},
        )
        self.stdout.write('Displays registered')
