from django.core.management.base import BaseCommand

from opscore.models import Tenant, User

PLATFORM_TENANT = ("Platform", Tenant.KIND_PLATFORM)
DEMO_TENANT = ("Demo General Hospital", Tenant.KIND_HOSPITAL)

TEST_SET = [
    ("super@example.com", User.ROLE_SUPER_ADMIN, PLATFORM_TENANT),
    ("admin@demo.example.com", User.ROLE_TENANT_ADMIN, DEMO_TENANT),
    ("nurse@demo.example.com", User.ROLE_NURSE, DEMO_TENANT),
    ("physician@demo.example.com", User.ROLE_PHYSICIAN, DEMO_TENANT),
    ("patient@demo.example.com", User.ROLE_PATIENT, DEMO_TENANT),
]


class Command(BaseCommand):
    help = "Ensure demo tenants and test users exist (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('--password', default='ChangeMe-123')

    def handle(self, *args, **opts):
        tenants = {}
        for name, kind in (PLATFORM_TENANT, DEMO_TENANT):
            tenants[name], _ = Tenant.objects.get_or_create(name=name, defaults={'kind': kind})

        for email, role, (tenant_name, _kind) in TEST_SET:
            u, created = User.objects.get_or_create(
                email=email,
                defaults={'username': email, 'role': role, 'tenant': tenants[tenant_name]},
            )
            u.role = role
            u.tenant = tenants[tenant_name]
            u.is_active = True
            u.set_password(opts['password'])
            u.save()
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role}) @ {tenant_name}"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
