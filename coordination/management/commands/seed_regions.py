from django.core.management.base import BaseCommand
from django.db import transaction

from coordination.models import Hospital, RegionMapping, TenantStatus
from coordination.services.hospitals import invalidate_stats

# origin region -> region whose hospitals receive its evacuations
REGION_MAPPINGS = [
    ("Andaman", "Chennai"),
    ("Nicobar", "Chennai"),
    ("Lakshadweep", "Kochi"),
    ("Minicoy", "Kochi"),
]

DEMO_HOSPITALS = [
    # (owner id, name, region, city, facility type)
    ("seed-hospital-chennai-1", "Chennai General Hospital", "Chennai", "Chennai", "tertiary"),
    ("seed-hospital-chennai-2", "Coromandel Trauma Centre", "Chennai", "Chennai", "trauma"),
    ("seed-hospital-kochi-1", "Kochi Medical College Hospital", "Kochi", "Kochi", "tertiary"),
]


class Command(BaseCommand):
    help = "Load region mappings and (optionally) demo hospitals (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--with-hospitals", action="store_true", help="also create active demo hospitals")

    @transaction.atomic
    def handle(self, *args, **opts):
        for origin, target in REGION_MAPPINGS:
            _, created = RegionMapping.objects.update_or_create(
                origin_region=origin, defaults={"target_region": target}
            )
            self.stdout.write(f"{'created' if created else 'updated'}: {origin} -> {target}")

        if opts["with_hospitals"]:
            for owner_id, name, region, city, facility_type in DEMO_HOSPITALS:
                Hospital.objects.update_or_create(
                    owner_id=owner_id,
                    defaults={
                        "name": name, "region": region, "city": city,
                        "facility_type": facility_type, "status": TenantStatus.ACTIVE,
                    },
                )
                self.stdout.write(f"ok: {name} ({region})")
            invalidate_stats()

        self.stdout.write(self.style.SUCCESS("Region data ensured."))
