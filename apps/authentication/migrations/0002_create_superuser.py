from django.contrib.auth.hashers import make_password
from django.db import migrations
import os


def create_platform_admin(apps, schema_editor):
    User = apps.get_model("authentication", "User")

    email = os.environ.get("DJANGO_SUPERUSER_EMAIL", "admin@inspekta.com")
    password = os.environ.get("DJANGO_SUPERUSER_PASSWORD")
    first_name = os.environ.get("DJANGO_SUPERUSER_FIRST_NAME", "inspekta")
    last_name = os.environ.get("DJANGO_SUPERUSER_LAST_NAME", "admin")

    if not password:
        return  # skip silently if no password set

    if not User.objects.filter(email=email).exists():
        User.objects.create(
            email=email,
            password=make_password(password),
            first_name=first_name,
            last_name=last_name,
            role="PLATFORM_ADMIN",
            verification_status="VERIFIED",
            is_staff=True,
            is_superuser=True,
        )


class Migration(migrations.Migration):

    dependencies = [
        ("authentication", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(create_platform_admin, migrations.RunPython.noop),
    ]
