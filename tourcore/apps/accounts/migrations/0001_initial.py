import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Player",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("handicap_index", models.FloatField(blank=True, null=True, help_text="Handicap index WHS (negativo = handicap plus).")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="player", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("name", "id"),
            },
        ),
    ]
