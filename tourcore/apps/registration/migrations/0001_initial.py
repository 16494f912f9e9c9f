import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("events", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="TeeTime",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("teetime", models.CharField(blank=True, max_length=20)),
                ("start_hole", models.PositiveSmallIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("competition", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="tee_times", to="events.competition")),
            ],
            options={
                "ordering": ("competition", "teetime", "id"),
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("looking_for_group", "Buscando grupo"), ("registered", "Inscrito"), ("playing", "Jugando"), ("finished", "Terminó"), ("withdrawn", "Retirado")], max_length=20)),
                ("registered_at", models.DateTimeField(auto_now_add=True)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("finished_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("version", models.PositiveIntegerField(default=0)),
                ("competition", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to="events.competition")),
                ("enrollment", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="registrations", to="events.tourenrollment")),
                ("group_created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="accounts.player")),
                ("player", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to="accounts.player")),
                ("tee_time", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="registrations", to="registration.teetime")),
            ],
            options={
                "ordering": ("registered_at", "id"),
                "unique_together": {("competition", "player")},
            },
        ),
    ]
