import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("events", "0001_initial"),
        ("registration", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Participant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tee_order", models.PositiveSmallIntegerField(default=1)),
                ("scores", models.JSONField(blank=True, default=list)),
                ("is_locked", models.BooleanField(default=False)),
                ("locked_at", models.DateTimeField(blank=True, null=True)),
                ("is_dq", models.BooleanField(default=False)),
                ("handicap_index", models.FloatField(blank=True, null=True, help_text="Handicap al momento de entrar al grupo.")),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("competition", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="participants", to="events.competition")),
                ("player", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="participations", to="accounts.player")),
                ("registration", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="participant", to="registration.registration")),
                ("tee_time", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="participants", to="registration.teetime")),
            ],
            options={
                "ordering": ("tee_time", "tee_order", "id"),
                "unique_together": {("competition", "player")},
            },
        ),
    ]
