import django.db.models.deletion
import django.db.models.expressions
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("events", "0001_initial"),
        ("scoring", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="FinalResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("player_name", models.CharField(max_length=160)),
                ("scoring_type", models.CharField(choices=[("gross", "Gross"), ("net", "Neto")], max_length=8)),
                ("position", models.PositiveIntegerField(blank=True, null=True)),
                ("points", models.IntegerField(default=0)),
                ("gross_total", models.IntegerField(default=0)),
                ("net_total", models.IntegerField(blank=True, null=True)),
                ("handicap_strokes", models.IntegerField(default=0)),
                ("holes_played", models.PositiveSmallIntegerField(default=0)),
                ("is_complete", models.BooleanField(default=False)),
                ("is_dq", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="final_results", to="events.tourcategory")),
                ("competition", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="final_results", to="events.competition")),
                ("participant", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="final_results", to="scoring.participant")),
                ("player", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="final_results", to="accounts.player")),
            ],
            options={
                "ordering": ("competition_id", "scoring_type", "category_id", django.db.models.expressions.OrderBy(django.db.models.expressions.F("position"), nulls_last=True), "player_name"),
            },
        ),
        migrations.AddConstraint(
            model_name="finalresult",
            constraint=models.UniqueConstraint(fields=("competition", "player", "scoring_type", "category"), name="final_result_unique_scope"),
        ),
        migrations.AddConstraint(
            model_name="finalresult",
            constraint=models.UniqueConstraint(condition=models.Q(("category__isnull", True)), fields=("competition", "player", "scoring_type"), name="final_result_unique_overall"),
        ),
    ]
