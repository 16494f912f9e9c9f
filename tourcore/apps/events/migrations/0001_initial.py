import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160)),
                ("pars", models.JSONField(default=list)),
                ("stroke_index", models.JSONField(blank=True, default=list)),
            ],
            options={
                "ordering": ("name", "id"),
            },
        ),
        migrations.CreateModel(
            name="CourseTee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=60)),
                ("color", models.CharField(blank=True, max_length=30)),
                ("course_rating", models.FloatField(blank=True, null=True, help_text="Si está vacío no se aplica el ajuste (course rating − par).")),
                ("slope_rating", models.PositiveIntegerField(default=113)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="tees", to="events.course")),
            ],
            options={
                "ordering": ("course", "name"),
                "unique_together": {("course", "name")},
            },
        ),
        migrations.CreateModel(
            name="PointTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("points_structure", models.JSONField(default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ("name", "id"),
            },
        ),
        migrations.CreateModel(
            name="Tour",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160)),
                ("slug", models.SlugField(unique=True)),
                ("description", models.TextField(blank=True)),
                ("scoring_mode", models.CharField(choices=[("gross", "Gross"), ("net", "Neto"), ("both", "Gross y neto")], default="gross", max_length=8)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("point_template", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="events.pointtemplate")),
            ],
            options={
                "ordering": ("name",),
            },
        ),
        migrations.AddField(
            model_name="pointtemplate",
            name="tour",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="point_templates", to="events.tour"),
        ),
        migrations.CreateModel(
            name="TourCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("description", models.TextField(blank=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                ("tour", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="categories", to="events.tour")),
            ],
            options={
                "ordering": ("sort_order", "name"),
                "unique_together": {("tour", "name")},
            },
        ),
        migrations.CreateModel(
            name="TourEnrollment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("playing_handicap", models.FloatField(blank=True, null=True, help_text="Si está vacío se usa el handicap index del jugador.")),
                ("status", models.CharField(choices=[("active", "Activa"), ("withdrawn", "Retirada")], default="active", max_length=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="enrollments", to="events.tourcategory")),
                ("player", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="tour_enrollments", to="accounts.player")),
                ("tour", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="enrollments", to="events.tour")),
            ],
            options={
                "ordering": ("tour", "player__name"),
                "unique_together": {("tour", "player")},
            },
        ),
        migrations.CreateModel(
            name="Competition",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160)),
                ("date", models.DateField(blank=True, null=True)),
                ("scoring_mode", models.CharField(choices=[("gross", "Gross"), ("net", "Neto"), ("both", "Gross y neto")], default="gross", max_length=8)),
                ("points_multiplier", models.FloatField(default=1)),
                ("start_mode", models.CharField(choices=[("scheduled", "Horarios asignados"), ("open", "Salida libre")], default="scheduled", max_length=12)),
                ("open_start", models.DateTimeField(blank=True, null=True)),
                ("open_end", models.DateTimeField(blank=True, null=True)),
                ("is_results_final", models.BooleanField(default=False)),
                ("results_finalized_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="competitions", to="events.course")),
                ("tee", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="competitions", to="events.coursetee")),
                ("tour", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="competitions", to="events.tour")),
            ],
            options={
                "ordering": ("-date", "name"),
            },
        ),
        migrations.CreateModel(
            name="CompetitionCategoryTee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="competition_tees", to="events.tourcategory")),
                ("competition", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="category_tees", to="events.competition")),
                ("tee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="+", to="events.coursetee")),
            ],
            options={
                "unique_together": {("competition", "category")},
            },
        ),
    ]
