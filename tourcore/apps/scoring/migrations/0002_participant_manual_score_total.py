from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("scoring", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="participant",
            name="manual_score_total",
            field=models.PositiveSmallIntegerField(blank=True, null=True),
        ),
    ]
