import csv
from io import StringIO
from pathlib import Path
from tempfile import TemporaryDirectory

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from openpyxl import Workbook

from tourcore.apps.accounts.models import Player
from tourcore.apps.core.tests.factories import make_player, make_tour
from tourcore.apps.events.models import TourCategory, TourEnrollment


def write_sheet(path: Path, rows, header=("name", "email", "handicap_index", "category", "playing_handicap")):
    wb = Workbook()
    ws = wb.active
    ws.title = "Jugadores"
    ws.append(list(header))
    for row in rows:
        ws.append(list(row))
    wb.save(path)


class ImportPlayersXlsxTests(TestCase):
    def setUp(self):
        self.tour = make_tour("Gira")
        self.ladies = TourCategory.objects.create(tour=self.tour, name="Damas")
        self.tmp = TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.xlsx = Path(self.tmp.name) / "jugadores.xlsx"

    def run_import(self, *extra):
        out = StringIO()
        call_command("import_players_xlsx", str(self.xlsx), "--tour-slug", self.tour.slug, *extra, stdout=out)
        return out.getvalue()

    def test_creates_players_and_enrollments(self):
        write_sheet(self.xlsx, [
            ("Lucía Pérez", "lucia@example.com", "12,4", "damas", 10),
            ("Marco Díaz", "", "+1.5", "", None),
        ])
        output = self.run_import()

        self.assertIn("Filas procesadas: 2", output)
        lucia = Player.objects.get(name="Lucía Pérez")
        self.assertEqual(lucia.handicap_index, 12.4)
        enrollment = TourEnrollment.objects.get(tour=self.tour, player=lucia)
        self.assertEqual(enrollment.category, self.ladies)
        self.assertEqual(enrollment.playing_handicap, 10.0)
        self.assertEqual(Player.objects.get(name="Marco Díaz").handicap_index, -1.5)

    def test_updates_existing_player(self):
        existing = make_player("Lucía Pérez", handicap=20.0, with_user=False)
        write_sheet(self.xlsx, [("lucía pérez", "", 18.2, "", None)])
        self.run_import()
        existing.refresh_from_db()
        self.assertEqual(existing.handicap_index, 18.2)
        self.assertEqual(Player.objects.count(), 1)
        self.assertTrue(TourEnrollment.objects.filter(tour=self.tour, player=existing).exists())

    def test_bad_rows_are_reported_and_skipped(self):
        write_sheet(self.xlsx, [
            ("Ana", "", "abc", "", None),
            ("Beto", "", 9, "Juveniles", None),
            ("Caro", "", 9, "", None),
        ])
        report = Path(self.tmp.name) / "reporte.csv"
        output = self.run_import("--report", str(report))

        self.assertIn("ERRORES: 2", output)
        self.assertEqual(list(Player.objects.values_list("name", flat=True)), ["Caro"])
        with report.open(encoding="utf-8") as fp:
            rows = list(csv.DictReader(fp))
        self.assertEqual([r["status"] for r in rows], ["ERROR", "ERROR", "OK"])

    def test_create_users(self):
        write_sheet(self.xlsx, [("José Núñez", "jose@example.com", 7, "", None)])
        self.run_import("--create-users")
        player = Player.objects.get(name="José Núñez")
        self.assertEqual(player.user.username, "jose_nunez")

    def test_dry_run_writes_nothing(self):
        write_sheet(self.xlsx, [("Ana", "", 9, "", None)])
        output = self.run_import("--dry-run")
        self.assertIn("Dry-run", output)
        self.assertFalse(Player.objects.exists())
        self.assertFalse(TourEnrollment.objects.exists())

    def test_missing_columns(self):
        write_sheet(self.xlsx, [("Ana", 9)], header=("nombre", "handicap_index"))
        with self.assertRaises(CommandError):
            self.run_import()

    def test_unknown_tour(self):
        write_sheet(self.xlsx, [("Ana", "", 9, "", None)])
        with self.assertRaises(CommandError):
            call_command("import_players_xlsx", str(self.xlsx), "--tour-slug", "no-existe", stdout=StringIO())
