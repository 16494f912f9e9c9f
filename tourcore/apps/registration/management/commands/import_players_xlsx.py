from __future__ import annotations

import csv
import re
import unicodedata
from pathlib import Path
from typing import Optional

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils.crypto import get_random_string

from openpyxl import load_workbook

from tourcore.apps.accounts.models import Player
from tourcore.apps.events.models import Tour, TourCategory, TourEnrollment


# ======================
# Utilidades de nombres
# ======================

def _strip_accents(s: str) -> str:
    return "".join(c for c in unicodedata.normalize("NFKD", s) if not unicodedata.combining(c))


def _norm(s: str) -> str:
    return _strip_accents((s or "").strip().lower())


def _to_username_slug(full_name: str) -> str:
    s = _norm(full_name)
    s = re.sub(r"[^a-z0-9]+", "_", s).strip("_")
    return s or "player"


def _ensure_unique_username(base: str) -> str:
    User = get_user_model()
    candidate = base
    i = 1
    while User.objects.filter(username=candidate).exists():
        candidate = f"{base}{i}"
        i += 1
    return candidate


def _parse_handicap(value) -> Optional[float]:
    """Acepta 12.4, '12,4' o '+1.2' (handicap plus → negativo)."""
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    s = str(value).strip().replace(",", ".")
    plus = s.startswith("+")
    try:
        hi = float(s.lstrip("+"))
    except ValueError:
        raise CommandError(f"Handicap inválido: {value!r}")
    return -hi if plus else hi


# ======================
# Jugadores / categorías
# ======================

def _get_or_create_player(name: str, email: str, handicap: Optional[float]) -> tuple[Player, bool]:
    player = None
    if email:
        player = Player.objects.filter(email__iexact=email).first()
    if player is None:
        player = Player.objects.filter(name__iexact=name).first()
    if player is None:
        return Player.objects.create(name=name, email=email, handicap_index=handicap), True

    changed = []
    if handicap is not None and player.handicap_index != handicap:
        player.handicap_index = handicap
        changed.append("handicap_index")
    if email and not player.email:
        player.email = email
        changed.append("email")
    if changed:
        player.save(update_fields=changed)
    return player, False


def _create_user_for(player: Player) -> Optional[str]:
    """Crea usuario con contraseña aleatoria si el jugador no tiene. Devuelve 'user:pass'."""
    if player.user_id:
        return None
    User = get_user_model()
    username = _ensure_unique_username(_to_username_slug(player.name))
    password = get_random_string(10)
    user = User.objects.create_user(username=username, email=player.email, password=password)
    player.user = user
    player.save(update_fields=["user"])
    return f"{username}:{password}"


def _get_category(tour: Tour, name: str) -> Optional[TourCategory]:
    if not name:
        return None
    for c in TourCategory.objects.filter(tour=tour):
        if _norm(c.name) == _norm(name):
            return c
    raise CommandError(f"Categoría '{name}' no existe en el tour '{tour.slug}'.")


# ======================
# Importador
# ======================

# Opcionales: email, category, playing_handicap
REQUIRED_COLUMNS = ("name", "handicap_index")


class Command(BaseCommand):
    help = "Importa jugadores desde un .xlsx y los inscribe en un tour (categoría y handicap de juego opcionales)."

    def add_arguments(self, parser):
        parser.add_argument("xlsx_path", type=str, help="Ruta al archivo .xlsx con los jugadores")
        parser.add_argument("--sheet", type=str, default=None, help="Nombre de la hoja (por defecto: primera)")
        parser.add_argument("--tour-slug", required=True, help="Slug del tour destino")
        parser.add_argument("--create-users", action="store_true", help="Crea usuario con contraseña aleatoria")
        parser.add_argument("--report", type=str, default=None, help="Ruta del reporte CSV (opcional)")
        parser.add_argument("--dry-run", action="store_true", help="Simula sin escribir cambios")

    def handle(self, *args, **options):
        xlsx_path = Path(options["xlsx_path"])
        sheet_name = options.get("sheet")
        tour_slug = options["tour_slug"]
        dry_run = options.get("dry_run", False)
        create_users = options.get("create_users", False)

        if not xlsx_path.exists():
            raise CommandError(f"Archivo no encontrado: {xlsx_path}")

        try:
            tour = Tour.objects.get(slug=tour_slug)
        except Tour.DoesNotExist:
            raise CommandError(f"Tour '{tour_slug}' no existe.")

        wb = load_workbook(filename=str(xlsx_path), data_only=True)
        ws = wb[sheet_name] if sheet_name else wb.worksheets[0]

        # Validar cabecera (orden libre)
        header_cells = [c.value for c in next(ws.iter_rows(min_row=1, max_row=1))]
        headers = [str(h).strip().lower() if h is not None else "" for h in header_cells]
        missing = [c for c in REQUIRED_COLUMNS if c not in headers]
        if missing:
            raise CommandError(f"Faltan columnas {missing}. Cabecera encontrada: {headers}")

        report_rows: list[list] = []
        total = ok = errs = 0

        for idx, row in enumerate(ws.iter_rows(min_row=2), start=2):
            values = [cell.value for cell in row]
            data = dict(zip(headers, values))
            name = str(data.get("name") or "").strip()
            if not name:
                continue
            total += 1
            email = str(data.get("email") or "").strip().lower()

            status = "OK"
            detail = ""
            try:
                handicap = _parse_handicap(data.get("handicap_index"))
                playing = _parse_handicap(data.get("playing_handicap"))
                category = _get_category(tour, str(data.get("category") or "").strip())

                if dry_run:
                    detail = "simulado"
                else:
                    with transaction.atomic():
                        player, created = _get_or_create_player(name, email, handicap)
                        TourEnrollment.objects.update_or_create(
                            tour=tour,
                            player=player,
                            defaults={
                                "category": category,
                                "playing_handicap": playing,
                                "status": "active",
                            },
                        )
                        creds = _create_user_for(player) if create_users else None
                    detail = "creado" if created else "actualizado"
                    if creds:
                        detail += f" ({creds})"
            except CommandError as e:
                status = "ERROR"
                detail = str(e)
                errs += 1
            else:
                ok += 1
            report_rows.append([idx, status, name, email, detail])

        if options.get("report") and not dry_run:
            report_path = Path(options["report"])
            with report_path.open("w", newline="", encoding="utf-8") as fp:
                writer = csv.writer(fp)
                writer.writerow(["row", "status", "name", "email", "detail"])
                writer.writerows(report_rows)
            self.stdout.write(self.style.SUCCESS(f"Reporte: {report_path}"))

        self.stdout.write(self.style.SUCCESS(f"Filas procesadas: {total}"))
        self.stdout.write(self.style.SUCCESS(f"OK: {ok}  ·  ERRORES: {errs}"))
        if dry_run:
            self.stdout.write(self.style.WARNING("Dry-run: no se crearon jugadores ni inscripciones."))
