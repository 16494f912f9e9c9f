from __future__ import annotations

import random
from datetime import date

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils.text import slugify

from tourcore.apps.accounts.models import Player
from tourcore.apps.events.models import (
    Competition,
    Course,
    CourseTee,
    PointTemplate,
    Tour,
    TourCategory,
    TourEnrollment,
)
from tourcore.apps.registration.services import groups
from tourcore.apps.scoring.models import Participant
from tourcore.apps.scoring.services import ledger

DEMO_PARS = [4, 4, 3, 5, 4, 4, 3, 4, 5, 4, 3, 4, 5, 4, 4, 3, 4, 5]
DEMO_STROKE_INDEX = [7, 15, 3, 11, 1, 9, 5, 17, 13, 8, 16, 4, 12, 2, 10, 6, 18, 14]
DEMO_POINTS = {"1": 100, "2": 80, "3": 65, "4": 55, "5": 45, "default": 20}


def ensure_demo_user(username: str, email: str, *, staff: bool = False):
    User = get_user_model()
    user, created = User.objects.get_or_create(username=username, defaults={"email": email, "is_staff": staff})
    if created:
        user.set_password("Pass1234!")
        user.save()
    return user


class Command(BaseCommand):
    help = "Crea un tour DEMO con cancha, tees, categorías, jugadores inscritos, una competición y (opcional) grupos y tarjetas."

    def add_arguments(self, parser):
        parser.add_argument("--tour", type=str, default="Tour Demo")
        parser.add_argument("--slug", type=str, default="")
        parser.add_argument("--players", type=int, default=8)
        parser.add_argument("--seed-groups", action="store_true")
        parser.add_argument("--seed-scores", action="store_true", help="Implica --seed-groups")
        parser.add_argument("--finalize", action="store_true", help="Finaliza la competición al terminar")

    @transaction.atomic
    def handle(self, *args, **opts):
        name: str = opts["tour"]
        slug: str = opts["slug"] or slugify(name)
        players_count: int = max(1, opts["players"])
        seed_scores: bool = bool(opts["seed_scores"])
        seed_groups: bool = bool(opts["seed_groups"]) or seed_scores

        if Tour.objects.filter(slug=slug).exists():
            raise CommandError(f"Ya existe un tour con slug='{slug}'")

        # 1) Cancha y tees
        course = Course.objects.create(name=f"{name} Golf Club", pars=DEMO_PARS, stroke_index=DEMO_STROKE_INDEX)
        yellow = CourseTee.objects.create(course=course, name="Amarillo", color="yellow", course_rating=71.2, slope_rating=128)
        red = CourseTee.objects.create(course=course, name="Rojo", color="red", course_rating=69.8, slope_rating=121)
        self.stdout.write(self.style.SUCCESS(f"✓ Cancha creada: {course.name} (par {course.total_par})"))

        # 2) Tour, plantilla de puntos y categorías
        tour = Tour.objects.create(name=name, slug=slug, scoring_mode="both")
        template = PointTemplate.objects.create(name=f"{name} · puntos", tour=tour, points_structure=DEMO_POINTS)
        tour.point_template = template
        tour.save(update_fields=["point_template"])
        men = TourCategory.objects.create(tour=tour, name="Caballeros", sort_order=1)
        women = TourCategory.objects.create(tour=tour, name="Damas", sort_order=2)
        self.stdout.write(self.style.SUCCESS(f"✓ Tour creado: {slug}"))

        # 3) Jugadores inscritos
        rng = random.Random(42)
        players = []
        for idx in range(1, players_count + 1):
            uname = f"golfer_{slug}_{idx}"
            user = ensure_demo_user(uname, f"{uname}@example.com")
            player = Player.objects.create(
                user=user,
                name=f"Golfer {idx:02d}",
                email=user.email,
                handicap_index=round(rng.uniform(2, 28), 1),
            )
            TourEnrollment.objects.create(tour=tour, player=player, category=women if idx % 3 == 0 else men)
            players.append(player)
        self.stdout.write(self.style.SUCCESS(f"✓ {len(players)} jugadores inscritos"))

        # 4) Competición (damas desde tee rojo)
        competition = Competition.objects.create(
            name=f"{name} · Fecha 1",
            date=date.today(),
            course=course,
            tee=yellow,
            tour=tour,
            scoring_mode="both",
        )
        competition.category_tees.create(category=women, tee=red)
        self.stdout.write(self.style.SUCCESS(f"✓ Competición creada: {competition.name} (id={competition.pk})"))

        if not seed_groups:
            return

        # 5) Grupos de hasta 4: el primero crea, el resto se suma
        for start in range(0, len(players), 4):
            chunk = players[start:start + 4]
            groups.register(competition.pk, chunk[0].pk, groups.MODE_CREATE_GROUP)
            if len(chunk) > 1:
                groups.add_to_group(competition.pk, chunk[0].pk, [p.pk for p in chunk[1:]])
        self.stdout.write(self.style.SUCCESS("✓ Grupos armados"))

        # 6) Tarjetas
        if seed_scores:
            marker = ensure_demo_user(f"marker_{slug}", f"marker_{slug}@example.com", staff=True)
            for participant in Participant.objects.filter(competition=competition):
                groups.start_playing(competition.pk, participant.player_id)
                for hole, par in enumerate(DEMO_PARS, start=1):
                    shots = max(1, par + rng.choice((-1, 0, 0, 1, 1, 2)))
                    ledger.update_score(participant.pk, hole, shots, marker)
                groups.finish_playing(competition.pk, participant.player_id)
            self.stdout.write(self.style.SUCCESS("✓ Tarjetas cargadas"))

        if opts["finalize"]:
            from tourcore.apps.results.services.finalize import finalize

            rows = finalize(competition.pk)
            self.stdout.write(self.style.SUCCESS(f"✓ Competición finalizada ({len(rows)} resultados)"))
