from django.test import TestCase

from tourcore.apps.core.errors import AlreadyFinalizedError, ConflictError
from tourcore.apps.core.signals import competition_finalized
from tourcore.apps.core.tests.factories import (
    PARS_18,
    enroll,
    make_competition,
    make_player,
    make_tour,
    make_user,
    scores_for,
)
from tourcore.apps.events.models import PointTemplate, TourCategory
from tourcore.apps.leaderboard.services.competition import competition_leaderboard
from tourcore.apps.leaderboard.services.tour import tour_standings
from tourcore.apps.registration.services import groups
from tourcore.apps.results.models import FinalResult
from tourcore.apps.results.services.finalize import finalize, reopen
from tourcore.apps.scoring.models import Participant
from tourcore.apps.scoring.services import ledger


def play(competition, player, scores):
    groups.register(competition.pk, player.pk, "solo")
    Participant.objects.filter(competition=competition, player=player).update(scores=scores)


class FinalizeTests(TestCase):
    def setUp(self):
        self.tour = make_tour(scoring_mode="both")
        PointTemplate.objects.create(
            name="Puntos", tour=self.tour, points_structure={"1": 100, "2": 80, "default": 50},
        )
        self.ana = make_player("Ana", handicap=0.0)
        self.beto = make_player("Beto", handicap=10.0)
        self.caro = make_player("Caro", handicap=5.0)
        for p in (self.ana, self.beto, self.caro):
            enroll(self.tour, p)

        self.competition = make_competition(tour=self.tour, scoring_mode="both")
        play(self.competition, self.ana, list(PARS_18))               # 72, neto 72
        play(self.competition, self.beto, scores_for(PARS_18, {1: 1}))  # 73, neto 63
        play(self.competition, self.caro, PARS_18[:10] + [0] * 8)     # incompleta

    def rows(self, scoring_type, category_id=None):
        return list(FinalResult.objects.filter(
            competition=self.competition, scoring_type=scoring_type, category_id=category_id,
        ))

    def test_snapshot_per_scoring_type(self):
        finalize(self.competition.pk)
        self.competition.refresh_from_db()
        self.assertTrue(self.competition.is_results_final)
        self.assertIsNotNone(self.competition.results_finalized_at)

        gross = self.rows("gross")
        self.assertEqual([(r.player_name, r.position, r.points) for r in gross], [
            ("Ana", 1, 100),
            ("Beto", 2, 80),
            ("Caro", None, 0),
        ])
        net = self.rows("net")
        self.assertEqual([(r.player_name, r.position) for r in net], [("Beto", 1), ("Ana", 2), ("Caro", None)])
        self.assertEqual(net[0].net_total, 63)
        self.assertEqual(net[0].handicap_strokes, 10)
        self.assertFalse(net[2].is_complete)
        self.assertEqual(net[2].holes_played, 10)

    def test_every_entry_gets_a_row_including_dq(self):
        Participant.objects.filter(competition=self.competition, player=self.ana).update(is_dq=True)
        finalize(self.competition.pk)
        gross = self.rows("gross")
        self.assertEqual(len(gross), 3)
        dq = [r for r in gross if r.is_dq]
        self.assertEqual([(r.player_name, r.position, r.points) for r in dq], [("Ana", None, 0)])

    def test_manual_total_ranks_a_paper_card(self):
        ledger.set_manual_score(
            Participant.objects.get(competition=self.competition, player=self.caro).pk, 70,
        )
        finalize(self.competition.pk)

        gross = self.rows("gross")
        self.assertEqual([(r.player_name, r.position, r.points) for r in gross], [
            ("Caro", 1, 100),
            ("Ana", 2, 80),
            ("Beto", 3, 50),
        ])
        self.assertTrue(gross[0].is_complete)
        self.assertEqual(gross[0].gross_total, 70)
        net = self.rows("net")
        self.assertEqual([(r.player_name, r.net_total) for r in net], [("Beto", 63), ("Caro", 65), ("Ana", 72)])

    def test_finalize_twice_is_rejected_and_unchanged(self):
        finalize(self.competition.pk)
        before = list(FinalResult.objects.values_list("pk", "points"))
        with self.assertRaises(AlreadyFinalizedError):
            finalize(self.competition.pk)
        self.assertEqual(list(FinalResult.objects.values_list("pk", "points")), before)

    def test_finalized_event(self):
        received = []

        def listener(sender, event, **kwargs):
            received.append(event)

        competition_finalized.connect(listener)
        self.addCleanup(competition_finalized.disconnect, listener)
        with self.captureOnCommitCallbacks(execute=True):
            finalize(self.competition.pk)
        self.assertEqual(received[0].results_count, 6)
        self.assertEqual(received[0].tour_id, self.tour.pk)

    def test_rows_are_immutable_while_final(self):
        finalize(self.competition.pk)
        row = self.rows("gross")[0]
        row.points = 999
        with self.assertRaises(AlreadyFinalizedError):
            row.save()
        with self.assertRaises(AlreadyFinalizedError):
            row.delete()
        with self.assertRaises(AlreadyFinalizedError):
            FinalResult.objects.filter(competition=self.competition).delete()
        self.assertEqual(FinalResult.objects.get(pk=row.pk).points, 100)

    def test_reopen_discards_rows(self):
        finalize(self.competition.pk)
        competition = reopen(self.competition.pk)
        self.assertFalse(competition.is_results_final)
        self.assertFalse(FinalResult.objects.filter(competition=self.competition).exists())

        # Se puede volver a corregir y finalizar
        groups.start_playing(self.competition.pk, self.caro.pk)
        finalize(self.competition.pk)
        self.assertEqual(len(self.rows("gross")), 3)

    def test_reopen_requires_final(self):
        with self.assertRaises(ConflictError):
            reopen(self.competition.pk)

    def test_leaderboard_serves_frozen_rows(self):
        finalize(self.competition.pk)
        # Un cambio posterior en la tarjeta no altera la foto
        Participant.objects.filter(competition=self.competition, player=self.beto).update(scores=[3] * 18)

        board = competition_leaderboard(self.competition.pk, "gross")
        self.assertEqual(board["source"], "final")
        self.assertTrue(board["is_final"])
        self.assertEqual([e["name"] for e in board["entries"]], ["Ana", "Beto", "Caro"])
        self.assertEqual(board["entries"][1]["gross_total"], 73)


class CategoryFinalizeTests(TestCase):
    def setUp(self):
        self.tour = make_tour()
        self.men = TourCategory.objects.create(tour=self.tour, name="Caballeros", sort_order=1)
        self.women = TourCategory.objects.create(tour=self.tour, name="Damas", sort_order=2)
        self.players = {
            "Ana": (make_player("Ana"), self.women, {}),
            "Bea": (make_player("Bea"), self.women, {5: 1}),
            "Carlos": (make_player("Carlos"), self.men, {2: -1}),
            "Dani": (make_player("Dani"), self.men, {2: 2}),
        }
        self.competition = make_competition(tour=self.tour)
        for player, category, deltas in self.players.values():
            enroll(self.tour, player, category)
            play(self.competition, player, scores_for(PARS_18, deltas))

    def test_category_scopes_rank_independently(self):
        finalize(self.competition.pk)
        overall = FinalResult.objects.filter(competition=self.competition, category__isnull=True)
        self.assertEqual([r.player_name for r in overall], ["Carlos", "Ana", "Bea", "Dani"])

        women = FinalResult.objects.filter(competition=self.competition, category=self.women)
        self.assertEqual([(r.player_name, r.position) for r in women], [("Ana", 1), ("Bea", 2)])
        men = FinalResult.objects.filter(competition=self.competition, category=self.men)
        self.assertEqual([(r.player_name, r.position) for r in men], [("Carlos", 1), ("Dani", 2)])

    def test_default_formula_uses_category_field_size(self):
        finalize(self.competition.pk)
        # N = 2 por categoría: 1.º = 4, 2.º = 2
        women = FinalResult.objects.filter(competition=self.competition, category=self.women)
        self.assertEqual([r.points for r in women], [4, 2])
        # N = 4 en la general: 1.º = 6
        self.assertEqual(
            FinalResult.objects.get(competition=self.competition, category__isnull=True, position=1).points, 6,
        )

    def test_live_leaderboard_filtered_by_category(self):
        board = competition_leaderboard(self.competition.pk, category_id=self.men.pk)
        self.assertEqual(board["source"], "live")
        self.assertEqual([e["name"] for e in board["entries"]], ["Carlos", "Dani"])


class TourStandingsTests(TestCase):
    def setUp(self):
        self.tour = make_tour()
        PointTemplate.objects.create(name="Base", tour=self.tour, points_structure={"1": 100, "2": 80, "3": 65})
        self.ana = make_player("Ana")
        self.beto = make_player("Beto")
        self.caro = make_player("Caro")
        for p in (self.ana, self.beto, self.caro):
            enroll(self.tour, p)

    def play_round(self, results, **kwargs):
        competition = make_competition(tour=self.tour, **kwargs)
        for player, deltas in results:
            play(competition, player, scores_for(PARS_18, deltas))
        finalize(competition.pk)
        return competition

    def test_sums_points_of_final_competitions(self):
        self.play_round([(self.ana, {}), (self.beto, {1: 1}), (self.caro, {1: 2})])
        self.play_round([(self.ana, {1: 2}), (self.beto, {}), (self.caro, {1: 1})], points_multiplier=2)
        # Competición abierta: no cuenta
        open_comp = make_competition(tour=self.tour)
        play(open_comp, self.caro, scores_for(PARS_18, {1: -1}))

        table = tour_standings(self.tour.pk)
        self.assertEqual(table["total_competitions"], 2)
        self.assertEqual(
            [(s["name"], s["total_points"], s["position"]) for s in table["standings"]],
            [("Beto", 280, 1), ("Ana", 230, 2), ("Caro", 225, 3)],
        )
        self.assertEqual(table["standings"][0]["competitions_played"], 2)

    def test_reopened_competition_stops_counting(self):
        competition = self.play_round([(self.ana, {}), (self.beto, {1: 1})])
        reopen(competition.pk)
        self.assertEqual(tour_standings(self.tour.pk)["standings"], [])


class ResultsApiTests(TestCase):
    def setUp(self):
        self.competition = make_competition()
        self.player = make_player("Ana")
        play(self.competition, self.player, list(PARS_18))
        self.url = f"/api/competitions/{self.competition.pk}/finalize"

    def test_finalize_is_admin_only(self):
        self.assertEqual(self.client.post(self.url).status_code, 401)

        self.client.force_login(self.player.user)
        resp = self.client.post(self.url)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"]["kind"], "forbidden")

        self.client.force_login(make_user("admin", staff=True))
        resp = self.client.post(self.url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["results_count"], 1)

        resp = self.client.post(self.url)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"]["kind"], "already_finalized")

    def test_results_endpoint(self):
        finalize(self.competition.pk)
        resp = self.client.get(f"/api/competitions/{self.competition.pk}/results?scoring_type=gross")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["results"][0]["name"], "Ana")
        bad = self.client.get(f"/api/competitions/{self.competition.pk}/results?scoring_type=stableford")
        self.assertEqual(bad.status_code, 400)

    def test_reopen_endpoint(self):
        finalize(self.competition.pk)
        self.client.force_login(make_user("admin2", staff=True))
        resp = self.client.post(f"/api/competitions/{self.competition.pk}/reopen")
        self.assertEqual(resp.json(), {"competition_id": self.competition.pk, "is_final": False})
