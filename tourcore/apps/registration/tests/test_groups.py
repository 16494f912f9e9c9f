from datetime import timedelta

from django.test import TestCase, override_settings
from django.utils import timezone

from tourcore.apps.core.errors import (
    AlreadyFinalizedError,
    AuthorizationError,
    ConflictError,
    LockedError,
    NotFoundError,
    ValidationError,
)
from tourcore.apps.core.signals import RegistrationChanged, registration_changed
from tourcore.apps.core.tests.factories import enroll, make_competition, make_player, make_tour
from tourcore.apps.registration.models import Registration, TeeTime
from tourcore.apps.registration.services import groups
from tourcore.apps.scoring.models import Participant
from tourcore.apps.scoring.services import ledger


class GroupFormationTests(TestCase):
    def setUp(self):
        self.competition = make_competition()
        self.cid = self.competition.pk
        self.p = make_player("Pablo", handicap=12.0)
        self.q = make_player("Quique", handicap=5.0)
        self.r = make_player("Rita")

    def reg(self, player):
        return Registration.objects.get(competition=self.competition, player=player)

    def test_looking_for_group_then_added(self):
        groups.register(self.cid, self.p.pk, "looking_for_group")
        groups.register(self.cid, self.q.pk, "create_group")

        lfg_before = [r["player_id"] for r in groups.list_available_players(self.cid) if r["status"] == "looking_for_group"]
        self.assertEqual(lfg_before, [self.p.pk])

        groups.add_to_group(self.cid, self.q.pk, [self.p.pk])

        p_reg, q_reg = self.reg(self.p), self.reg(self.q)
        self.assertEqual(p_reg.status, "registered")
        self.assertEqual(p_reg.tee_time_id, q_reg.tee_time_id)
        self.assertEqual(p_reg.group_created_by_id, self.q.pk)
        listed = {r["player_id"]: r["status"] for r in groups.list_available_players(self.cid)}
        self.assertEqual(listed[self.p.pk], "in_group")
        self.assertNotIn("looking_for_group", listed.values())

        card = Participant.objects.get(competition=self.competition, player=self.p)
        self.assertEqual(card.tee_time_id, q_reg.tee_time_id)
        self.assertEqual(card.handicap_index, 12.0)
        self.assertEqual(card.tee_order, 2)

    def test_solo_allocates_group_and_card(self):
        reg = groups.register(self.cid, self.p.pk, "solo")
        self.assertEqual(reg.status, "registered")
        self.assertIsNotNone(reg.tee_time_id)
        self.assertTrue(reg.is_group_creator)
        self.assertTrue(Participant.objects.filter(registration=reg).exists())

    def test_invalid_mode(self):
        with self.assertRaises(ValidationError):
            groups.register(self.cid, self.p.pk, "carpool")

    def test_double_registration_is_conflict(self):
        groups.register(self.cid, self.p.pk, "solo")
        with self.assertRaises(ConflictError):
            groups.register(self.cid, self.p.pk, "looking_for_group")

    def test_withdrawn_player_can_register_again(self):
        groups.register(self.cid, self.p.pk, "looking_for_group")
        groups.withdraw(self.cid, self.p.pk)

        reg = groups.register(self.cid, self.p.pk, "solo")
        self.assertEqual(reg.status, "registered")
        self.assertEqual(Registration.objects.filter(competition=self.competition, player=self.p).count(), 1)
        self.assertTrue(Participant.objects.filter(registration=reg).exists())

    def test_withdrawn_player_can_be_added_to_a_group(self):
        groups.register(self.cid, self.p.pk, "looking_for_group")
        groups.withdraw(self.cid, self.p.pk)
        groups.register(self.cid, self.q.pk, "create_group")

        groups.add_to_group(self.cid, self.q.pk, [self.p.pk])
        self.assertEqual(self.reg(self.p).status, "registered")
        self.assertEqual(self.reg(self.p).tee_time_id, self.reg(self.q).tee_time_id)

    def test_withdrawn_registrants_are_omitted(self):
        groups.register(self.cid, self.p.pk, "looking_for_group")
        groups.register(self.cid, self.q.pk, "looking_for_group")
        groups.withdraw(self.cid, self.p.pk)
        self.assertEqual([r["player_id"] for r in groups.list_available_players(self.cid)], [self.q.pk])

    def test_unknown_competition_or_player(self):
        with self.assertRaises(NotFoundError):
            groups.register(999999, self.p.pk, "solo")
        with self.assertRaises(NotFoundError):
            groups.register(self.cid, 999999, "solo")

    def test_only_creator_may_add(self):
        groups.register(self.cid, self.q.pk, "create_group")
        groups.add_to_group(self.cid, self.q.pk, [self.p.pk])
        groups.register(self.cid, self.r.pk, "looking_for_group")
        with self.assertRaises(AuthorizationError):
            groups.add_to_group(self.cid, self.p.pk, [self.r.pk])

    def test_requester_without_group_is_conflict(self):
        groups.register(self.cid, self.q.pk, "looking_for_group")
        with self.assertRaises(ConflictError):
            groups.add_to_group(self.cid, self.q.pk, [self.p.pk])

    def test_already_grouped_elsewhere_is_conflict(self):
        groups.register(self.cid, self.q.pk, "create_group")
        groups.register(self.cid, self.p.pk, "solo")
        with self.assertRaises(ConflictError):
            groups.add_to_group(self.cid, self.q.pk, [self.p.pk])

    def test_add_is_all_or_nothing(self):
        groups.register(self.cid, self.q.pk, "create_group")
        groups.register(self.cid, self.r.pk, "solo")
        with self.assertRaises(ConflictError):
            groups.add_to_group(self.cid, self.q.pk, [self.p.pk, self.r.pk])
        # Pablo no quedó inscrito ni con tarjeta
        self.assertFalse(Registration.objects.filter(competition=self.competition, player=self.p).exists())
        self.assertFalse(Participant.objects.filter(competition=self.competition, player=self.p).exists())

    def test_unknown_target_is_not_found(self):
        groups.register(self.cid, self.q.pk, "create_group")
        with self.assertRaises(NotFoundError):
            groups.add_to_group(self.cid, self.q.pk, [999999])

    def test_group_size_limit(self):
        groups.register(self.cid, self.q.pk, "create_group")
        others = [make_player(f"Extra {i}") for i in range(4)]
        with self.assertRaises(ConflictError):
            groups.add_to_group(self.cid, self.q.pk, [o.pk for o in others])
        groups.add_to_group(self.cid, self.q.pk, [o.pk for o in others[:3]])
        self.assertEqual(len(groups.get_group(self.cid, self.q.pk)["players"]), 4)

    @override_settings(GOLF_MAX_GROUP_SIZE=2)
    def test_group_size_is_configurable(self):
        groups.register(self.cid, self.q.pk, "create_group")
        groups.add_to_group(self.cid, self.q.pk, [self.p.pk])
        with self.assertRaises(ConflictError):
            groups.add_to_group(self.cid, self.q.pk, [self.r.pk])

    def test_remove_from_group(self):
        groups.register(self.cid, self.q.pk, "create_group")
        groups.add_to_group(self.cid, self.q.pk, [self.p.pk])
        groups.remove_from_group(self.cid, self.q.pk, self.p.pk)

        p_reg = self.reg(self.p)
        self.assertEqual(p_reg.status, "looking_for_group")
        self.assertIsNone(p_reg.tee_time_id)
        self.assertFalse(Participant.objects.filter(competition=self.competition, player=self.p).exists())

    def test_remove_self_is_validation_error(self):
        groups.register(self.cid, self.q.pk, "create_group")
        with self.assertRaises(ValidationError):
            groups.remove_from_group(self.cid, self.q.pk, self.q.pk)

    def test_leave_transfers_ownership_to_earliest_member(self):
        groups.register(self.cid, self.q.pk, "create_group")
        groups.add_to_group(self.cid, self.q.pk, [self.p.pk])
        groups.add_to_group(self.cid, self.q.pk, [self.r.pk])

        groups.leave_group(self.cid, self.q.pk)

        self.assertEqual(self.reg(self.q).status, "looking_for_group")
        self.assertEqual(self.reg(self.p).group_created_by_id, self.p.pk)
        self.assertEqual(self.reg(self.r).group_created_by_id, self.p.pk)
        # Y el nuevo dueño puede gestionar el grupo
        groups.remove_from_group(self.cid, self.p.pk, self.r.pk)

    def test_last_member_leaving_releases_tee_time(self):
        reg = groups.register(self.cid, self.q.pk, "create_group")
        tee_time_id = reg.tee_time_id
        groups.leave_group(self.cid, self.q.pk)
        self.assertFalse(TeeTime.objects.filter(pk=tee_time_id).exists())

    def test_leave_requires_registered(self):
        groups.register(self.cid, self.p.pk, "looking_for_group")
        with self.assertRaises(ConflictError):
            groups.leave_group(self.cid, self.p.pk)

    def test_never_two_active_groups(self):
        groups.register(self.cid, self.q.pk, "create_group")
        groups.register(self.cid, self.r.pk, "create_group")
        groups.add_to_group(self.cid, self.q.pk, [self.p.pk])
        with self.assertRaises(ConflictError):
            groups.add_to_group(self.cid, self.r.pk, [self.p.pk])
        self.assertEqual(Participant.objects.filter(competition=self.competition, player=self.p).count(), 1)

    def test_get_group_sentinel(self):
        self.assertEqual(groups.get_group(self.cid, self.p.pk), {"tee_time_id": None, "players": [], "max_players": 4})
        groups.register(self.cid, self.p.pk, "looking_for_group")
        self.assertIsNone(groups.get_group(self.cid, self.p.pk)["tee_time_id"])


class PlayStateTests(TestCase):
    def setUp(self):
        self.competition = make_competition()
        self.cid = self.competition.pk
        self.p = make_player("Pablo")
        groups.register(self.cid, self.p.pk, "solo")

    def test_start_is_idempotent(self):
        first = groups.start_playing(self.cid, self.p.pk)
        again = groups.start_playing(self.cid, self.p.pk)
        self.assertEqual(first.status, "playing")
        self.assertEqual(again.version, first.version)
        self.assertIsNotNone(again.started_at)

    def test_finish_after_playing(self):
        groups.start_playing(self.cid, self.p.pk)
        reg = groups.finish_playing(self.cid, self.p.pk)
        self.assertEqual(reg.status, "finished")
        self.assertIsNotNone(reg.finished_at)
        with self.assertRaises(ConflictError):
            groups.start_playing(self.cid, self.p.pk)

    def test_finish_without_playing_is_conflict(self):
        with self.assertRaises(ConflictError):
            groups.finish_playing(self.cid, self.p.pk)

    def test_withdraw_with_locked_card_is_rejected(self):
        groups.start_playing(self.cid, self.p.pk)
        card = Participant.objects.get(competition=self.competition, player=self.p)
        ledger.update_score(card.pk, 1, 4, self.p.user)
        ledger.lock(card.pk)

        with self.assertRaises(LockedError):
            groups.withdraw(self.cid, self.p.pk)

        card.refresh_from_db()
        self.assertEqual(card.scores[0], 4)
        self.assertEqual(Registration.objects.get(pk=card.registration_id).status, "playing")

        ledger.unlock(card.pk)
        self.assertEqual(groups.withdraw(self.cid, self.p.pk).status, "withdrawn")
        self.assertFalse(Participant.objects.filter(pk=card.pk).exists())

    def test_leave_with_locked_card_is_rejected(self):
        card = Participant.objects.get(competition=self.competition, player=self.p)
        ledger.lock(card.pk)
        with self.assertRaises(LockedError):
            groups.leave_group(self.cid, self.p.pk)
        self.assertTrue(Participant.objects.filter(pk=card.pk).exists())

    def test_withdraw_keeps_disqualified_card(self):
        groups.start_playing(self.cid, self.p.pk)
        card = Participant.objects.get(competition=self.competition, player=self.p)
        ledger.set_disqualified(card.pk, True)

        groups.withdraw(self.cid, self.p.pk)

        card.refresh_from_db()
        self.assertTrue(card.is_dq)
        self.assertIsNone(card.registration_id)
        self.assertTrue(TeeTime.objects.filter(pk=card.tee_time_id).exists())
        # La tarjeta DQ sigue siendo la suya: no puede abrir otra
        with self.assertRaises(ConflictError):
            groups.register(self.cid, self.p.pk, "solo")
        self.assertEqual(Registration.objects.get(competition=self.competition, player=self.p).status, "withdrawn")

    def test_withdraw_while_playing_drops_card(self):
        groups.start_playing(self.cid, self.p.pk)
        reg = groups.withdraw(self.cid, self.p.pk)
        self.assertEqual(reg.status, "withdrawn")
        self.assertIsNone(reg.tee_time_id)
        self.assertFalse(Participant.objects.filter(competition=self.competition).exists())
        self.assertFalse(TeeTime.objects.filter(competition=self.competition).exists())

    def test_set_status_dispatches(self):
        self.assertEqual(groups.set_status(self.cid, self.p.pk, "playing").status, "playing")
        self.assertEqual(groups.set_status(self.cid, self.p.pk, "finished").status, "finished")

    def test_set_status_rejections(self):
        with self.assertRaises(ValidationError):
            groups.set_status(self.cid, self.p.pk, "napping")
        with self.assertRaises(ConflictError):
            groups.set_status(self.cid, self.p.pk, "registered")

    def test_results_final_blocks_mutations(self):
        self.competition.is_results_final = True
        self.competition.save()
        with self.assertRaises(AlreadyFinalizedError):
            groups.start_playing(self.cid, self.p.pk)

    def test_signal_after_commit(self):
        received = []

        def listener(sender, event, **kwargs):
            received.append(event)

        registration_changed.connect(listener)
        self.addCleanup(registration_changed.disconnect, listener)

        with self.captureOnCommitCallbacks(execute=True):
            groups.start_playing(self.cid, self.p.pk)

        self.assertEqual(len(received), 1)
        event = received[0]
        self.assertIsInstance(event, RegistrationChanged)
        self.assertEqual((event.previous_status, event.status), ("registered", "playing"))
        self.assertEqual(event.player_id, self.p.pk)


class TourCompetitionRegistrationTests(TestCase):
    def setUp(self):
        self.tour = make_tour()
        self.competition = make_competition(tour=self.tour)
        self.cid = self.competition.pk
        self.member = make_player("Miembro", handicap=20.0)
        self.outsider = make_player("Visita")
        enroll(self.tour, self.member, playing_handicap=14.0)

    def test_requires_active_enrollment(self):
        with self.assertRaises(ValidationError):
            groups.register(self.cid, self.outsider.pk, "solo")
        reg = groups.register(self.cid, self.member.pk, "solo")
        self.assertIsNotNone(reg.enrollment_id)

    def test_snapshot_uses_playing_handicap(self):
        groups.register(self.cid, self.member.pk, "solo")
        card = Participant.objects.get(competition=self.competition, player=self.member)
        self.assertEqual(card.handicap_index, 14.0)

    def test_available_lists_unregistered_enrollees(self):
        rows = groups.list_available_players(self.cid)
        self.assertEqual([(r["name"], r["status"]) for r in rows], [("Miembro", "available")])

    def test_withdrawn_enrollee_is_available_again(self):
        groups.register(self.cid, self.member.pk, "looking_for_group")
        groups.withdraw(self.cid, self.member.pk)
        rows = groups.list_available_players(self.cid)
        self.assertEqual([(r["name"], r["status"]) for r in rows], [("Miembro", "available")])


class OpenStartWindowTests(TestCase):
    def test_outside_window_is_rejected(self):
        now = timezone.now()
        competition = make_competition(
            start_mode="open",
            open_start=now + timedelta(days=1),
            open_end=now + timedelta(days=2),
        )
        player = make_player("Temprano")
        with self.assertRaises(ValidationError):
            groups.register(competition.pk, player.pk, "solo")

    def test_inside_window(self):
        now = timezone.now()
        competition = make_competition(
            start_mode="open",
            open_start=now - timedelta(hours=1),
            open_end=now + timedelta(hours=5),
        )
        player = make_player("A tiempo")
        self.assertEqual(groups.register(competition.pk, player.pk, "solo").status, "registered")


class OverviewTests(TestCase):
    def setUp(self):
        self.competition = make_competition(name="Fecha 1")
        self.cid = self.competition.pk
        self.a = make_player("Ana")
        self.b = make_player("Beto")
        self.c = make_player("Caro")
        groups.register(self.cid, self.a.pk, "create_group")
        groups.add_to_group(self.cid, self.a.pk, [self.b.pk])
        groups.register(self.cid, self.c.pk, "solo")

    def test_competition_groups_orders_on_course_first(self):
        groups.start_playing(self.cid, self.c.pk)
        card = Participant.objects.get(competition=self.competition, player=self.c)
        Participant.objects.filter(pk=card.pk).update(scores=[5, 4] + [0] * 16)

        overview = groups.competition_groups(self.cid)
        self.assertEqual([g["status"] for g in overview], ["on_course", "registered"])
        caro = overview[0]["players"][0]
        self.assertEqual(caro["holes_played"], 2)
        self.assertEqual(caro["score_to_par"], 1)
        self.assertEqual(len(overview[1]["players"]), 2)

    def test_active_rounds(self):
        rounds = groups.active_rounds(self.a.pk)
        self.assertEqual(len(rounds), 1)
        self.assertEqual(rounds[0]["competition_name"], "Fecha 1")
        self.assertEqual(rounds[0]["group"], ["Beto"])
        self.assertEqual(groups.active_rounds(None), [])

    def test_active_rounds_skip_final_competitions(self):
        self.competition.is_results_final = True
        self.competition.save()
        self.assertEqual(groups.active_rounds(self.a.pk), [])
