from django.test import SimpleTestCase, TestCase

from tourcore.apps.core.errors import ConflictError
from tourcore.apps.core.tests.factories import make_competition, make_player
from tourcore.apps.registration.models import Registration
from tourcore.apps.registration.transitions import (
    FINISHED,
    LOOKING_FOR_GROUP,
    PLAYING,
    REGISTERED,
    STATUSES,
    TERMINAL,
    WITHDRAWN,
    can_transition,
    commit_transition,
    guard,
)


class TransitionTableTests(SimpleTestCase):
    def test_entry_states(self):
        self.assertTrue(can_transition(None, LOOKING_FOR_GROUP))
        self.assertTrue(can_transition(None, REGISTERED))
        self.assertFalse(can_transition(None, PLAYING))
        self.assertFalse(can_transition(None, WITHDRAWN))

    def test_terminal_states_have_no_exit(self):
        self.assertEqual(TERMINAL, {FINISHED, WITHDRAWN})
        for terminal in TERMINAL:
            for target in STATUSES:
                self.assertFalse(can_transition(terminal, target))

    def test_any_non_terminal_can_withdraw(self):
        for status in (LOOKING_FOR_GROUP, REGISTERED, PLAYING):
            self.assertTrue(can_transition(status, WITHDRAWN))

    def test_guard_rejects_pairs_outside_table(self):
        with self.assertRaises(ConflictError):
            guard(LOOKING_FOR_GROUP, PLAYING)
        with self.assertRaises(ConflictError):
            guard(FINISHED, PLAYING)
        guard(REGISTERED, PLAYING)


class CommitTransitionTests(TestCase):
    def setUp(self):
        self.competition = make_competition()
        self.player = make_player("Ana")
        self.reg = Registration.objects.create(
            competition=self.competition, player=self.player, status=LOOKING_FOR_GROUP,
        )

    def test_bumps_version_and_status(self):
        commit_transition(self.reg, WITHDRAWN)
        self.reg.refresh_from_db()
        self.assertEqual(self.reg.status, WITHDRAWN)
        self.assertEqual(self.reg.version, 1)

    def test_stale_read_is_conflict(self):
        stale = Registration.objects.get(pk=self.reg.pk)
        # Otra petición avanza la fila
        commit_transition(self.reg, WITHDRAWN)
        with self.assertRaises(ConflictError):
            commit_transition(stale, WITHDRAWN)

    def test_stale_version_with_same_status_is_conflict(self):
        stale = Registration.objects.get(pk=self.reg.pk)
        Registration.objects.filter(pk=self.reg.pk).update(version=5)
        with self.assertRaises(ConflictError):
            commit_transition(stale, WITHDRAWN)
        self.reg.refresh_from_db()
        self.assertEqual(self.reg.status, LOOKING_FOR_GROUP)
