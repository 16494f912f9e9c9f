from django.test import SimpleTestCase

from tourcore.apps.leaderboard.services.handicap import (
    course_handicap,
    distribute_strokes,
    net_scores,
    round_half_up,
)

STROKE_INDEX = [7, 15, 3, 11, 1, 9, 5, 17, 13, 8, 16, 4, 12, 2, 10, 6, 18, 14]


class CourseHandicapTests(SimpleTestCase):
    def test_slope_only(self):
        # 10.4 × 125 / 113 = 11.50 → 12
        self.assertEqual(course_handicap(10.4, 125), 12)

    def test_standard_slope_is_identity_after_rounding(self):
        self.assertEqual(course_handicap(18.0), 18)
        self.assertEqual(course_handicap(None), 0)

    def test_course_rating_offset(self):
        # 15.4 × 128 / 113 + (72.3 − 72) = 17.74 → 18
        self.assertEqual(course_handicap(15.4, 128, 72.3, 72), 18)

    def test_rating_ignored_without_par(self):
        self.assertEqual(course_handicap(10.4, 125, 74.0, None), 12)

    def test_plus_handicap(self):
        self.assertEqual(course_handicap(-2.0, 113), -2)

    def test_round_half_up(self):
        self.assertEqual([round_half_up(v) for v in (0.5, 1.5, 2.5, -0.5, 2.49)], [1, 2, 3, 0, 2])


class StrokeDistributionTests(SimpleTestCase):
    def test_by_stroke_index(self):
        per_hole = distribute_strokes(5, STROKE_INDEX, 18)
        self.assertEqual(sum(per_hole), 5)
        hardest = {STROKE_INDEX.index(i) for i in range(1, 6)}
        self.assertEqual({i for i, k in enumerate(per_hole) if k}, hardest)

    def test_more_than_one_per_hole(self):
        per_hole = distribute_strokes(20, STROKE_INDEX, 18)
        self.assertEqual(sum(per_hole), 20)
        self.assertEqual(per_hole[STROKE_INDEX.index(1)], 2)
        self.assertEqual(per_hole[STROKE_INDEX.index(3)], 1)

    def test_plus_player_gives_back_on_easiest_holes(self):
        per_hole = distribute_strokes(-2, STROKE_INDEX, 18)
        self.assertEqual(per_hole[STROKE_INDEX.index(18)], -1)
        self.assertEqual(per_hole[STROKE_INDEX.index(17)], -1)
        self.assertEqual(sum(per_hole), -2)

    def test_even_without_stroke_index(self):
        per_hole = distribute_strokes(20, [], 18)
        self.assertEqual(per_hole[:2], [2, 2])
        self.assertEqual(per_hole[2:], [1] * 16)

    def test_net_scores_keep_sentinels(self):
        self.assertEqual(net_scores([5, 0, -1, 3], [1, 1, 1, 0]), [4, 0, -1, 3])
