import random

from django.test import SimpleTestCase

from assessments.shuffler import shuffle


class TestShuffle(SimpleTestCase):
    def test_returns_permutation(self):
        items = list(range(20))
        shuffled = shuffle(items, random.Random(1))
        self.assertEqual(sorted(shuffled), items)
        self.assertEqual(len(shuffled), len(items))

    def test_does_not_modify_input(self):
        items = ['a', 'b', 'c', 'd', 'e']
        shuffle(items, random.Random(2))
        self.assertEqual(items, ['a', 'b', 'c', 'd', 'e'])

    def test_orders_vary_across_runs(self):
        rng = random.Random(3)
        orders = {tuple(shuffle(range(10), rng)) for _ in range(20)}
        self.assertGreater(len(orders), 1)

    def test_same_seed_same_order(self):
        self.assertEqual(
            shuffle(range(10), random.Random(42)),
            shuffle(range(10), random.Random(42)),
        )

    def test_empty_and_single(self):
        self.assertEqual(shuffle([]), [])
        self.assertEqual(shuffle(['only']), ['only'])

    def test_every_position_reachable(self):
        rng = random.Random(4)
        first_items = {shuffle(range(4), rng)[0] for _ in range(200)}
        self.assertEqual(first_items, {0, 1, 2, 3})
