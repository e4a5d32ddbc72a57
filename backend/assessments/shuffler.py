import random


def shuffle(items, rng=None):
    """Return a uniformly random permutation of *items* as a new list.

    Fisher-Yates: walk from the last index down to 1 and swap each slot with
    a uniformly drawn index in [0, i]. *rng* is anything exposing ``randint``
    (a seeded ``random.Random`` in tests); defaults to the ``random`` module.
    """
    if rng is None:
        rng = random
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
