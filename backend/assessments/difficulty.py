from collections import namedtuple

from .exceptions import NoQuestionsAvailable

# Difficulty tiers
PRACTICE = 'practice'
EASY = 'easy'
MEDIUM = 'medium'
HARD = 'hard'

MAIN_TIERS = (EASY, MEDIUM, HARD)

HARD_THRESHOLD = 75      # Practice score (percent) needed for the hard set
MEDIUM_THRESHOLD = 50    # Practice score (percent) needed for the medium set

# Where to look when the target tier has no questions, in priority order
FALLBACK_ORDER = {
    HARD: (MEDIUM, EASY),
    MEDIUM: (EASY, HARD),
    EASY: (MEDIUM, HARD),
}


class TierAssignment(namedtuple('TierAssignment', ['tier', 'target'])):
    """The tier an attempt was given, and the tier its score asked for."""

    __slots__ = ()

    @property
    def fell_back(self):
        return self.target is not None and self.tier != self.target


def target_tier(score):
    """Map a practice score in [0, 100] to a tier. Boundaries go up."""
    if score >= HARD_THRESHOLD:
        return HARD
    if score >= MEDIUM_THRESHOLD:
        return MEDIUM
    return EASY


def assign_tier(score, counts):
    """Pick the main-test tier for a practice *score*.

    *counts* maps tier -> number of available questions. The target tier is
    used when it has questions; otherwise the tier's fallback ladder is
    walked. Raises NoQuestionsAvailable when every tier is empty.
    """
    target = target_tier(score)
    if counts.get(target, 0) > 0:
        return TierAssignment(target, target)

    for tier in FALLBACK_ORDER[target]:
        if counts.get(tier, 0) > 0:
            return TierAssignment(tier, target)

    raise NoQuestionsAvailable()


def first_available_tier(counts):
    """Tier for an assessment without practice questions: easiest non-empty one."""
    for tier in MAIN_TIERS:
        if counts.get(tier, 0) > 0:
            return TierAssignment(tier, None)
    raise NoQuestionsAvailable()
