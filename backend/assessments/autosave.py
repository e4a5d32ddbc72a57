import logging

from django.conf import settings

logger = logging.getLogger(__name__)

# Autosave triggers
INTERVAL = 'interval'      # fixed cadence while the attempt is open
VISIBILITY = 'visibility'  # tab or window hidden
UNLOAD = 'unload'          # page closing
ACTION = 'action'          # after a student operation
START = 'start'            # attempt opened

CLIENT_TRIGGERS = (INTERVAL, VISIBILITY, UNLOAD)


def autosave_interval():
    return getattr(settings, 'ASSESSMENT_AUTOSAVE_INTERVAL', 30)


class AutosaveController:
    """Best-effort checkpointing of an engine into a session store.

    Save failures are logged and reported as False, never raised: the next
    trigger retries with a fresher snapshot.
    """

    def __init__(self, engine, session_store):
        self.engine = engine
        self.session_store = session_store

    def restore(self, lock=False):
        return self.session_store.get(self.engine.test_id, self.engine.student_id, lock=lock)

    def save(self, trigger=ACTION):
        if not self.engine.is_active:
            return False
        snapshot = self.engine.snapshot()
        saved = self.write(snapshot, trigger)
        if saved:
            self.engine.last_saved_at = snapshot.last_saved_at
        return saved

    def write(self, snapshot, trigger):
        """Upsert *snapshot*. Safe to run off the engine's thread."""
        try:
            self.session_store.upsert(snapshot)
        except Exception:
            logger.exception('Autosave (%s) failed for test %s student %s',
                             trigger, snapshot.test_id, snapshot.student_id)
            return False
        logger.debug('Autosaved (%s) test %s student %s at Q%d',
                     trigger, snapshot.test_id, snapshot.student_id, snapshot.current_question + 1)
        return True

    def discard(self):
        self.session_store.delete(self.engine.test_id, self.engine.student_id)
