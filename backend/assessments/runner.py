import asyncio
import logging

from asgiref.sync import sync_to_async
from django.conf import settings

from .autosave import INTERVAL, VISIBILITY, UNLOAD, autosave_interval

logger = logging.getLogger(__name__)


class AttemptRunner:
    """Drives a started engine from an asyncio event loop.

    Two independent periodic tasks share the engine: the countdown ticks once
    per ``tick_interval`` and the autosave loop checkpoints every
    ``autosave_interval``. Checkpoint writes and the completion handler run
    in worker threads and never block the countdown. ``teardown()`` cancels
    both loops; saves still in flight finish but their outcome is ignored.
    """

    def __init__(self, engine, autosave, tick_interval=None, autosave_every=None):
        self.engine = engine
        self.autosave = autosave
        self.tick_interval = tick_interval or getattr(settings, 'ASSESSMENT_TICK_INTERVAL', 1)
        self.autosave_every = autosave_every or autosave_interval()

        self._complete = engine.on_complete
        engine.on_complete = self._on_complete

        self._loops = []
        self._pending = set()
        self._completion = None
        self._torn_down = False
        self.finished = asyncio.Event()

    def start(self):
        if not self.engine.is_active:
            raise RuntimeError('Runner needs an active attempt')
        self._loops = [
            asyncio.create_task(self._countdown()),
            asyncio.create_task(self._autosave_loop()),
        ]

    async def _countdown(self):
        while self.engine.is_active and not self._torn_down:
            await asyncio.sleep(self.tick_interval)
            if self._torn_down:
                return
            self.engine.tick(1)

    async def _autosave_loop(self):
        while self.engine.is_active and not self._torn_down:
            await asyncio.sleep(self.autosave_every)
            self.save_in_background(INTERVAL)

    # ------------------------------------------------------------------
    # Autosave triggers
    # ------------------------------------------------------------------

    def save_in_background(self, trigger):
        """Snapshot now, write later. Returns the write task, or None if inactive."""
        if self._torn_down or not self.engine.is_active:
            return None
        snapshot = self.engine.snapshot()
        task = asyncio.create_task(self._write(snapshot, trigger))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _write(self, snapshot, trigger):
        saved = await sync_to_async(self.autosave.write)(snapshot, trigger)
        if self._torn_down:
            logger.debug('Discarding %s autosave outcome after teardown', trigger)
            return saved
        if saved:
            self.engine.last_saved_at = snapshot.last_saved_at
        return saved

    def visibility_lost(self):
        return self.save_in_background(VISIBILITY)

    def unload(self):
        task = self.save_in_background(UNLOAD)
        self.teardown()
        return task

    # ------------------------------------------------------------------
    # Completion / teardown
    # ------------------------------------------------------------------

    def submit(self):
        return self.engine.submit()

    def _on_complete(self, result):
        self._cancel_loops()
        if self._complete is None:
            self.finished.set()
            return
        self._completion = asyncio.create_task(self._run_completion(result))

    async def _run_completion(self, result):
        try:
            await sync_to_async(self._complete)(result)
        finally:
            self.finished.set()

    async def wait(self):
        await self.finished.wait()
        return self.engine.result

    async def drain(self):
        """Wait for in-flight checkpoint writes."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def teardown(self):
        self._torn_down = True
        self._cancel_loops()

    def _cancel_loops(self):
        current = asyncio.current_task()
        for task in self._loops:
            if task is not current and not task.done():
                task.cancel()
