"""
Reactive Session: recompute on every keystroke
==============================================
Three observed input cells (text, key, mode) and one derived output.

Any change to a cell re-runs the cipher engine over the full input and
publishes a Snapshot to output subscribers. The engine keeps no state
between calls; everything the session remembers is the last published
Snapshot.

  text ─┐
  key  ─┼─► transform(text, key, mode) ─► Snapshot ─► on_output(...)
  mode ─┘

Overlapping evaluations (submit() on a thread pool while the user keeps
typing) go through a LatestResult gate: a result is shown only if no
newer input has already been shown. Last input wins.

Under KeyPolicy.REJECT an unusable key does not raise out of a setter.
The previous output stays on display and the error is kept in
Snapshot.error for the UI to surface.
"""

import logging
import threading
from concurrent.futures import Executor, Future
from contextlib import contextmanager
from typing import Any, Callable, List, NamedTuple, Optional, Union

from .engine import (
    DEFAULT_POLICY, InvalidKeyError, KeyPolicy, Mode, effective_key, transform,
)

logger = logging.getLogger(__name__)


class Cell:
    """One observed value. Subscribers hear about real changes only."""

    def __init__(self, value: Any = None, name: str = ""):
        self.name = name
        self._value = value
        self._subscribers: List[Callable[[Any], None]] = []

    def get(self) -> Any:
        return self._value

    @property
    def value(self) -> Any:
        return self._value

    def set(self, value: Any) -> bool:
        """Store value and notify. Returns False when nothing changed."""
        if value == self._value:
            return False
        self._value = value
        for callback in list(self._subscribers):
            callback(value)
        return True

    def subscribe(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def __repr__(self):
        return f"Cell({self.name or '?'})"


class Snapshot(NamedTuple):
    revision: int
    text:     str
    key:      str
    mode:     Mode
    output:   str
    error:    Optional[InvalidKeyError] = None

    @property
    def key_warning(self) -> bool:
        """Text is waiting on a key that has no Latin letter yet."""
        return bool(self.text) and not effective_key(self.key)


class LatestResult:
    """
    Last-input-wins gate for results that may arrive out of order.

    begin() issues increasing tickets in input order. offer() accepts a
    result only if its ticket is newer than the one already accepted.
    """

    def __init__(self):
        self._lock     = threading.Lock()
        self._issued   = 0
        self._accepted = 0
        self._value: Any = None

    def begin(self) -> int:
        with self._lock:
            self._issued += 1
            return self._issued

    def offer(self, ticket: int, value: Any) -> bool:
        with self._lock:
            if ticket <= self._accepted:
                logger.debug(f"Dropped stale result #{ticket} (showing #{self._accepted})")
                return False
            self._accepted = ticket
            self._value    = value
            return True

    @property
    def ticket(self) -> int:
        return self._accepted

    @property
    def issued(self) -> int:
        return self._issued

    @property
    def value(self) -> Any:
        return self._value


class CipherSession:
    """
    Live cipher editor state.

    Cells are meant to be driven from one UI thread. With an executor,
    input changes are evaluated there and results may land on any
    thread; the first evaluation is always synchronous so a Snapshot
    exists from the start.
    """

    def __init__(self, text: str = "", key: str = "",
                 mode: Union[Mode, str] = Mode.ENCODE,
                 policy: KeyPolicy = DEFAULT_POLICY,
                 executor: Optional[Executor] = None):
        self.policy   = policy
        self.executor = executor
        self.text   = Cell(text, "text")
        self.key    = Cell(key, "key")
        self.mode   = Cell(Mode.parse(mode), "mode")

        self._latest    = LatestResult()
        self._lock      = threading.RLock()
        self._listeners: List[Callable[[Snapshot], None]] = []
        self._held      = False
        self._dirty     = False
        self._notifying = False

        for cell in (self.text, self.key, self.mode):
            cell.subscribe(self._on_input)
        self._recompute()

    # ── inputs ────────────────────────────────────────────────────────────
    def set_text(self, text: str) -> None:
        self.text.set(text)

    def set_key(self, key: str) -> None:
        self.key.set(key)

    def set_mode(self, mode: Union[Mode, str]) -> None:
        self.mode.set(Mode.parse(mode))

    def update(self, text: Optional[str] = None, key: Optional[str] = None,
               mode: Union[Mode, str, None] = None) -> None:
        """Change several inputs with a single recomputation."""
        if mode is not None:
            mode = Mode.parse(mode)
        with self._hold():
            if text is not None:
                self.text.set(text)
            if key is not None:
                self.key.set(key)
            if mode is not None:
                self.mode.set(mode)

    def toggle_mode(self) -> None:
        """
        Swap direction and feed the output of the current inputs back in
        as text. With a key REJECT refuses, only the direction flips.
        """
        mode = self.mode.get()
        try:
            text = transform(self.text.get(), self.key.get(), mode, self.policy)
        except InvalidKeyError:
            text = self.text.get()
        self.update(text=text, mode=mode.inverse)

    # ── outputs ───────────────────────────────────────────────────────────
    def on_output(self, callback: Callable[[Snapshot], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    @property
    def snapshot(self) -> Snapshot:
        return self._latest.value

    @property
    def output(self) -> str:
        return self.snapshot.output

    @property
    def error(self) -> Optional[InvalidKeyError]:
        return self.snapshot.error

    @property
    def revision(self) -> int:
        return self.snapshot.revision

    # ── evaluation ────────────────────────────────────────────────────────
    def submit(self, executor: Executor) -> Future:
        """
        Evaluate the current inputs on `executor`.

        The result is published only if nothing newer has been shown in
        the meantime. Exceptions stay on the returned Future.
        """
        ticket = self._latest.begin()
        args = (ticket, self.text.get(), self.key.get(), self.mode.get())
        future = executor.submit(self._evaluate, *args)

        def _done(f: Future):
            if not f.cancelled() and f.exception() is None:
                self._publish(f.result())
        future.add_done_callback(_done)
        return future

    def _on_input(self, _value: Any) -> None:
        if self._held:
            self._dirty = True
            return
        self._schedule()

    def _schedule(self) -> None:
        if self.executor is None:
            self._recompute()
        else:
            self.submit(self.executor)

    @contextmanager
    def _hold(self):
        self._held, self._dirty = True, False
        try:
            yield
        finally:
            self._held = False
            if self._dirty:
                self._schedule()

    def _recompute(self) -> None:
        ticket = self._latest.begin()
        self._publish(self._evaluate(ticket, self.text.get(), self.key.get(), self.mode.get()))

    def _evaluate(self, ticket: int, text: str, key: str, mode: Mode) -> Snapshot:
        try:
            output = transform(text, key, mode, self.policy)
            error = None
        except InvalidKeyError as exc:
            previous = self._latest.value
            output = previous.output if previous is not None else ""
            error = exc
        return Snapshot(ticket, text, key, mode, output, error)

    def _publish(self, snapshot: Snapshot) -> None:
        with self._lock:
            if not self._latest.offer(snapshot.revision, snapshot):
                return
            # A listener that sets an input lands here re-entrantly; the
            # outer loop below delivers the newer snapshot instead.
            if self._notifying:
                return
            self._notifying = True
            try:
                shown = None
                while shown is not self._latest.value:
                    shown = self._latest.value
                    logger.debug(
                        f"#{shown.revision} {shown.mode.value} | text={len(shown.text)} chars "
                        f"key_period={len(effective_key(shown.key))}"
                        f"{' | invalid key' if shown.error else ''}"
                    )
                    for callback in list(self._listeners):
                        if self._latest.value is not shown:
                            break
                        callback(shown)
            finally:
                self._notifying = False

    def __repr__(self):
        return f"CipherSession(rev={self.revision}, mode={self.mode.get().value}, policy={self.policy.value})"


if __name__ == "__main__":
    from .engine import DEMO_KEY

    logging.basicConfig(level=logging.INFO, format=' %(message)s')

    session = CipherSession(key=DEMO_KEY)
    session.on_output(lambda snap: print(f"  {snap.text!r:<20} -> {snap.output!r}"))
    typed = ""
    for ch in "Rust is cool!":
        typed += ch
        session.set_text(typed)
    session.toggle_mode()
    print(f"\n  {session!r}  output={session.output!r}")
