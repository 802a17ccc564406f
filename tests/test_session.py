"""
vigenere_live — Reactive Session Tests
======================================
Run with:  python -m pytest tests/ -v
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor

import pytest
from vigenere_live.engine  import DEMO_KEY, InvalidKeyError, KeyPolicy, Mode, encode
from vigenere_live.session import Cell, CipherSession, LatestResult, Snapshot


class ManualExecutor(Executor):
    """Holds submitted calls until the test runs them, in any order."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run(self, index):
        future, fn, args, kwargs = self.pending[index]
        future.set_result(fn(*args, **kwargs))


# ── Cell ──────────────────────────────────────────────────────────────────────
def test_cell_notifies_on_change_only():
    seen = []
    cell = Cell("a", "text")
    cell.subscribe(seen.append)
    assert cell.set("b") is True
    assert cell.set("b") is False
    assert seen == ["b"]
    assert cell.get() == "b" == cell.value

def test_cell_unsubscribe():
    seen = []
    cell = Cell(0)
    stop = cell.subscribe(seen.append)
    cell.set(1)
    stop()
    stop()
    cell.set(2)
    assert seen == [1]

# ── LatestResult ──────────────────────────────────────────────────────────────
def test_latest_result_drops_stale():
    gate = LatestResult()
    t1, t2 = gate.begin(), gate.begin()
    assert t2 > t1
    assert gate.offer(t2, "new") is True
    assert gate.offer(t1, "old") is False
    assert gate.value == "new"
    assert gate.ticket == t2
    assert gate.issued == t2

def test_latest_result_in_order():
    gate = LatestResult()
    t1, t2 = gate.begin(), gate.begin()
    assert gate.offer(t1, "first")
    assert gate.offer(t2, "second")
    assert gate.value == "second"

# ── CipherSession ─────────────────────────────────────────────────────────────
def test_session_initial_output():
    s = CipherSession("ATTACKATDAWN", "LEMON")
    assert s.output == "LXFOPVEFRNHR"
    assert isinstance(s.snapshot, Snapshot)
    assert s.revision == 1

def test_session_recomputes_on_each_keystroke():
    s = CipherSession(key="LEMON")
    outputs = []
    s.on_output(lambda snap: outputs.append(snap.output))
    typed = ""
    for ch in "ATTACK":
        typed += ch
        s.set_text(typed)
    assert outputs == [encode("ATTACK"[:i + 1], "LEMON") for i in range(6)]
    assert s.revision == 7

def test_session_unchanged_input_does_not_recompute():
    s = CipherSession("HELLO", "KEY")
    rev = s.revision
    s.set_text("HELLO")
    s.set_mode("encode")
    assert s.revision == rev

def test_session_key_and_mode_changes():
    s = CipherSession("LXFOPVEFRNHR", "LEMON", mode="decode")
    assert s.output == "ATTACKATDAWN"
    s.set_mode(Mode.ENCODE)
    assert s.output == encode("LXFOPVEFRNHR", "LEMON")
    s.set_key("")
    assert s.output == "LXFOPVEFRNHR"
    assert s.snapshot.key_warning

def test_session_update_single_recompute():
    s = CipherSession()
    snaps = []
    s.on_output(snaps.append)
    s.update(text="ATTACKATDAWN", key="LEMON", mode="e")
    assert len(snaps) == 1
    assert snaps[0].output == "LXFOPVEFRNHR"

def test_session_toggle_mode_swaps_text():
    s = CipherSession("Attack at dawn!", "lemon")
    rev = s.revision
    s.toggle_mode()
    assert s.mode.get() is Mode.DECODE
    assert s.text.get() == "Lxfopv ef rnhr!"
    assert s.output == "Attack at dawn!"
    assert s.revision == rev + 1

def test_session_reject_policy_keeps_previous_output():
    s = CipherSession("HELLO", "KEY", policy=KeyPolicy.REJECT)
    good = s.output
    s.set_key("123")
    assert s.output == good
    assert isinstance(s.error, InvalidKeyError)
    assert s.snapshot.key_warning
    s.set_key("KEY1")
    assert s.error is None
    assert s.output == good

def test_session_reject_policy_initial_bad_key():
    s = CipherSession("HELLO", "", policy=KeyPolicy.REJECT)
    assert s.output == ""
    assert isinstance(s.error, InvalidKeyError)

def test_session_empty_text_has_no_warning():
    s = CipherSession("", "", policy=KeyPolicy.REJECT)
    assert s.error is None
    assert not s.snapshot.key_warning

def test_session_unsubscribe_output():
    s = CipherSession(key="B")
    seen = []
    stop = s.on_output(seen.append)
    s.set_text("A")
    stop()
    s.set_text("AA")
    assert [snap.output for snap in seen] == ["B"]

# ── Last input wins ───────────────────────────────────────────────────────────
def test_submit_out_of_order_keeps_newest():
    ex = ManualExecutor()
    s = CipherSession(key="LEMON", executor=ex)
    s.set_text("ATTACK")
    s.set_text("ATTACKATDAWN")
    assert len(ex.pending) == 2
    ex.run(1)
    assert s.output == "LXFOPVEFRNHR"
    ex.run(0)
    assert s.output == "LXFOPVEFRNHR"
    assert s.snapshot.text == "ATTACKATDAWN"

def test_submit_in_order():
    ex = ManualExecutor()
    s = CipherSession(key="BC", executor=ex)
    s.set_text("A")
    s.set_text("AA")
    ex.run(0)
    assert s.output == "B"
    ex.run(1)
    assert s.output == "BC"

def test_submit_stale_behind_synchronous_result():
    ex = ManualExecutor()
    s = CipherSession("old", "LEMON")
    future = s.submit(ex)
    s.set_text("new")
    ex.run(0)
    assert future.result().text == "old"
    assert s.snapshot.text == "new"

def test_submit_on_thread_pool():
    s = CipherSession(key=DEMO_KEY)
    s.text.set("Rust is cool")
    with ThreadPoolExecutor(max_workers=4) as pool:
        futures = [s.submit(pool) for _ in range(8)]
    assert s.output == encode("Rust is cool", DEMO_KEY)
    assert s.revision == futures[-1].result().revision

def test_listeners_see_increasing_revisions():
    s = CipherSession(key="KEY")
    revisions = []
    lock = threading.Lock()

    def record(snap):
        with lock:
            revisions.append(snap.revision)
    s.on_output(record)
    s.set_text("abc")
    with ThreadPoolExecutor(max_workers=4) as pool:
        for _ in range(16):
            s.submit(pool)
    assert revisions == sorted(revisions)
    assert len(set(revisions)) == len(revisions)

@pytest.mark.parametrize("mode", ["decode", "D", Mode.DECODE])
def test_session_accepts_mode_strings(mode):
    s = CipherSession("LXFOPVEFRNHR", "LEMON", mode=mode)
    assert s.output == "ATTACKATDAWN"

def test_session_rejects_unknown_mode():
    s = CipherSession("abc", "KEY")
    with pytest.raises(ValueError):
        s.set_mode("sideways")
    assert s.mode.get() is Mode.ENCODE

# ── Toggle, batching and re-entrant listeners ─────────────────────────────────
def test_toggle_mode_uses_current_inputs_while_job_pending():
    ex = ManualExecutor()
    s = CipherSession(key="LEMON", executor=ex)
    s.set_text("ATTACK")
    s.toggle_mode()
    assert s.text.get() == "LXFOPV"
    assert s.mode.get() is Mode.DECODE
    ex.run(1)
    ex.run(0)
    assert s.output == "ATTACK"
    assert s.snapshot.text == "LXFOPV"

def test_toggle_mode_with_rejected_key_flips_direction_only():
    s = CipherSession("HELLO", "KEY", policy=KeyPolicy.REJECT)
    good = s.output
    s.set_key("123")
    s.toggle_mode()
    assert s.mode.get() is Mode.DECODE
    assert s.text.get() == "HELLO"
    assert s.output == good
    assert isinstance(s.error, InvalidKeyError)

def test_update_with_bad_mode_changes_nothing():
    s = CipherSession("ABC", "B")
    rev = s.revision
    with pytest.raises(ValueError):
        s.update(text="XYZ", mode="sideways")
    assert s.text.get() == "ABC"
    assert s.snapshot.text == "ABC"
    assert s.output == "BCD"
    assert s.revision == rev

def test_update_recomputes_when_an_input_subscriber_fails():
    s = CipherSession("ABC", "B")

    def explode(_value):
        raise RuntimeError("widget gone")
    s.key.subscribe(explode)
    with pytest.raises(RuntimeError):
        s.update(text="XYZ", key="C")
    assert s.snapshot.text == "XYZ"
    assert s.output == encode("XYZ", "C")

def test_listener_setting_input_keeps_revisions_increasing():
    s = CipherSession(key="B")
    first, second = [], []

    def retype(snap):
        first.append(snap.revision)
        if snap.text == "a":
            s.set_text("ab")
    s.on_output(retype)
    s.on_output(lambda snap: second.append(snap.revision))
    s.set_text("a")
    assert first == [2, 3]
    assert second == [3]
    assert s.output == "bc"
