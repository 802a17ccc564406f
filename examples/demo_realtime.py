"""
vigenere_live — Live Demo: recompute on every keystroke
=======================================================
Run:  python examples/demo_realtime.py

Types a phrase one character at a time into a CipherSession, printing
the ciphertext after each keystroke, then swaps direction and decodes
it back. Finishes with the key policies and a thread-pool burst where
only the newest result is kept.
"""

import sys, os, time, logging
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from concurrent.futures import ThreadPoolExecutor

from vigenere_live import CipherSession, DEMO_KEY, KeyPolicy, Mode, effective_key

LINE   = "═" * 70
PHRASE = "Real-time Vigenère, ¡Rust is cool!"

def header(step, name):
    print(f"\n{LINE}")
    print(f"  {step} — {name}")
    print(LINE)

def ok(label, value=""):
    print(f"  ✓  {label}{f': {value}' if value else ''}")

logging.basicConfig(level=logging.INFO, format=' %(message)s')

print(f"\n{LINE}")
print("  vigenere_live — Real-Time Vigenère Demo")
print(LINE)
print(f"  Key:           {DEMO_KEY!r}")
print(f"  Effective key: {effective_key(DEMO_KEY)!r}\n")

# ── 1 ────────────────────────────────────────────────────────────────────────
header(1, "ENCODE — one keystroke at a time")
session = CipherSession(key=DEMO_KEY)
session.on_output(lambda snap: print(f"  #{snap.revision:<3} {snap.text:<36} → {snap.output}"))
t0 = time.perf_counter()
typed = ""
for ch in PHRASE:
    typed += ch
    session.set_text(typed)
elapsed = time.perf_counter() - t0
ok("Keystrokes",  f"{len(PHRASE)} in {elapsed*1000:.2f} ms")
ciphertext = session.output

# ── 2 ────────────────────────────────────────────────────────────────────────
header(2, "DECODE — swap direction")
session.toggle_mode()
ok("Mode",      session.mode.get().value)
ok("Decoded",   session.output)
ok("Round-trip", str(session.output == PHRASE))

# ── 3 ────────────────────────────────────────────────────────────────────────
header(3, "KEY POLICY — no Latin letter in the key")
lenient = CipherSession("HELLO", "¡!°")
ok("IDENTITY",  f"{lenient.output} (warning={lenient.snapshot.key_warning})")
strict = CipherSession("HELLO", "KEY", policy=KeyPolicy.REJECT)
strict.set_key("¡!°")
ok("REJECT",    f"{strict.output} kept on display ({strict.error})")

# ── 4 ────────────────────────────────────────────────────────────────────────
header(4, "LAST INPUT WINS — overlapping evaluations")
with ThreadPoolExecutor(max_workers=4) as pool:
    burst = CipherSession(key=DEMO_KEY, mode=Mode.ENCODE, executor=pool)
    typed = ""
    for ch in PHRASE:
        typed += ch
        burst.set_text(typed)
ok("Shown revision", str(burst.revision))
ok("Matches newest input", str(burst.output == ciphertext))

print(f"\n{LINE}")
print("  Done.")
print(f"{LINE}\n")
