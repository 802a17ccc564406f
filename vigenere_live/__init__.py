"""
vigenere_live — Real-time Vigenère cipher
=========================================
Classical polyalphabetic cipher, recomputed on every keystroke.

Modules:
    engine   — pure transform(text, key, mode): case-preserving,
               Latin A–Z only, key cursor advances on letters only
    session  — observed input cells, derived output, last-input-wins

Educational transform. Not a security primitive.

License: Apache 2.0
"""

__version__  = "1.0.0"

from .engine  import (
    ALPHABET,
    DEMO_KEY,
    InvalidKeyError,
    KeyPolicy,
    Mode,
    VigenereCipher,
    decode,
    effective_key,
    encode,
    transform,
)
from .session import Cell, CipherSession, LatestResult, Snapshot

__all__ = [
    "ALPHABET",
    "DEMO_KEY",
    "InvalidKeyError",
    "KeyPolicy",
    "Mode",
    "VigenereCipher",
    "decode",
    "effective_key",
    "encode",
    "transform",
    "Cell",
    "CipherSession",
    "LatestResult",
    "Snapshot",
]
