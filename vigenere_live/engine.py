"""
Cipher Engine: Vigenère Polyalphabetic Transform
=================================================
Pure mapping from (text, key, mode) to output text.

Each Latin letter of the text is shifted by the alphabet position of
the next key letter; the key repeats as often as needed. Only the 26
ASCII letters take part: digits, punctuation, whitespace, accented
letters and other scripts pass through untouched and do not consume a
key letter.

  Encode:  c = (p + k) mod 26
  Decode:  p = (c - k + 26) mod 26

Case of the text letter is preserved. Case of the key letter is
ignored. Output length always equals input length.

Key policy (what an unusable key does):
  IDENTITY  the text comes back unchanged   (default)
  REJECT    InvalidKeyError is raised

Not a security primitive. Vigenère falls to Kasiski and Friedman
analysis; this is an educational, keystroke-speed transform.
"""

import enum
import logging
from typing import List, Union

logger = logging.getLogger(__name__)

ALPHABET      = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
ALPHABET_SIZE = len(ALPHABET)

# Pre-filled key of the browser demo. Effective key: "RSTSCL".
DEMO_KEY = "°¡! RüST íS CóÓL ¡!°"


class InvalidKeyError(ValueError):
    """Key holds no A–Z letter and the policy forbids an identity transform."""

    def __init__(self, key: str):
        self.key = key
        super().__init__("Vigenère key must contain at least one Latin letter (A–Z).")


class Mode(enum.Enum):
    ENCODE = "encode"
    DECODE = "decode"

    @classmethod
    def parse(cls, value: Union["Mode", str]) -> "Mode":
        """Accept a Mode or a loose string such as 'e', 'Encrypt', 'DECODE'."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            mode = _MODE_ALIASES.get(value.strip().lower())
            if mode is not None:
                return mode
        raise ValueError(f"Unknown mode {value!r}; expected encode or decode.")

    @property
    def sign(self) -> int:
        return 1 if self is Mode.ENCODE else -1

    @property
    def inverse(self) -> "Mode":
        return Mode.DECODE if self is Mode.ENCODE else Mode.ENCODE


_MODE_ALIASES = {
    "encode": Mode.ENCODE, "e": Mode.ENCODE, "enc": Mode.ENCODE, "encrypt": Mode.ENCODE,
    "decode": Mode.DECODE, "d": Mode.DECODE, "dec": Mode.DECODE, "decrypt": Mode.DECODE,
}


class KeyPolicy(enum.Enum):
    IDENTITY = "identity"
    REJECT   = "reject"


DEFAULT_POLICY = KeyPolicy.IDENTITY


def is_latin_letter(ch: str) -> bool:
    """True only for ASCII A–Z and a–z."""
    return ("A" <= ch <= "Z") or ("a" <= ch <= "z")


def effective_key(key: str) -> str:
    """Strip everything but Latin letters from the key, keeping order and case."""
    _check_str("key", key)
    return "".join(ch for ch in key if is_latin_letter(ch))


def key_shifts(key: str) -> List[int]:
    """Shift amount (0-25) of each effective key letter."""
    return [ALPHABET.index(ch.upper()) for ch in effective_key(key)]


def shift_letter(ch: str, shift: int) -> str:
    """Rotate one Latin letter by `shift` places, keeping its case."""
    if not is_latin_letter(ch):
        raise ValueError(f"Cannot shift non-Latin character {ch!r}.")
    base = ord("A") if ch <= "Z" else ord("a")
    return chr(base + (ord(ch) - base + shift) % ALPHABET_SIZE)


def transform(text: str, key: str,
              mode: Union[Mode, str] = Mode.ENCODE,
              policy: KeyPolicy = DEFAULT_POLICY) -> str:
    """
    Encode or decode `text` with the Vigenère `key`.

    The key cursor advances only on Latin letters of the text, so
    "Attack at dawn!" and "ATTACKATDAWN" use the key identically.

    Raises InvalidKeyError only when policy is REJECT, the text is
    non-empty and the key has no Latin letter.
    """
    _check_str("text", text)
    mode = Mode.parse(mode)
    if not text:
        return ""

    shifts = key_shifts(key)
    if not shifts:
        if policy is KeyPolicy.REJECT:
            raise InvalidKeyError(key)
        logger.debug("Empty effective key: identity transform")
        return text

    return _apply(text, shifts, mode.sign)


def encode(text: str, key: str, policy: KeyPolicy = DEFAULT_POLICY) -> str:
    return transform(text, key, Mode.ENCODE, policy)


def decode(text: str, key: str, policy: KeyPolicy = DEFAULT_POLICY) -> str:
    return transform(text, key, Mode.DECODE, policy)


def _apply(text: str, shifts: List[int], sign: int) -> str:
    period = len(shifts)
    out = []
    k = 0
    for ch in text:
        if is_latin_letter(ch):
            out.append(shift_letter(ch, sign * shifts[k % period]))
            k += 1
        else:
            out.append(ch)
    return "".join(out)


def _check_str(name: str, value) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be str, not {type(value).__name__}.")


class VigenereCipher:
    """
    Vigenère cipher bound to one key.

    The key is normalised once (Latin letters only, uppercased) and
    reused for every call; the object holds no other state, so one
    instance may serve any number of threads.
    """

    def __init__(self, key: str, policy: KeyPolicy = DEFAULT_POLICY):
        self._key    = effective_key(key).upper()
        self._policy = policy
        if not self._key and policy is KeyPolicy.REJECT:
            raise InvalidKeyError(key)
        self._shifts = [ALPHABET.index(ch) for ch in self._key]
        logger.debug(f"VigenereCipher ready | period={len(self._key)} policy={policy.value}")

    @property
    def key(self) -> str:
        return self._key

    @property
    def period(self) -> int:
        return len(self._key)

    @property
    def is_identity(self) -> bool:
        return not self._shifts

    def transform(self, text: str, mode: Union[Mode, str] = Mode.ENCODE) -> str:
        _check_str("text", text)
        mode = Mode.parse(mode)
        if not text or self.is_identity:
            return text
        return _apply(text, self._shifts, mode.sign)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt plaintext. Non-Latin characters pass through."""
        return self.transform(plaintext, Mode.ENCODE)

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt ciphertext."""
        return self.transform(ciphertext, Mode.DECODE)

    def __repr__(self):
        return f"VigenereCipher(period={self.period}, policy={self._policy.value})"
