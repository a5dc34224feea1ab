import logging
from enum import Enum
from fractions import Fraction

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from kdfpow.config import LOG_FILE, LOG_LEVEL
from kdfpow.errors import DerivationFailure, InvalidParameter

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(levelname)s - %(message)s",
    filename=LOG_FILE,  # stderr when unset
    filemode="w",
)

# Float accumulation overflows past 2 ** 1023.
MAX_ACCUMULATE_BYTES = 127


class Normalization(Enum):
    """How a derived key is turned into a score in [0, 1).

    EXACT keeps the full big-integer ratio as a ``Fraction``. DOUBLE rounds
    that ratio once to the nearest float, which is what a Python verifier
    doing ``int.from_bytes(key, "big") / 2 ** (8 * len(key))`` computes.
    ACCUMULATE reproduces the browser solver, which folds the bytes into a
    float one at a time and loses precision after the first 7 bytes.
    """

    EXACT = "exact"
    DOUBLE = "double"
    ACCUMULATE = "accumulate"


def _encode(value: str | bytes, name: str) -> bytes:
    if isinstance(value, bytes):
        return value
    try:
        return value.encode("utf-8")
    except (UnicodeEncodeError, AttributeError) as e:
        logging.error(f"cannot encode {name} as UTF-8: {e}")
        raise DerivationFailure(f"cannot encode {name} as UTF-8: {e}") from e


def derive_key(
    secret: str | bytes, salt: str | bytes, iterations: int, length: int
) -> bytes:
    """PBKDF2 with HMAC-SHA-256 over the UTF-8 encodings of secret and salt."""
    if iterations <= 0:
        raise InvalidParameter(
            "iterations must be positive", field="iterations", value=iterations
        )
    if length <= 0:
        raise InvalidParameter("length must be positive", field="length", value=length)

    secret_bytes = _encode(secret, "secret")
    salt_bytes = _encode(salt, "salt")
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=length,
            salt=salt_bytes,
            iterations=iterations,
        )
    except UnsupportedAlgorithm as e:
        logging.error(f"PBKDF2-HMAC-SHA256 unavailable: {e}")
        raise DerivationFailure(f"PBKDF2-HMAC-SHA256 unavailable: {e}") from e
    except ValueError as e:
        raise InvalidParameter(str(e), field="length", value=length) from e
    return kdf.derive(secret_bytes)


def normalize_key(
    key: bytes, mode: Normalization = Normalization.EXACT
) -> Fraction | float:
    if len(key) == 0:
        raise InvalidParameter("cannot normalize an empty key", field="key", value=key)

    bits = 8 * len(key)
    if mode is Normalization.EXACT:
        return Fraction(int.from_bytes(key, "big"), 1 << bits)
    if mode is Normalization.DOUBLE:
        return int.from_bytes(key, "big") / (1 << bits)

    if len(key) > MAX_ACCUMULATE_BYTES:
        raise InvalidParameter(
            f"accumulate normalization supports at most {MAX_ACCUMULATE_BYTES} bytes",
            field="key",
            value=key,
        )
    acc = 0.0
    for byte in key:
        acc = acc * 256 + byte
    return acc / 2.0**bits


def threshold(
    difficulty: float, mode: Normalization = Normalization.EXACT
) -> Fraction | float:
    """Scores strictly below this value are accepted."""
    if mode is Normalization.EXACT:
        return 1 / Fraction(difficulty)
    return 1 / difficulty
