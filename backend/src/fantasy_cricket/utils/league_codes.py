"""Join-code generation for leagues."""

import random
import string

LEAGUE_CODE_ALPHABET = string.ascii_uppercase + string.digits
LEAGUE_CODE_LENGTH = 8


def generate_league_code(length: int = LEAGUE_CODE_LENGTH, rng: random.Random | None = None) -> str:
    """Random uppercase alphanumeric code, e.g. 'K7Q2ZP0A'."""
    rng = rng or random.SystemRandom()
    return "".join(rng.choice(LEAGUE_CODE_ALPHABET) for _ in range(length))
