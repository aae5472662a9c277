import secrets
import string
import time

RANDOM_ALPHABET = string.digits + string.ascii_lowercase


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def random_string(length: int) -> str:
    return "".join(secrets.choice(RANDOM_ALPHABET) for _ in range(length))
