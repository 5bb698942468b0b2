import random
import time


def generate_reference_id(prefix: str) -> str:
    """Reference id like ``TKT-12345678-0042``.

    Tail of the epoch milliseconds plus four random digits; collisions are
    left to the unique constraint on ``payments.reference_id``.
    """
    timestamp = str(int(time.time() * 1000))[-8:]
    suffix = f"{random.randint(0, 9999):04d}"
    return f"{prefix}-{timestamp}-{suffix}"
