# vocalkart/utils/ids.py
import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits


def synthetic_barcode(prefix: str) -> str:
    """Barcode for products with no real one, e.g. ALT_1718000000000_k3j9x0a2b."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"
