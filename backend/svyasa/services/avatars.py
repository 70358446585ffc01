from __future__ import annotations

import random
import re
import string
from urllib.parse import quote

from svyasa.core.settings import settings

_ALPHABET = string.digits + string.ascii_lowercase
SEED_LENGTH = 11


def generate_random_seed() -> str:
    # cosmetic only: decorrelates avatars from identity, collisions are fine
    return "".join(random.choices(_ALPHABET, k=SEED_LENGTH))


def avatar_index(seed: str, pool_size: int) -> int:
    digits = re.sub(r"\D", "", seed)
    return int(digits or "0") % pool_size


def avatar_url(seed: str, base_url: str | None = None, pool_size: int | None = None) -> str:
    base_url = base_url or settings.avatar_base_url
    pool_size = pool_size or settings.avatar_pool_size
    return f"{base_url}?img={avatar_index(seed, pool_size)}&u={quote(seed, safe='')}"
