import re

from svyasa.services.avatars import SEED_LENGTH, avatar_index, avatar_url, generate_random_seed


def test_random_seed_shape():
    seeds = {generate_random_seed() for _ in range(50)}
    assert len(seeds) > 1
    for s in seeds:
        assert len(s) == SEED_LENGTH
        assert re.fullmatch(r"[0-9a-z]+", s)


def test_avatar_url_is_deterministic():
    assert avatar_url("k3j9x2") == avatar_url("k3j9x2")


def test_avatar_index_uses_digits_mod_pool():
    assert avatar_index("a1b2c3", 70) == 123 % 70
    assert avatar_index("no-digits", 70) == 0
    assert avatar_index("999", 10) == 9


def test_avatar_url_format():
    url = avatar_url("ab12", base_url="https://img.example/av", pool_size=70)
    assert url == "https://img.example/av?img=12&u=ab12"


def test_avatar_url_quotes_seed():
    url = avatar_url("a b&c", base_url="https://img.example/av", pool_size=70)
    assert url.endswith("&u=a%20b%26c")
