"""
Tests del cache de tokens
"""

import random
import string

from onsong_connect.client.token_store import TokenStore


def test_get_or_create_is_stable(token_store):
    """Test: dos llamadas para el mismo endpoint devuelven el mismo token"""
    first = token_store.get_or_create_token("192.168.1.20", 80)
    second = token_store.get_or_create_token("192.168.1.20", 80)

    assert first == second
    assert len(first) == 32
    assert all(c in string.hexdigits for c in first)
    assert len(token_store) == 1


def test_distinct_endpoints_get_distinct_tokens():
    """Test: 100 pares de endpoints distintos no colisionan"""
    rng = random.Random(1234)

    for _ in range(100):
        store = TokenStore()
        host_a = f"10.0.{rng.randint(0, 255)}.{rng.randint(0, 255)}"
        port_a = rng.randint(1, 65535)
        host_b, port_b = host_a, port_a
        while (host_b, port_b) == (host_a, port_a):
            host_b = f"10.1.{rng.randint(0, 255)}.{rng.randint(0, 255)}"
            port_b = rng.randint(1, 65535)

        assert store.get_or_create_token(host_a, port_a) != store.get_or_create_token(host_b, port_b)


def test_endpoint_identity_is_exact_match(token_store):
    """Test: sin normalización ni DNS, 'localhost' y '127.0.0.1' son endpoints distintos"""
    a = token_store.get_or_create_token("localhost", 80)
    b = token_store.get_or_create_token("127.0.0.1", 80)
    c = token_store.get_or_create_token("localhost", 8080)

    assert len({a, b, c}) == 3


def test_set_token_overwrites(token_store):
    """Test: set_token sobrescribe incondicionalmente"""
    token_store.get_or_create_token("host", 80)
    token_store.set_token("host", 80, "f" * 32)

    assert token_store.get_token("host", 80) == "f" * 32
    assert token_store.get_or_create_token("host", 80) == "f" * 32


def test_clear_operations(token_store):
    """Test: clear_token / clear_all_tokens; borrar algo ausente no es error"""
    token_store.clear_token("nadie", 1)

    token_store.get_or_create_token("a", 1)
    token_store.get_or_create_token("b", 2)
    token_store.clear_token("a", 1)

    assert token_store.get_token("a", 1) is None
    assert token_store.size == 1

    token_store.clear_all_tokens()
    assert token_store.size == 0
    assert token_store.get_token("b", 2) is None
