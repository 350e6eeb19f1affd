import re

from services.address_service import derive_game_address


def test_address_is_deterministic():
    assert derive_game_address("alice") == derive_game_address("alice")


def test_distinct_creators_do_not_collide():
    assert derive_game_address("alice") != derive_game_address("bob")


def test_tag_namespaces_the_address():
    assert derive_game_address("alice", "game") != derive_game_address("alice", "other")


def test_address_is_hex_sha256():
    assert re.fullmatch(r"[0-9a-f]{64}", derive_game_address("alice"))
