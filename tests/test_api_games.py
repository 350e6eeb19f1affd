from conftest import ALICE, BOB, MALLORY, STAKE, as_player
from models import NO_PARTY
from services.address_service import derive_game_address


def _create(client, identity=ALICE, stake=STAKE):
    return client.post("/api/games", json={"stake": stake}, headers=as_player(identity))


def _start(client):
    address = _create(client).json()["address"]
    client.post(f"/api/games/{address}/join", headers=as_player(BOB))
    return address


def _move(client, identity, address, move):
    return client.post(
        f"/api/games/{address}/move",
        json={"move": move},
        headers=as_player(identity),
    )


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_game(client):
    res = _create(client)
    assert res.status_code == 201
    game = res.json()
    assert game["address"] == derive_game_address(ALICE)
    assert game["player1"] == ALICE
    assert game["player2"] == NO_PARTY
    assert game["phase"] == "WAITING_FOR_PLAYER"
    assert game["move1"] == "NONE"
    assert game["move2"] == "NONE"
    assert game["winner"] == NO_PARTY
    assert game["last_result"] is None


def test_create_requires_identity_header(client):
    res = client.post("/api/games", json={"stake": STAKE})
    assert res.status_code == 422


def test_create_with_zero_stake(client):
    res = _create(client, stake=0)
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "INVALID_STAKE"


def test_create_with_uint64_max_stake(client):
    res = _create(client, stake=2 ** 64 - 1)
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "INVALID_STAKE"
    assert client.get(f"/api/players/{ALICE}/game").status_code == 404


def test_create_twice_conflicts(client):
    _create(client)
    res = _create(client)
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "GAME_ALREADY_ACTIVE"


def test_get_unknown_game(client):
    res = client.get(f"/api/games/{'0' * 64}")
    assert res.status_code == 404
    assert res.json()["detail"]["code"] == "GAME_NOT_FOUND"


def test_join_own_game(client):
    address = _create(client).json()["address"]
    res = client.post(f"/api/games/{address}/join", headers=as_player(ALICE))
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "CANNOT_PLAY_SELF"


def test_move_before_join(client):
    address = _create(client).json()["address"]
    res = _move(client, ALICE, address, "ROCK")
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "INVALID_GAME_STATE"


def test_move_by_outsider(client):
    address = _start(client)
    res = _move(client, MALLORY, address, "ROCK")
    assert res.status_code == 403
    assert res.json()["detail"]["code"] == "UNAUTHORIZED_PLAYER"


def test_none_move(client):
    address = _start(client)
    res = _move(client, ALICE, address, "NONE")
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "INVALID_MOVE"


def test_unknown_move_is_a_validation_error(client):
    address = _start(client)
    assert _move(client, ALICE, address, "LIZARD").status_code == 422


def test_double_move(client):
    address = _start(client)
    _move(client, ALICE, address, "ROCK")
    res = _move(client, ALICE, address, "PAPER")
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "MOVE_ALREADY_MADE"
    assert client.get(f"/api/games/{address}").json()["move1"] == "ROCK"


def test_full_round_reset_and_history(client):
    address = _start(client)

    _move(client, ALICE, address, "ROCK")
    game = _move(client, BOB, address, "SCISSORS").json()
    assert game["phase"] == "FINISHED"
    assert game["winner"] == ALICE
    assert game["last_result"]["move1"] == "ROCK"
    assert game["last_result"]["move2"] == "SCISSORS"
    assert game["last_result"]["outcome"] == "PLAYER1_WINS"

    res = client.post(f"/api/games/{address}/reset", headers=as_player(BOB))
    assert res.status_code == 403

    game = client.post(f"/api/games/{address}/reset", headers=as_player(ALICE)).json()
    assert game["phase"] == "IN_PROGRESS"
    assert game["round_number"] == 2
    assert game["winner"] == NO_PARTY

    _move(client, ALICE, address, "ROCK")
    game = _move(client, BOB, address, "ROCK").json()
    assert game["phase"] == "FINISHED"
    assert game["winner"] == NO_PARTY
    assert game["last_result"]["outcome"] == "DRAW"

    history = client.get(f"/api/games/{address}/history").json()
    assert [h["round_number"] for h in history] == [1, 2]
    assert [h["outcome"] for h in history] == ["PLAYER1_WINS", "DRAW"]


def test_escrow_endpoint(client):
    address = _start(client)
    escrow = client.get(f"/api/games/{address}/escrow").json()
    assert escrow["balance"] == 2 * STAKE
    assert [e["kind"] for e in escrow["entries"]] == ["DEPOSIT", "DEPOSIT"]

    _move(client, ALICE, address, "PAPER")
    _move(client, BOB, address, "ROCK")

    escrow = client.get(f"/api/games/{address}/escrow").json()
    assert escrow["balance"] == 0
    assert escrow["entries"][-1]["party"] == ALICE
    assert escrow["entries"][-1]["amount"] == 2 * STAKE


def test_player_endpoints(client):
    address = _start(client)

    created = client.get(f"/api/players/{ALICE}/game").json()
    assert created["address"] == address

    assert client.get(f"/api/players/{BOB}/game").status_code == 404

    bob_games = client.get(f"/api/players/{BOB}/games").json()
    assert [g["address"] for g in bob_games] == [address]
    assert client.get(f"/api/players/{MALLORY}/games").json() == []


def test_state_version_tracks_changes(client):
    address = _create(client).json()["address"]
    v1 = client.get(f"/api/games/{address}").json()["state_version"]
    client.post(f"/api/games/{address}/join", headers=as_player(BOB))
    v2 = client.get(f"/api/games/{address}").json()["state_version"]
    assert v2 > v1
