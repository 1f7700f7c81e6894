# tests/test_repository.py
import random

import pytest
from sqlalchemy import event

from picas_famas.bootstrap_db import database_summary
from picas_famas.repository import DBGameStore
from picas_famas.errors import ActiveGameError, DuplicatePlayerError, GameFinishedError, InvalidSequenceError
from picas_famas.models import Game as GameORM, Player as PlayerORM
from picas_famas.secret import generate_secret


def test_repository_flow(db_session):
    repo = DBGameStore(db_session, rng=random.Random(3))
    expected_secret = generate_secret(random.Random(3))

    player_id = repo.register_player("Ada", "Lovelace", 36).player_id
    started = repo.start_game(player_id)
    assert started.player_id == player_id
    gid = started.game_id

    # secret is stored verbatim and hidden while playing
    assert db_session.get(GameORM, gid).secret == expected_secret
    assert repo.get_game(gid).secret is None

    # A guess sharing no digit with the secret
    miss = "".join(sorted(set("0123456789") - set(expected_secret))[:4])
    result = repo.guess(gid, miss)
    assert (result.exact_matches, result.partial_matches, result.won) == (0, 0, False)

    # Win
    result = repo.guess(gid, expected_secret)
    assert result.won is True
    assert result.message.startswith("Congratulations")

    state = repo.get_game(gid)
    assert state.is_finished is True
    assert state.finished_at is not None
    assert state.secret == expected_secret
    assert [a.attempted_number for a in state.attempts] == [miss, expected_secret]


def test_duplicate_player_rejected(db_session):
    repo = DBGameStore(db_session)
    repo.register_player("Ada", "Lovelace", 36)
    with pytest.raises(DuplicatePlayerError):
        repo.register_player("Ada", "Lovelace", 40)
    # same first name, different last name is fine
    assert repo.register_player("Ada", "Byron", 40).player_id > 0


def test_start_game_unknown_player_returns_none(db_session):
    repo = DBGameStore(db_session)
    assert repo.start_game(999) is None


def test_only_one_active_game_per_player(db_session, monkeypatch):
    monkeypatch.setattr("picas_famas.repository.generate_secret", lambda rng=None: "0123")
    repo = DBGameStore(db_session)
    pid = repo.register_player("Grace", "Hopper", 85).player_id

    gid = repo.start_game(pid).game_id
    with pytest.raises(ActiveGameError):
        repo.start_game(pid)

    # After winning, a new game is allowed
    repo.guess(gid, "0123")
    second = repo.start_game(pid)
    assert second.game_id != gid

    games = repo.list_games(pid)
    assert [g.game_id for g in games] == [gid, second.game_id]
    assert [g.is_finished for g in games] == [True, False]


def test_guess_on_finished_game_rejected(db_session, monkeypatch):
    monkeypatch.setattr("picas_famas.repository.generate_secret", lambda rng=None: "0123")
    repo = DBGameStore(db_session)
    pid = repo.register_player("Alan", "Turing", 41).player_id
    gid = repo.start_game(pid).game_id

    assert repo.guess(gid, "0123").won is True
    with pytest.raises(GameFinishedError):
        repo.guess(gid, "0123")
    assert len(repo.get_game(gid).attempts) == 1


def test_guess_validation_and_missing_game(db_session):
    repo = DBGameStore(db_session)
    with pytest.raises(InvalidSequenceError):
        repo.guess(1, "1123")
    assert repo.guess(12345, "1234") is None
    assert repo.get_game(12345) is None
    assert repo.list_games(12345) is None
    assert repo.get_player(12345) is None


def test_get_player(db_session):
    repo = DBGameStore(db_session)
    pid = repo.register_player("Katherine", "Johnson", 101).player_id
    player = repo.get_player(pid)
    assert (player.first_name, player.last_name, player.age) == ("Katherine", "Johnson", 101)


def test_duplicate_caught_on_insert(db_session, monkeypatch):
    """
    Another request registers the same name between our lookup and our insert:
    the unique constraint fires on commit and must still come back as a duplicate.
    """
    repo = DBGameStore(db_session)
    repo.register_player("Ada", "Lovelace", 36)

    class _NoRow:
        def first(self):
            return None

    # the lookup misses the row that already exists
    monkeypatch.setattr(db_session, "execute", lambda *args, **kwargs: _NoRow())
    with pytest.raises(DuplicatePlayerError):
        repo.register_player("Ada", "Lovelace", 36)
    monkeypatch.undo()

    # session was rolled back and is usable again
    assert repo.register_player("Ada", "King", 36).player_id > 0
    names = db_session.query(PlayerORM.last_name).order_by(PlayerORM.last_name).all()
    assert [n for (n,) in names] == ["King", "Lovelace"]


def test_start_game_locks_player_row(db_session, monkeypatch):
    repo = DBGameStore(db_session)
    pid = repo.register_player("Grace", "Hopper", 85).player_id

    seen = []
    real_get = db_session.get

    def spy_get(entity, ident, **kwargs):
        seen.append((entity, kwargs.get("with_for_update")))
        return real_get(entity, ident, **kwargs)

    monkeypatch.setattr(db_session, "get", spy_get)
    repo.start_game(pid)
    assert (PlayerORM, True) in seen


def test_list_games_loads_attempts_in_bulk(db_session, monkeypatch):
    monkeypatch.setattr("picas_famas.repository.generate_secret", lambda rng=None: "0123")
    repo = DBGameStore(db_session)
    pid = repo.register_player("Alan", "Turing", 41).player_id
    for _ in range(3):
        gid = repo.start_game(pid).game_id
        repo.guess(gid, "4567")
        repo.guess(gid, "0123")

    statements = []
    bind = db_session.get_bind()

    def count(conn, cursor, statement, *args):
        statements.append(statement)

    event.listen(bind, "before_cursor_execute", count)
    try:
        games = repo.list_games(pid)
    finally:
        event.remove(bind, "before_cursor_execute", count)

    assert [len(g.attempts) for g in games] == [2, 2, 2]
    assert [a.attempted_number for a in games[0].attempts] == ["4567", "0123"]
    # player lookup + games + one batched attempts query, however many games there are
    assert len(statements) <= 3


def test_database_summary_counts_rows(db_session, monkeypatch):
    monkeypatch.setattr("picas_famas.repository.generate_secret", lambda rng=None: "0123")
    assert database_summary(db_session) == {"players": 0, "games": 0, "attempts": 0}

    repo = DBGameStore(db_session)
    pid = repo.register_player("Joan", "Clarke", 79).player_id
    gid = repo.start_game(pid).game_id
    repo.guess(gid, "4567")
    repo.guess(gid, "0123")

    assert database_summary(db_session) == {"players": 1, "games": 1, "attempts": 2}
