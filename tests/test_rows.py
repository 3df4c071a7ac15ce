"""Tests for decoding current and legacy score rows."""

from __future__ import annotations

from records.rows import GameRecord, RowShape, group_games, recent, resolve_row, resolve_rows


def test_five_column_row_is_current_shape() -> None:
    row = resolve_row(["12", "2024-05-01", "3", "liet", "10"])

    assert row is not None
    assert row.shape is RowShape.CURRENT
    assert (row.game_id, row.date, row.player_ref, row.leader_ref, row.vp) == ("12", "2024-05-01", "3", "liet", "10")


def test_six_column_row_is_legacy_and_drops_house() -> None:
    row = resolve_row(["7", "2023-11-02", "Paul", "Gurney Halleck", "Atreides", "9"])

    assert row is not None
    assert row.shape is RowShape.LEGACY
    assert row.player_ref == "Paul"
    assert row.leader_ref == "Gurney Halleck"
    assert row.vp == "9"


def test_current_row_keeps_player_and_leader_ids() -> None:
    row = resolve_row(["7", "2024-01-01", "p1", "feyd", "10"])

    assert row is not None
    assert (row.game_id, row.player_ref, row.leader_ref, row.vp) == ("7", "p1", "feyd", "10")


def test_legacy_row_resolves_to_the_same_shape_without_house() -> None:
    row = resolve_row(["7", "2024-01-01", "Alice", "Feyd", "Harkonnen", "10"])

    assert row is not None
    assert (row.game_id, row.player_ref, row.leader_ref, row.vp) == ("7", "Alice", "Feyd", "10")
    assert row.to_dict() == {"playerId": "Alice", "leaderId": "Feyd", "vp": "10"}
    assert "Harkonnen" not in row.to_dict().values()


def test_short_rows_are_skipped() -> None:
    assert resolve_row(["1", "2024-05-01", "3", "liet"]) is None
    assert resolve_rows([["1"], [], ["1", "d", "3", "liet", "4"]])[0].vp == "4"


def test_group_games_keeps_store_order_and_first_date() -> None:
    games = group_games(
        [
            ["1", "2024-01-01", "1", "feyd", "8"],
            ["1", "2024-01-02", "2", "liet", "11"],
            ["2", "2024-02-01", "Paul", "Muad'Dib", "Fremen", "10"],
            ["3", "2024-03-01", "1", "irulan"],
        ]
    )

    assert [game.id for game in games] == ["1", "2"]
    assert games[0].date == "2024-01-01"
    assert len(games[0].players) == 2
    assert games[1].players[0].shape is RowShape.LEGACY


def test_recent_returns_last_two_newest_first() -> None:
    games = [GameRecord(id=str(index), date="", players=()) for index in range(1, 5)]

    assert [game.id for game in recent(games)] == ["4", "3"]
    assert [game.id for game in recent(games[:1])] == ["1"]
    assert recent(games, limit=0) == []


def test_game_record_payload_uses_client_keys() -> None:
    games = group_games([["5", "2024-05-05", "2", "liet", "12"]])

    payload = games[0].to_dict()

    assert payload == {
        "id": "5",
        "date": "2024-05-05",
        "players": [{"playerId": "2", "leaderId": "liet", "vp": "12"}],
    }
