"""Tests for the board blueprint."""

from __future__ import annotations

import datetime
import unittest

from matchboard import create_app
from matchboard.board.session import build_reset_document
from matchboard.board.utils import today_string
from tests.helpers import RecordingStore, SilentStore

TEST_CONFIG = {
    "TESTING": True,
    "WTF_CSRF_ENABLED": False,
    "SERVER_NAME": "localhost",
    "COUNTDOWN_INTERVAL": 3600,
}


class BoardRoutesTestCase(unittest.TestCase):
    """Test case for the board blueprint."""

    def setUp(self) -> None:
        """Set up a test client over an in-memory store reset for today."""
        self.today = today_string(datetime.datetime.now())
        self.store = RecordingStore(build_reset_document(self.today))
        self.app = create_app(TEST_CONFIG, store=self.store)
        self.board = self.app.extensions["board_session"]
        self.client = self.app.test_client()

    def tearDown(self) -> None:
        """Release the board session."""
        self.board.close()

    def _join(self, match_id="match1", **data):
        form = {"name": "Ivan", "phone": "+7 900 000", "team": "team1"}
        form.update(data)
        return self.client.post(
            f"/match/{match_id}/join", data=form, follow_redirects=True
        )

    def test_index_lists_matches(self) -> None:
        response = self.client.get("/")
        text = response.get_data(as_text=True)

        self.assertEqual(response.status_code, 200)
        for label in ("NTPA-13:00", "VTPA-15:00", "VTPa-19:00"):
            self.assertIn(label, text)
        self.assertIn("Данные обновятся через:", text)
        self.assertIn(self.board.countdown, text)

    def test_index_shows_loading_until_first_snapshot(self) -> None:
        app = create_app(TEST_CONFIG, store=SilentStore())
        try:
            response = app.test_client().get("/")
            self.assertEqual(response.status_code, 200)
            self.assertIn(b"spinner-border", response.data)
        finally:
            app.extensions["board_session"].close()

    def test_index_flashes_reset_notification(self) -> None:
        store = RecordingStore({"lastResetDate": "2000-01-01"})
        app = create_app(TEST_CONFIG, store=store)
        try:
            response = app.test_client().get("/")
            self.assertIn("Данные сброшены для нового дня!", response.get_data(as_text=True))
            self.assertEqual(store.get("lastResetDate"), self.today)
        finally:
            app.extensions["board_session"].close()

    def test_expanded_match_shows_rosters(self) -> None:
        response = self.client.get("/?expanded=match2")
        self.assertIn("Нет записей", response.get_data(as_text=True))

        response = self.client.get("/?expanded=")
        self.assertNotIn("Нет записей", response.get_data(as_text=True))

    def test_join_form_renders(self) -> None:
        response = self.client.get("/match/match1/join")
        text = response.get_data(as_text=True)
        self.assertEqual(response.status_code, 200)
        self.assertIn("Запись на матч: NTPA-13:00", text)

    def test_join_success(self) -> None:
        response = self._join(name="  Ivan  ")
        text = response.get_data(as_text=True)

        self.assertEqual(response.status_code, 200)
        self.assertIn("Вы успешно записаны!", text)
        roster = self.store.get("matches/match1/team1")
        self.assertEqual(len(roster), 1)
        self.assertEqual(roster[0]["name"], "Ivan")
        # The joined match is expanded, so the new player is listed
        self.assertIn("+7 900 000", text)

    def test_join_requires_name_first(self) -> None:
        response = self._join(name="   ", phone="", team="")
        self.assertIn("Введите ФИО", response.get_data(as_text=True))
        self.assertEqual(self.store.writes, [])

    def test_join_requires_phone(self) -> None:
        response = self._join(phone=" ")
        self.assertIn("Введите номер телефона", response.get_data(as_text=True))
        self.assertEqual(self.store.writes, [])

    def test_join_requires_team(self) -> None:
        response = self.client.post(
            "/match/match1/join", data={"name": "Ivan", "phone": "1"}
        )
        self.assertIn("Выберите команду", response.get_data(as_text=True))
        self.assertEqual(self.store.writes, [])

    def test_join_unknown_match(self) -> None:
        response = self._join(match_id="nope")
        self.assertEqual(response.status_code, 404)

    def test_join_write_failure(self) -> None:
        self.store.fail_writes = RuntimeError("permission denied")
        response = self._join()
        self.assertIn(
            "Ошибка записи: permission denied", response.get_data(as_text=True)
        )
        self.assertEqual(self.store.get("matches/match1/team1"), [])
        self.assertEqual(self.board.find_match("match1")["team1"], [])

    def test_remove_player(self) -> None:
        player = self.board.add_player("match1", "Ivan", "1", "team1").result(timeout=1)

        response = self.client.post(
            f"/match/match1/team1/{player['id']}/remove", follow_redirects=True
        )

        self.assertIn("Запись удалена!", response.get_data(as_text=True))
        self.assertEqual(self.store.get("matches/match1/team1"), [])

    def test_remove_player_write_failure(self) -> None:
        self.store.fail_writes = RuntimeError("offline")
        response = self.client.post(
            "/match/match1/team1/abc/remove", follow_redirects=True
        )
        self.assertIn("Ошибка удаления: offline", response.get_data(as_text=True))

    def test_failed_remove_keeps_player_on_board(self) -> None:
        player = self.board.add_player("match1", "Ivan", "1", "team1").result(timeout=1)
        self.store.fail_writes = RuntimeError("offline")

        response = self.client.post(
            f"/match/match1/team1/{player['id']}/remove", follow_redirects=True
        )

        self.assertIn("Ошибка удаления: offline", response.get_data(as_text=True))
        self.assertEqual(self.store.get("matches/match1/team1"), [player])
        self.assertEqual(self.board.find_match("match1")["team1"], [player])

    def test_remove_from_unknown_match_does_nothing(self) -> None:
        response = self.client.post("/match/nope/team1/abc/remove")
        self.assertEqual(response.status_code, 302)
        self.assertEqual(self.store.writes, [])

    def test_remove_unknown_team(self) -> None:
        response = self.client.post("/match/match1/team9/abc/remove")
        self.assertEqual(response.status_code, 404)

    def test_state_endpoint(self) -> None:
        response = self.client.get("/api/state")
        payload = response.get_json()

        self.assertEqual(payload["status"], "ready")
        self.assertEqual(payload["lastResetDate"], self.today)
        self.assertEqual(
            [m["id"] for m in payload["matches"]], ["match1", "match2", "match3"]
        )


if __name__ == "__main__":
    unittest.main()
