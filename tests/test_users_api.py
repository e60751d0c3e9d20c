from unittest import mock

from app.models.event_log import EventLog
from app.models.profile import Profile
from app.services.line_client import LineApiError

from .support import ApiTestCase


class LineLoginTest(ApiTestCase):
    def test_login_creates_profile_and_token(self) -> None:
        r = self.client.post("/auth/line", json={"id_token": "valid:Uabc", "access_token": "liff"})
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["token_type"], "bearer")
        self.assertEqual(body["profile"]["id"], "Uabc")
        self.assertEqual(body["profile"]["display_name"], "name-Uabc")
        self.assertTrue(body["profile"]["is_line_friend"])

        r = self.client.get("/users/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["line_user_id"], "Uabc")
        self.assertIsNone(r.json()["family"])

    def test_login_again_keeps_stamps(self) -> None:
        self.make_profile("Uabc", stamps=4, display_name="old")
        r = self.client.post("/auth/line", json={"id_token": "valid:Uabc"})
        self.assertEqual(r.json()["profile"]["stamp_count"], 4)
        self.assertEqual(r.json()["profile"]["display_name"], "name-Uabc")
        self.assertEqual(self.line.friendship_calls, 0)

    def test_invalid_token(self) -> None:
        r = self.client.post("/auth/line", json={"id_token": "forged"})
        self.assertEqual(r.status_code, 401)

    def test_line_outage_maps_to_502(self) -> None:
        with mock.patch.object(self.line, "verify_id_token", side_effect=LineApiError("down")):
            r = self.client.post("/auth/line", json={"id_token": "valid:Uabc"})
        self.assertEqual(r.status_code, 502)
        self.assertFalse(r.json()["success"])


class MeTest(ApiTestCase):
    def test_update_me(self) -> None:
        me = self.make_profile("U1")
        r = self.client.patch(
            "/users/me", json={"view_mode": "kids", "real_name": "山田 花子"}, headers=self.auth(me)
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["view_mode"], "kids")
        self.assertEqual(r.json()["real_name"], "山田 花子")
        r = self.client.patch("/users/me", json={"view_mode": "teen"}, headers=self.auth(me))
        self.assertEqual(r.status_code, 422)

    def test_setup_role_parent(self) -> None:
        me = self.make_profile("U1", display_name="花子")
        r = self.client.post(
            "/users/me/setup-role", json={"role": "parent", "ticket_number": "123"}, headers=self.auth(me)
        )
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["role"], "parent")
        self.assertFalse(r.json()["needs_join"])

        r = self.client.get("/users/me", headers=self.auth(me))
        self.assertEqual(r.json()["family"]["family_name"], "花子の家族")
        self.assertEqual(r.json()["ticket_number"], "123")

        r = self.client.post("/users/me/setup-role", json={"role": "parent"}, headers=self.auth(me))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Already in a family")

    def test_setup_role_child(self) -> None:
        me = self.make_profile("U1")
        r = self.client.post("/users/me/setup-role", json={"role": "child"}, headers=self.auth(me))
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.json()["needs_join"])
        self.assertIsNone(self.reload(Profile, "U1").family_id)
        r = self.client.post("/users/me/setup-role", json={"role": "admin"}, headers=self.auth(me))
        self.assertEqual(r.status_code, 422)

    def test_reservation_click(self) -> None:
        me = self.make_profile("U1")
        self.client.post("/users/me/reservation-click", headers=self.auth(me))
        r = self.client.post("/users/me/reservation-click", headers=self.auth(me))
        self.assertEqual(r.json()["reservation_button_clicks"], 2)
        self.assertEqual(self.db.query(EventLog).filter_by(event_name="reservation_click").count(), 2)

    def test_reservation_click_metadata(self) -> None:
        me = self.make_profile("U1", stamps=6)
        self.client.post("/users/me/reservation-click", json={"from_page": "home"}, headers=self.auth(me))
        event = self.db.query(EventLog).filter_by(event_name="reservation_click").one()
        self.assertEqual(event.event_metadata, {"clicks": 1, "from_page": "home", "current_stamp_count": 6})


class MemoTest(ApiTestCase):
    def test_staff_sets_and_patient_reads(self) -> None:
        me = self.make_profile("U1")
        r = self.client.put(
            "/users/U1/memo",
            json={"next_visit_date": "2026-04-13", "next_memo": "フロスを忘れずに"},
            headers=self.staff(),
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["next_visit_date_label"], "2026年4月13日")

        r = self.client.get("/users/me/memo", headers=self.auth(me))
        self.assertEqual(r.json()["next_visit_date"], "2026-04-13")
        self.assertEqual(r.json()["next_memo"], "フロスを忘れずに")
        self.assertIsNotNone(r.json()["next_memo_updated_at"])

    def test_omitted_field_is_kept_and_empty_clears(self) -> None:
        self.make_profile("U1")
        self.client.put("/users/U1/memo", json={"next_visit_date": "2026-04-13", "next_memo": "a"}, headers=self.staff())
        r = self.client.put("/users/U1/memo", json={"next_memo": ""}, headers=self.staff())
        self.assertEqual(r.json()["next_visit_date"], "2026-04-13")
        self.assertIsNone(r.json()["next_memo"])

    def test_validation(self) -> None:
        self.make_profile("U1")
        r = self.client.put("/users/U1/memo", json={"next_visit_date": "2026/04/13"}, headers=self.staff())
        self.assertEqual(r.status_code, 400)
        r = self.client.put("/users/U1/memo", json={"next_visit_date": "2026-02-30"}, headers=self.staff())
        self.assertEqual(r.status_code, 400)
        r = self.client.put("/users/U1/memo", json={"next_memo": "あ" * 201}, headers=self.staff())
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Message too long")
        r = self.client.put("/users/U1/memo", json={"next_memo": "あ" * 200}, headers=self.staff())
        self.assertEqual(r.status_code, 200)

    def test_unknown_user_and_pin(self) -> None:
        self.assertEqual(self.client.get("/users/nobody/memo", headers=self.staff()).status_code, 404)
        self.assertEqual(self.client.get("/users/nobody/memo").status_code, 401)
