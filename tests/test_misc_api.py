from unittest import mock

from app.core.config import settings
from app.models.event_log import EventLog
from app.services.version_service import VersionInfo, format_version_info

from .support import ApiTestCase


class EventsApiTest(ApiTestCase):
    def test_record_event(self) -> None:
        me = self.make_profile("U1")
        r = self.client.post(
            "/events", json={"event_name": "liff_open", "metadata": {"page": "card"}}, headers=self.auth(me)
        )
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["source"], "direct")
        event = self.db.query(EventLog).one()
        self.assertEqual(event.event_metadata, {"page": "card"})
        self.assertEqual(event.user_id, "U1")

    def test_blank_event_name(self) -> None:
        me = self.make_profile("U1")
        r = self.client.post("/events", json={"event_name": " "}, headers=self.auth(me))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"success": False, "message": "イベント名を指定してください", "error": "event_name is required"})
        self.assertEqual(self.db.query(EventLog).count(), 0)


class VersionTest(ApiTestCase):
    def test_label_formats(self) -> None:
        self.assertEqual(format_version_info(VersionInfo("1.2.0", "", "", "production")), "v1.2.0")
        self.assertEqual(
            format_version_info(VersionInfo("1.2.0", "", "3f2a9c1", "development")), "v1.2.0 • dev • 3f2a9c1"
        )

    def test_version_endpoint_truncates_commit(self) -> None:
        with mock.patch.object(settings, "GIT_COMMIT", "3f2a9c1d4e5f"), mock.patch.object(settings, "APP_VERSION", "2.0.1"):
            r = self.client.get("/version")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["git_commit"], "3f2a9c1")
        self.assertEqual(r.json()["label"], "v2.0.1 • 3f2a9c1")

    def test_health(self) -> None:
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})
