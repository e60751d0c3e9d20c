from app.models.family import Family
from app.models.profile import Profile, FamilyRole
from app.models.stamp import StampHistory, StampMethod

from .support import ApiTestCase


class FamilyLifecycleTest(ApiTestCase):
    def test_create_join_and_view(self) -> None:
        parent = self.make_profile("P1", stamps=3)
        child = self.make_profile("C1", stamps=2)

        r = self.client.post("/families", json={"family_name": "  山田家 "}, headers=self.auth(parent))
        self.assertEqual(r.status_code, 201)
        fam = r.json()
        self.assertEqual(fam["family_name"], "山田家")
        self.assertEqual(fam["representative_user_id"], "P1")

        r = self.client.post("/families/join", json={"invite_code": fam["invite_code"].lower()}, headers=self.auth(child))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(self.reload(Profile, "C1").family_role.value, "child")

        r = self.client.get("/families/me", headers=self.auth(child))
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["member_count"], 2)
        self.assertEqual(body["total_stamp_count"], 5)
        self.assertEqual([m["id"] for m in body["members"]], ["P1", "C1"])
        self.assertEqual(body["members"][1]["member_type"], "real")

    def test_join_by_family_id(self) -> None:
        parent = self.make_profile("P1")
        fam = self.make_family(parent)
        child = self.make_profile("C1")
        r = self.client.post("/families/join", json={"invite_code": fam.id}, headers=self.auth(child))
        self.assertEqual(r.status_code, 200)

    def test_join_rejections(self) -> None:
        parent = self.make_profile("P1")
        self.make_family(parent)
        other = self.make_profile("C1")
        r = self.client.post("/families/join", json={"invite_code": "NOPE"}, headers=self.auth(other))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Invalid invite code")

        r = self.client.post("/families/join", json={"invite_code": "ABCD2345"}, headers=self.auth(parent))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Already in a family")

    def test_blank_name_and_no_family(self) -> None:
        me = self.make_profile("U1")
        self.assertEqual(self.client.post("/families", json={"family_name": "  "}, headers=self.auth(me)).status_code, 400)
        r = self.client.get("/families/me", headers=self.auth(me))
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json()["error"], "No family")

    def test_rename_is_parent_only(self) -> None:
        parent = self.make_profile("P1")
        child = self.make_profile("C1")
        fam = self.make_family(parent, child)
        self.assertEqual(self.client.patch("/families/me", json={"family_name": "新"}, headers=self.auth(child)).status_code, 403)
        r = self.client.patch("/families/me", json={"family_name": "新しい家族"}, headers=self.auth(parent))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(self.reload(Family, fam.id).family_name, "新しい家族")


class ProxyMemberTest(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.parent = self.make_profile("P1")
        self.child = self.make_profile("C1")
        self.family = self.make_family(self.parent, self.child)

    def _add(self, name="たろう", ticket="T-01"):
        return self.client.post(
            "/families/members", json={"child_name": name, "ticket_number": ticket}, headers=self.auth(self.parent)
        )

    def test_add_proxy_member(self) -> None:
        r = self._add()
        self.assertEqual(r.status_code, 201)
        body = r.json()
        self.assertTrue(body["id"].startswith("manual-child-"))
        self.assertEqual(body["member_type"], "proxy")
        proxy = self.reload(Profile, body["id"])
        self.assertIsNone(proxy.line_user_id)
        self.assertEqual(proxy.view_mode.value, "kids")
        self.assertEqual(proxy.real_name, "たろう")
        self.assertEqual(proxy.ticket_number, "T-01")

    def test_child_cannot_add(self) -> None:
        r = self.client.post("/families/members", json={"child_name": "x"}, headers=self.auth(self.child))
        self.assertEqual(r.status_code, 403)

    def test_update_member(self) -> None:
        member_id = self._add().json()["id"]
        r = self.client.patch(
            f"/families/members/{member_id}", json={"child_name": "じろう"}, headers=self.auth(self.parent)
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["display_name"], "じろう")
        self.assertEqual(r.json()["real_name"], "じろう")
        self.assertEqual(r.json()["ticket_number"], "T-01")

    def test_update_member_of_other_family(self) -> None:
        other = self.make_profile("P2")
        self.make_family(other, code="ZZZZ9999")
        member_id = self._add().json()["id"]
        r = self.client.patch(f"/families/members/{member_id}", json={"child_name": "x"}, headers=self.auth(other))
        self.assertEqual(r.status_code, 403)
        r = self.client.patch("/families/members/missing", json={"child_name": "x"}, headers=self.auth(self.parent))
        self.assertEqual(r.status_code, 404)

    def test_remove_proxy_deletes_row_and_ledger(self) -> None:
        member_id = self._add().json()["id"]
        self.client.post("/stamps/slot", json={"stamps": 2, "profile_id": member_id}, headers=self.auth(self.parent))

        r = self.client.delete(f"/families/members/{member_id}", headers=self.auth(self.parent))
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.json()["deleted"])
        self.assertIsNone(self.reload(Profile, member_id))
        self.assertEqual(self.db.query(StampHistory).filter_by(user_id=member_id).count(), 0)

    def test_remove_real_member_only_unlinks(self) -> None:
        r = self.client.delete("/families/members/C1", headers=self.auth(self.parent))
        self.assertEqual(r.status_code, 200)
        self.assertFalse(r.json()["deleted"])
        child = self.reload(Profile, "C1")
        self.assertIsNotNone(child)
        self.assertIsNone(child.family_id)
        self.assertIsNone(child.family_role)

    def test_cannot_remove_parent(self) -> None:
        r = self.client.delete("/families/members/P1", headers=self.auth(self.parent))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Cannot remove parent")

    def test_child_with_blank_name_is_forbidden_first(self) -> None:
        r = self.client.post("/families/members", json={"child_name": " "}, headers=self.auth(self.child))
        self.assertEqual(r.status_code, 403)
        r = self.client.patch("/families/me", json={"family_name": " "}, headers=self.auth(self.child))
        self.assertEqual(r.status_code, 403)

    def _link(self, profile: Profile) -> None:
        profile.family_id = self.family.id
        profile.family_role = FamilyRole.CHILD
        self.db.commit()

    def test_manual_id_with_line_account_is_only_unlinked(self) -> None:
        linked = self.make_profile("manual-child-linked")
        self.assertEqual(linked.line_user_id, "manual-child-linked")
        self._link(linked)
        r = self.client.delete("/families/members/manual-child-linked", headers=self.auth(self.parent))
        self.assertEqual(r.status_code, 200)
        self.assertFalse(r.json()["deleted"])
        kept = self.reload(Profile, "manual-child-linked")
        self.assertIsNotNone(kept)
        self.assertIsNone(kept.family_id)

    def test_no_line_account_without_manual_prefix_is_only_unlinked(self) -> None:
        orphan = self.make_profile("imported-42", proxy=True)
        self.assertIsNone(orphan.line_user_id)
        self._link(orphan)
        r = self.client.delete("/families/members/imported-42", headers=self.auth(self.parent))
        self.assertEqual(r.status_code, 200)
        self.assertFalse(r.json()["deleted"])
        kept = self.reload(Profile, "imported-42")
        self.assertIsNotNone(kept)
        self.assertIsNone(kept.family_role)

    def test_profile_lookup_within_family(self) -> None:
        outsider = self.make_profile("X1")
        self.assertEqual(self.client.get("/profiles/P1", headers=self.auth(self.child)).status_code, 200)
        self.assertEqual(self.client.get("/profiles/P1", headers=self.auth(outsider)).status_code, 403)
        self.assertEqual(self.client.get("/profiles/missing", headers=self.auth(outsider)).status_code, 404)


class LedgerMethodTest(ApiTestCase):
    def test_proxy_member_history_uses_slot_method(self) -> None:
        parent = self.make_profile("P1")
        proxy = self.make_profile("manual-child-x", proxy=True)
        self.make_family(parent, proxy)
        self.client.post("/stamps/slot", json={"stamps": 1, "profile_id": proxy.id}, headers=self.auth(parent))
        entry = self.db.query(StampHistory).one()
        self.assertEqual(entry.stamp_method, StampMethod.SLOT_GAME)
