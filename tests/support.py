import unittest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db, get_line
from app.core.config import settings
from app.db.base import Base
from app.main import app
from app.models.profile import Profile, FamilyRole
from app.models.family import Family
from app.services.line_client import LineIdentity, InvalidLineToken
from app.services.security import create_access_token


class FakeLineClient:
    """Accepts id tokens of the form ``valid:<line user id>``."""

    def __init__(self, friend: bool | None = True) -> None:
        self.friend = friend
        self.friendship_calls = 0

    def verify_id_token(self, id_token: str) -> LineIdentity:
        if not id_token.startswith("valid:"):
            raise InvalidLineToken("id token rejected")
        user_id = id_token.split(":", 1)[1]
        return LineIdentity(user_id=user_id, display_name=f"name-{user_id}", picture_url="https://example.com/p.png")

    def get_friendship(self, access_token: str):
        self.friendship_calls += 1
        return self.friend


class DbTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)
        self.db = self.SessionLocal()

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()

    def make_profile(self, user_id: str, *, stamps: int = 0, proxy: bool = False, **fields) -> Profile:
        profile = Profile(
            id=user_id,
            line_user_id=None if proxy else user_id,
            display_name=fields.pop("display_name", user_id),
            stamp_count=stamps,
            visit_count=0,
            **fields,
        )
        self.db.add(profile)
        self.db.commit()
        return profile

    def make_family(self, parent: Profile, *children: Profile, code: str = "ABCD2345") -> Family:
        fam = Family(family_name="テスト家族", invite_code=code, representative_user_id=parent.id)
        self.db.add(fam)
        self.db.flush()
        parent.family_id = fam.id
        parent.family_role = FamilyRole.PARENT
        for child in children:
            child.family_id = fam.id
            child.family_role = FamilyRole.CHILD
        self.db.commit()
        return fam

    def reload(self, model, ident):
        self.db.expire_all()
        return self.db.get(model, ident)


class ApiTestCase(DbTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.line = FakeLineClient()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_line] = lambda: self.line
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        super().tearDown()

    def auth(self, profile_or_id) -> dict:
        sub = profile_or_id if isinstance(profile_or_id, str) else profile_or_id.id
        return {"Authorization": f"Bearer {create_access_token(sub)}"}

    def staff(self) -> dict:
        return {"X-Staff-Pin": settings.STAFF_PIN}
