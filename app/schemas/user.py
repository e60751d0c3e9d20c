from typing import Optional
from .profile import ProfileOut
from .family import FamilyOut


class MeOut(ProfileOut):
    family: Optional[FamilyOut] = None
    reservation_button_clicks: int = 0
