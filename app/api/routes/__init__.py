from fastapi import APIRouter
from . import auth, users, profiles, families, stamps, rewards, surveys, events, utils

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Auth"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
router.include_router(families.router, prefix="/families", tags=["Families"])
router.include_router(stamps.router, prefix="/stamps", tags=["Stamps"])
router.include_router(rewards.router, prefix="/rewards", tags=["Rewards"])
router.include_router(surveys.router, prefix="/surveys", tags=["Surveys"])
router.include_router(events.router, prefix="/events", tags=["Events"])
router.include_router(utils.router, tags=["Utils"])
