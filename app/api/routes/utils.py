from fastapi import APIRouter

from ...schemas.event import VersionOut
from ...services.version_service import get_version_info, format_version_info

router = APIRouter()


@router.get("/version", response_model=VersionOut)
def version():
    info = get_version_info()
    return VersionOut(
        version=info.version,
        build_date=info.build_date or None,
        git_commit=info.git_commit or None,
        env=info.env,
        label=format_version_info(info),
    )


@router.get("/health")
def health():
    return {"status": "ok"}
