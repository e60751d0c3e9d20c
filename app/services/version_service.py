from dataclasses import dataclass
from ..core.config import settings


@dataclass
class VersionInfo:
    version: str
    build_date: str
    git_commit: str
    env: str


def get_version_info() -> VersionInfo:
    return VersionInfo(
        version=settings.APP_VERSION or "1.0.0",
        build_date=settings.BUILD_DATE or "",
        git_commit=(settings.GIT_COMMIT or "")[:7],
        env=settings.ENVIRONMENT,
    )


def format_version_info(info: VersionInfo) -> str:
    """e.g. ``v1.2.0 • dev • 3f2a9c1``"""
    parts = [f"v{info.version}"]
    if info.env == "development":
        parts.append("dev")
    if info.git_commit:
        parts.append(info.git_commit)
    return " • ".join(parts)
