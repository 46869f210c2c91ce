from pydantic import BaseModel

from changelog_browser.configs.constants import Category
from changelog_browser.releases.models import Release


class ChangeItemResponse(BaseModel):
    text: str
    category: Category
    platform: str | None = None


class ReleaseResponse(BaseModel):
    version: str
    name: str
    date: str
    prerelease: bool
    categories: list[Category]
    items: list[ChangeItemResponse]

    @classmethod
    def from_model(cls, release: Release) -> "ReleaseResponse":
        return cls(
            version=release.version,
            name=release.name,
            date=release.date,
            prerelease=release.prerelease,
            categories=release.categories,
            items=[
                ChangeItemResponse(
                    text=item.text, category=item.category, platform=item.platform
                )
                for item in release.items
            ],
        )


class ReleaseListResponse(BaseModel):
    releases: list[ReleaseResponse]
    total_releases: int  # before filtering
    matching_releases: int


class VersionInfo(BaseModel):
    version: str | None
    buildTimestamp: int
