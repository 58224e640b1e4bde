"""
Data types shared by the retention filter and the cleanup orchestrator.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import semver


DEFAULT_VERSION_PREFIX = "version-"


@dataclass(frozen=True)
class ImageId:
    """One image reference in a repository: a digest and an optional tag"""

    digest: str
    tag: Optional[str] = None

    @classmethod
    def from_ecr(cls, image_id: Dict[str, Any]) -> "ImageId":
        """Build from an ECR ``imageIds`` entry"""
        return cls(digest=image_id["imageDigest"], tag=image_id.get("imageTag"))


@dataclass(frozen=True)
class PinnedTag:
    """Tag that is never eligible for deletion (includes untagged images)"""

    tag: Optional[str]


@dataclass(frozen=True)
class VersionTag:
    """Tag carrying a semantic version after the version prefix"""

    tag: str
    version: semver.Version


ParsedTag = Union[PinnedTag, VersionTag]


def parse_version(text: str) -> Optional[semver.Version]:
    """Parse a semantic version, returning None when it is malformed.

    A single leading ``v`` or ``=`` is accepted.
    """
    text = text.strip()
    if text[:1] in ("v", "="):
        text = text[1:]
    try:
        return semver.Version.parse(text)
    except (ValueError, TypeError):
        return None


def parse_tag(tag: Optional[str], prefix: str = DEFAULT_VERSION_PREFIX) -> ParsedTag:
    """Classify a tag as pinned or versioned.

    Tags with the version prefix but no valid semantic version are pinned.
    """
    if not tag or not tag.startswith(prefix):
        return PinnedTag(tag)
    version = parse_version(tag[len(prefix):])
    if version is None:
        return PinnedTag(tag)
    return VersionTag(tag, version)


class OutcomeStatus(Enum):
    CLEANED = "cleaned"
    SKIPPED = "skipped"
    ERRORED = "errored"


@dataclass
class RepositoryOutcome:
    """Result of processing one repository"""

    repository: str
    status: OutcomeStatus
    deleted: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class Summary:
    """Aggregate counts for a cleanup run"""

    cleaned: int
    skipped: int
    errored: int
    total: int
    deleted: int = 0
    dry_run: bool = False
    outcomes: List[RepositoryOutcome] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: List[RepositoryOutcome], dry_run: bool = False) -> "Summary":
        """Fold per-repository outcomes into run totals"""
        return cls(
            cleaned=sum(1 for o in outcomes if o.status is OutcomeStatus.CLEANED),
            skipped=sum(1 for o in outcomes if o.status is OutcomeStatus.SKIPPED),
            errored=sum(1 for o in outcomes if o.status is OutcomeStatus.ERRORED),
            total=len(outcomes),
            deleted=sum(o.deleted for o in outcomes),
            dry_run=dry_run,
            outcomes=list(outcomes),
        )

    @property
    def failed_repositories(self) -> List[str]:
        return [o.repository for o in self.outcomes if o.status is OutcomeStatus.ERRORED]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cleaned": self.cleaned,
            "skipped": self.skipped,
            "errored": self.errored,
            "total": self.total,
            "deleted": self.deleted,
            "dry_run": self.dry_run,
            "repositories": [o.to_dict() for o in self.outcomes],
        }
