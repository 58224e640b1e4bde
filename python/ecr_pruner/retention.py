#!/usr/bin/env python3
"""
Retention policy for versioned container images.

Images tagged ``version-<semver>`` are ordered by semantic version and only the
newest ones are kept. Every other image (untagged, tagged with anything else,
or tagged with an unparsable version) is pinned and never deleted.
"""

from typing import Dict, List, Sequence, Set, Tuple

import semver

from ecr_pruner.logging_utils import get_logger
from ecr_pruner.models import DEFAULT_VERSION_PREFIX, ImageId, VersionTag, parse_tag

logger = get_logger(__name__)

DEFAULT_KEEP_VERSIONS = 20


def compute_deletable(
    images: Sequence[ImageId],
    keep: int = DEFAULT_KEEP_VERSIONS,
    prefix: str = DEFAULT_VERSION_PREFIX,
) -> List[ImageId]:
    """Return the images of one repository that are eligible for deletion.

    Images are identified by digest: a digest that carries a pinned tag or one
    of the ``keep`` newest version tags is retained under all of its tags.

    Args:
        images: Full image list of a repository (one entry per digest/tag pair)
        keep: Number of newest versioned images to retain
        prefix: Tag prefix marking versioned images

    Returns:
        Deletable images, at most one entry per digest
    """
    if keep < 1:
        raise ValueError(f"keep must be a positive integer, got: {keep}")

    pinned: Set[str] = set()
    versioned: List[Tuple[semver.Version, ImageId]] = []

    for image in images:
        parsed = parse_tag(image.tag, prefix)
        if isinstance(parsed, VersionTag):
            versioned.append((parsed.version, image))
        else:
            if parsed.tag and parsed.tag.startswith(prefix):
                logger.debug(f"Tag {parsed.tag} has no valid semantic version; treating it as pinned")
            pinned.add(image.digest)

    # Stable sort: equal versions keep their listing order
    versioned.sort(key=lambda entry: entry[0])
    retained = {image.digest for _, image in versioned[-keep:]}

    deletable: Dict[str, ImageId] = {}
    for image in images:
        if image.digest in pinned or image.digest in retained:
            continue
        deletable.setdefault(image.digest, image)

    return list(deletable.values())
