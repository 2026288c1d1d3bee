"""Per-run registry of persisted workout skeletons."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from runplan.models.database_models import WorkoutSkeleton
from runplan.models.workout_library import get_library_entry
from runplan.services.errors import UnknownWorkoutBase


logger = logging.getLogger(__name__)


class SkeletonRegistry:
    """
    Create one ``TOKEN_<base>`` skeleton row per base code for a single generation run.

    The cache is keyed only by base code, so an instance must never outlive
    the generation call that created it or be shared between users.
    """

    def __init__(self, db: Session):
        self.db = db
        self._ids: dict[str, int] = {}

    def get_or_create(self, base: str) -> int:
        """Return the skeleton id for ``base``, inserting the row on first use."""
        cached = self._ids.get(base)
        if cached is not None:
            return cached

        entry = get_library_entry(base)
        if entry is None:
            raise UnknownWorkoutBase(base)

        skeleton = WorkoutSkeleton(
            name=f"TOKEN_{base}",
            base_code=base,
            type=entry["type"],
            sub_type=entry.get("sub_type"),
            description=entry["description"],
            global_description=entry.get("global_description"),
            steps=[],
        )
        self.db.add(skeleton)
        self.db.flush()

        self._ids[base] = skeleton.id
        logger.debug("Created skeleton %s -> id=%s", skeleton.name, skeleton.id)
        return skeleton.id

    def __len__(self) -> int:
        return len(self._ids)
