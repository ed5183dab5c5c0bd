#!/usr/bin/env python3
"""
tag_reconciler.py
--------------------
Attach or replace the tags of a dream from raw tag descriptors.

A descriptor names a tag by (name, yomi, category). Each one is resolved
with TagManager.find_or_create, so repeating a descriptor, or naming a
tag the user already has, never produces duplicates.

The reconciler never raises: it reports a ServiceResult and leaves the
rollback to whoever owns the transaction.

Usage:
    reconciler = TagReconciler(tag_manager, logger)
    result = reconciler.replace(dream, [
        {"name": "母", "yomi": "はは", "category": "person"},
        {"name": "学校", "yomi": "がっこう", "category": "place"},
    ])
    if result.failed:
        raise result.error
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from dreamdiary.core.exceptions import ReconciliationError, ValidationError
from dreamdiary.core.logging_manager import DreamDiaryLogger, safe_logger
from dreamdiary.core.results import ServiceResult
from dreamdiary.database.managers import TagManager
from dreamdiary.database.models import Dream, Tag


@dataclass(frozen=True)
class TagDescriptor:
    """Raw description of a tag as submitted alongside a dream."""

    name: Any
    yomi: Any = None
    category: Any = None

    @classmethod
    def from_value(cls, value: Any) -> Optional["TagDescriptor"]:
        """
        Build a descriptor from a TagDescriptor or a mapping.

        Returns:
            TagDescriptor, or None when the value cannot describe a tag
            (not a mapping, or an empty one)
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping) or not value:
            return None
        return cls(
            name=value.get("name"),
            yomi=value.get("yomi"),
            category=value.get("category"),
        )

    @classmethod
    def parse(cls, spec: str) -> "TagDescriptor":
        """
        Parse the ``NAME:YOMI:CATEGORY`` form used on the command line.

        Raises:
            ValidationError: If the text does not have three parts
        """
        parts = [part.strip() for part in spec.split(":")]
        if len(parts) != 3:
            raise ValidationError(
                f"Tag must be given as NAME:YOMI:CATEGORY, got '{spec}'"
            )
        return cls(name=parts[0], yomi=parts[1], category=parts[2])


class TagReconciler:
    """
    Reconciles a dream's tag associations with a list of descriptors.

    Attributes:
        tags: TagManager bound to the current session
        logger: Optional logger
    """

    def __init__(self, tags: TagManager, logger: Optional[DreamDiaryLogger] = None):
        self.tags = tags
        self.logger = logger

    def attach(
        self, dream: Dream, descriptors: Optional[Iterable[Any]]
    ) -> ServiceResult[List[Tag]]:
        """
        Add the described tags to a dream, keeping its existing ones.

        Args:
            dream: Persisted dream
            descriptors: TagDescriptors or mappings with name/yomi/category;
                None or empty means nothing to do. Malformed items are
                skipped.

        Returns:
            Success with the dream's tags, or a failure carrying the field
            messages (invalid descriptor) or a ReconciliationError
        """
        if not descriptors:
            return ServiceResult.ok(list(dream.tags))

        try:
            for raw in descriptors:
                descriptor = TagDescriptor.from_value(raw)
                if descriptor is None:
                    safe_logger(self.logger).log_debug(
                        "Skipping malformed tag descriptor",
                        {"dream_id": dream.id, "type": type(raw).__name__},
                    )
                    continue

                tag = self.tags.find_or_create(
                    dream.user, descriptor.name, descriptor.yomi, descriptor.category
                )
                if tag not in dream.tags:
                    dream.tags.append(tag)

            self.tags.session.flush()

        except ValidationError as e:
            safe_logger(self.logger).log_warning(
                "Invalid tag descriptor", {"dream_id": dream.id, "errors": e.errors}
            )
            return ServiceResult.from_exception(e)

        except Exception as e:
            error = ReconciliationError(f"Failed to attach tags: {e}")
            safe_logger(self.logger).log_error(
                e, {"operation": "attach_tags", "dream_id": dream.id}
            )
            return ServiceResult.from_exception(error)

        return ServiceResult.ok(list(dream.tags))

    def replace(
        self, dream: Dream, descriptors: Optional[Iterable[Any]]
    ) -> ServiceResult[List[Tag]]:
        """
        Make the dream's tags exactly the described ones.

        An empty list leaves the dream untagged.
        """
        try:
            dream.tags.clear()
            self.tags.session.flush()
        except Exception as e:
            error = ReconciliationError(f"Failed to attach tags: {e}")
            safe_logger(self.logger).log_error(
                e, {"operation": "clear_tags", "dream_id": dream.id}
            )
            return ServiceResult.from_exception(error)

        return self.attach(dream, descriptors)
