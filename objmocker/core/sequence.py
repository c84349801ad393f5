"""Builds lists of independently filled instances."""

import logging
from typing import TYPE_CHECKING, Any, List, Optional

if TYPE_CHECKING:
    from .filler import ObjectFiller


logger = logging.getLogger(__name__)


class SequenceBuilder:
    """Produces ``count`` freshly filled instances of a class."""

    def __init__(self, filler: "ObjectFiller"):
        self.filler = filler

    def build(self, cls: type, count: Optional[int] = None) -> List[Any]:
        """Build a list of filled instances.

        ``count`` defaults to the configured ``list_count``. A one-shot
        configuration pending for ``cls`` applies to every element and is
        consumed by this call.
        """
        if count is None:
            count = self.filler.store.defaults.list_count
        if count < 0:
            raise ValueError(f"Cannot build a list of {count} {cls.__name__} instances")

        type_config = self.filler.store.resolve(cls)
        logger.info(f"Generating {count} instances of {cls.__name__}")
        return [self.filler.fill_with(cls, type_config) for _ in range(count)]
