from __future__ import annotations

from typing import Optional

from config.constants import REASONING_CLOSE_TAG, REASONING_OPEN_TAG
from utils.logging import get_logger

logger = get_logger(__name__)


class LabelExtractor:
    """Turns a free-form model completion into a clean label string."""

    def __init__(
        self,
        open_tag: str = REASONING_OPEN_TAG,
        close_tag: str = REASONING_CLOSE_TAG,
    ):
        self.open_tag = open_tag
        self.close_tag = close_tag

    def clean(self, raw: Optional[str]) -> str:
        """Trim the completion and drop any leading reasoning block.

        The label is not checked against the requested categories; whatever
        the model answered after the reasoning block is kept verbatim.
        """
        result = (raw or "").strip()
        if self.open_tag in result and self.close_tag in result:
            result = result.split(self.close_tag)[-1].strip()
            logger.debug("Stripped reasoning block, kept %d chars", len(result))
        return result


__all__ = ["LabelExtractor"]
