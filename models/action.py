from enum import Enum
from typing import Optional


class PublishAction(Enum):
    UPLOAD_POSTS = "1"  # posts/ and slides/ only
    UPLOAD_ALL = "2"
    ABORT = "3"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def from_choice(cls, choice: Optional[str]) -> Optional["PublishAction"]:
        """Map a raw prompt answer to an action, None if it names no action."""
        try:
            return cls(choice)
        except ValueError:
            return None


_DESCRIPTIONS = {
    PublishAction.UPLOAD_POSTS: "Upload changed files in posts/slides only.",
    PublishAction.UPLOAD_ALL: "Upload all changed files.",
    PublishAction.ABORT: "Abort and exit.",
}
