from typing import Optional
from dataclasses import dataclass
from dataclasses_json import dataclass_json

from .action import PublishAction


@dataclass_json
@dataclass
class RunReport:
    """What a single upload run ended up doing, printed at the end of the run."""
    src_repo_path: str
    dest_repo_path: str
    action: Optional[PublishAction] = None
    published: bool = False
    publish_error: Optional[str] = None

    def __str__(self):
        return f"Source folder = {self.src_repo_path}\nDestination folder = {self.dest_repo_path}"
