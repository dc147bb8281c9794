from typing import Optional
from dataclasses import dataclass, field
from dataclasses_json import dataclass_json, CatchAll, LetterCase, Undefined

DEFAULT_TEMP_PATH = "./temp"


@dataclass_json(letter_case=LetterCase.CAMEL, undefined=Undefined.INCLUDE)
@dataclass(frozen=True)
class UploaderConfig:
    """
    Resolved uploader configuration, keyed in camelCase on the JSON side
    (`tempPath`, `srcRepo`, `destRepo`, ...).
    `*_path` fields below `dest_repo` are derived, see config_resolver.plan_paths.
    Unknown JSON keys are kept in `extras`.
    """
    temp_path: str = DEFAULT_TEMP_PATH
    src_repo: Optional[str] = None
    dest_repo: Optional[str] = None
    temp_build_path: Optional[str] = None
    src_repo_path: Optional[str] = None
    dest_repo_path: Optional[str] = None
    extras: CatchAll = field(default_factory=dict)
