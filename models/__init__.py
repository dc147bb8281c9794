from .config import UploaderConfig, DEFAULT_TEMP_PATH
from .action import PublishAction
from .report import RunReport

__all__ = ['UploaderConfig', 'DEFAULT_TEMP_PATH', 'PublishAction', 'RunReport']
