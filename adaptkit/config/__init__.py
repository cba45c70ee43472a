from .loader import load_config
from .models import (
    AdaptConfig,
    AdaptSettings,
    Framework,
    OutputConfig,
    ProjectConfig,
)

__all__ = [
    "AdaptConfig",
    "AdaptSettings",
    "Framework",
    "OutputConfig",
    "ProjectConfig",
    "load_config",
]
