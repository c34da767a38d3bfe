"""Siding calculator configuration editor.

- **models**: Pydantic models for material rates, height multipliers and settings
- **store**: Pure configuration transitions and the session store wrapping them
- **artifact**: The ``config.js`` module format and its base64 transport encoding
- **github_client**: Repository contents API client
- **publisher**: Single-flight read-then-conditional-write publishing
- **target**: GitHub target settings and the local key/value storage behind them
- **gui**: NiceGUI editor pages
"""

from .models import Configuration, default_configuration
from .publisher import ConfigPublisher, PublishStatus
from .store import ConfigurationStore
from .version import __version__

__all__ = [
    "__version__",
    "Configuration",
    "ConfigurationStore",
    "ConfigPublisher",
    "PublishStatus",
    "default_configuration",
]
