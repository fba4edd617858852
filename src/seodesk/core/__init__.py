"""Core seodesk components and abstractions."""

from seodesk.core.config import SeodeskConfig
from seodesk.core.exceptions import *  # noqa: F403
from seodesk.core.exceptions import __all__ as exceptions__all__
from seodesk.core.types import *  # noqa: F403
from seodesk.core.types import __all__ as types__all__

__all__ = ["SeodeskConfig"]

__all__ += exceptions__all__
__all__ += types__all__
