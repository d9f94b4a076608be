"""Public API of the :mod:`gale` package."""

from . import compiler as _compiler
from . import constants as _constants
from .compiler import *  # noqa: F401,F403
from .constants import *  # noqa: F401,F403

__all__ = []
__all__ += getattr(_constants, "__all__", [])
__all__ += getattr(_compiler, "__all__", [])
