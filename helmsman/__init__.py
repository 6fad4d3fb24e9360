__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'helmsman'
__author__ = 'Helmsman contributors'
__license__ = 'MIT'
__version__ = "0.1.0"

from .flags import *
from .tokens import *
from .context import *
from .commands import *
from .faults import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
))

version_info = VersionInfo(0, 1, 0, "final", 0)

__all__ = (
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info",
)

# Flag declarations
__all__ += flags.__all__  # type: ignore[attr-defined]
# Token extraction
__all__ += tokens.__all__  # type: ignore[attr-defined]
# Per-dispatch context
__all__ += context.__all__  # type: ignore[attr-defined]
# Command tree, resolution and dispatch
__all__ += commands.__all__  # type: ignore[attr-defined]
# Faults
__all__ += faults.__all__  # type: ignore[attr-defined]
