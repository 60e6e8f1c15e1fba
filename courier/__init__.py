__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'courier'
__author__ = 'Courier Developers'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .options import *
from .commands import *
from .directories import *
from .dispatch import *
from .faults import *
from .spawn import *
from .templates import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the options
__all__ += options.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the directory resolution
__all__ += directories.__all__  # type: ignore[attr-defined]
# Load the exposed API of the dispatcher
__all__ += dispatch.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the process runner
__all__ += spawn.__all__  # type: ignore[attr-defined]
# Load the exposed API of the templates
__all__ += templates.__all__  # type: ignore[attr-defined]
