"""fibsterm: a terminal client for FIBS-style talker servers."""
# pylint: disable=wildcard-import,undefined-variable
from .errors import *           # noqa
from .scanner import *          # noqa
from .channel import *          # noqa
from .session import *          # noqa
from .config import *           # noqa
from .coordinator import *      # noqa
from .accessories import get_version as __get_version

__all__ = (
    errors.__all__ +
    scanner.__all__ +
    channel.__all__ +
    session.__all__ +
    config.__all__ +
    coordinator.__all__
)  # noqa

__license__ = 'ISC'
__version__ = __get_version()
