from pydelegate.lib.delegate import Delegate
from pydelegate.lib.errors import DelegateError, DelegateErrorType
from pydelegate.lib.listener import GLOBAL_CONTEXT
from pydelegate.version import __version__

PACKAGE = __package__
VERSION = __version__

__all__ = [
    "VERSION",
    "PACKAGE",
    "GLOBAL_CONTEXT",
    Delegate.__name__,
    DelegateError.__name__,
    DelegateErrorType.__name__,
]
