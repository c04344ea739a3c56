"""Configuration settings and constants for qrpayload.

Constants live in `config.settings`; this package re-exports them so
application code can write `from config import SALT_LENGTH`.
"""

from .settings import *  # noqa: F401,F403
from .settings import __all__  # noqa: F401
