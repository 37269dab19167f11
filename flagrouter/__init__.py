"""
Flagrouter CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

import logging

from .config import RouterConfig, load_config
from .context import Context
from .exceptions import NoExecFuncError, NoInputValueError
from .parser.tags import option
from .router import ROUTER_KEY, Router, parsed
from .signals import HelpSignal

logger = logging.getLogger("flagrouter")


__all__ = [
    "Context",
    "HelpSignal",
    "NoExecFuncError",
    "NoInputValueError",
    "ROUTER_KEY",
    "Router",
    "RouterConfig",
    "load_config",
    "option",
    "parsed",
]
