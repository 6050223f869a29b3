"""
Process-wide settings for sup-network, read once from the environment.

`SUP_NETWORK_ENV` selects between a production run and the test suite.
The only behavior it changes is how chatty `setup_logging` is by default:
tests want every boot node and hand-off in the log, production does not.
"""

import logging
import os
from typing import Literal

from typing_extensions import Final

Environment = Literal["prod", "test"]

_SUPPORTED_ENVS: Final[tuple[Environment, ...]] = ("prod", "test")

SUP_NETWORK_ENV = os.environ.get("SUP_NETWORK_ENV", "prod").lower()
"""Where the package runs ('prod' or 'test'). Defaults to 'prod'."""

if SUP_NETWORK_ENV not in _SUPPORTED_ENVS:
    raise ValueError(
        f"Invalid SUP_NETWORK_ENV environment variable: '{SUP_NETWORK_ENV}'. "
        f"Supported values: {list(_SUPPORTED_ENVS)}"
    )

DEFAULT_LOG_LEVEL: Final = logging.DEBUG if SUP_NETWORK_ENV == "test" else logging.INFO
"""Level `setup_logging` uses when the caller does not choose one."""
