"""
pledge — composable hot promises for asyncio.

    from pledge import promise             # generator sugar
    from pledge import builder as B        # sequencing engine, merge
    from pledge import ops as P            # combinators
    from pledge import lift as L           # construction
    from pledge import thenable as TH      # foreign promise-likes
"""

from pledge import builder
from pledge import lift
from pledge import ops
from pledge import thenable
from pledge._errors import ForeignRejection, PromiseCancelled, PromiseError
from pledge._policy import Policy
from pledge._promise import Promise
from pledge._types import (
    Result,
    Ok,
    Error,
    Thenable,
    Source,
    Delayed,
)
from pledge.builder import PromiseBuilder, promise

__version__ = "0.1.0"

__all__ = (
    "builder",
    "lift",
    "ops",
    "thenable",
    "Promise",
    "PromiseBuilder",
    "promise",
    "Policy",
    "PromiseError",
    "ForeignRejection",
    "PromiseCancelled",
    "Result",
    "Ok",
    "Error",
    "Thenable",
    "Source",
    "Delayed",
)
