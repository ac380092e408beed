"""Strip the per-market envelope the server wraps some responses in."""
from collections.abc import Mapping
from typing import Any

from actions import descriptor_for
from errors import NormalizationError
from param_builder import UNPARSED_FORMATS


def normalize(action, body: Any, result_format: str = "json") -> Any:
    """
    Reshape a response body into the payload stored for *action*.

    Text and csv bodies pass through untouched. Per-market actions come back
    as {"<action>": payload} and are unwrapped; whole-dataset actions are
    returned as-is.
    """
    if result_format in UNPARSED_FORMATS:
        return body

    descriptor = descriptor_for(action)
    if not descriptor.envelope_key:
        return body

    if not isinstance(body, Mapping) or descriptor.envelope_key not in body:
        shape = sorted(body) if isinstance(body, Mapping) else type(body).__name__
        raise NormalizationError(
            f"{descriptor.action.value}: expected envelope key "
            f"{descriptor.envelope_key!r}, got {shape}",
            action=descriptor.action.value,
        )
    return body[descriptor.envelope_key]
