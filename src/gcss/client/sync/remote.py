"""Translation of store client failures into sync errors."""

from __future__ import annotations

import contextlib
from collections.abc import Iterator

from gcss.client.api import APIError, AuthenticationError, TransportError
from gcss.client.sync.types import RemoteUnavailableError


@contextlib.contextmanager
def remote_errors(action: str) -> Iterator[None]:
    """Re-raise any APIError escaping the block as RemoteUnavailableError.

    Args:
        action: What was being attempted, for the error message.
    """
    try:
        yield
    except AuthenticationError as e:
        raise RemoteUnavailableError(
            f"Unauthorized while trying to {action}. This usually means your "
            "access token or username is incorrect, or lacks permissions."
        ) from e
    except TransportError as e:
        raise RemoteUnavailableError(f"Could not {action}: {e}") from e
    except APIError as e:
        status = f" (HTTP {e.status_code})" if e.status_code else ""
        raise RemoteUnavailableError(f"Could not {action}{status}: {e}") from e
