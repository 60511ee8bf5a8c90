# SPDX-License-Identifier: Apache-2.0
from abc import ABC, abstractmethod
from typing import Any, Optional


class ILogger(ABC):
    """What :class:`orb.session.PolicySession` needs from a logger.

    Keyword arguments become the structured context of the entry.
    """

    @abstractmethod
    def debug(self, msg: str, **kwargs: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def info(self, msg: str, **kwargs: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def error(self, msg: str, error: Optional[Exception] = None, **kwargs: Any) -> None:
        """Record a failure; ``error`` contributes its repr and traceback."""
        raise NotImplementedError

    @abstractmethod
    def audit(self, action: str, actor: str, outcome: str, **details: Any) -> None:
        """One entry per policy decision: what was decided, on whose behalf, with what result."""
        raise NotImplementedError
