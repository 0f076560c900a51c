"""Base class of all color operation data.

Every op carries a type tag, opaque format metadata and a lazily computed
cache ID. The cache ID is computed by :meth:`OpData.finalize` under a
per-instance lock and cleared by every setter.
"""

from __future__ import annotations

import copy
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from colorops.config import LUT_CONFIG
from colorops.exceptions import OpDataError

logger = logging.getLogger(__name__)


class OpType(Enum):
    """Tag of each operation kind, used as the dispatch key."""

    MATRIX = "Matrix"
    RANGE = "Range"
    GAMMA = "Gamma"
    LOG = "Log"
    LUT1D = "Lut1D"
    LUT3D = "Lut3D"
    EXPOSURE_CONTRAST = "ExposureContrast"
    CDL = "CDL"
    FIXED_FUNCTION = "FixedFunction"


@dataclass
class FormatMetadata:
    """Name, id and descriptions carried over from the file an op came from.

    The core never interprets these, it only keeps them through clones and
    merges them when two ops are composed.
    """

    name: str = ""
    id: str = ""
    descriptions: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.name or self.id or self.descriptions)

    def copy(self) -> FormatMetadata:
        return FormatMetadata(self.name, self.id, list(self.descriptions))

    def combine(self, other: FormatMetadata) -> FormatMetadata:
        """Merge metadata of two composed ops."""

        def join(a: str, b: str) -> str:
            if a and b:
                return f"{a} + {b}"
            return a or b

        return FormatMetadata(
            name=join(self.name, other.name),
            id=join(self.id, other.id),
            descriptions=[*self.descriptions, *other.descriptions],
        )


def format_float(value: float, precision: int | None = None) -> str:
    """Format a float for cache IDs with a fixed number of significant digits."""
    digits = LUT_CONFIG.float_precision if precision is None else precision
    return f"{value:.{digits}g}"


class OpData(ABC):
    """Abstract operation data.

    Subclasses implement validation, the identity predicates, inversion and
    (optionally) composition. Instances are mutable until placed in an op
    list; a setter called after :meth:`finalize` clears the cache ID and the
    next read of :attr:`cache_id` finalizes again.
    """

    op_type: ClassVar[OpType]

    def __init__(self, metadata: FormatMetadata | None = None):
        self.metadata = metadata if metadata is not None else FormatMetadata()
        self._cache_id = ""
        self._lock = threading.Lock()

    # ========================================================================
    # Lifecycle
    # ========================================================================

    @property
    def id(self) -> str:
        return self.metadata.id

    @property
    def is_finalized(self) -> bool:
        return bool(self._cache_id)

    @property
    def cache_id(self) -> str:
        """Fingerprint of the semantic content (finalizes on first read)."""
        if not self._cache_id:
            self.finalize()
        return self._cache_id

    def finalize(self) -> None:
        """Validate and compute the cache ID under the instance lock."""
        with self._lock:
            self.validate()
            self._finalize_content()
            self._cache_id = self._compute_cache_id()
        logger.debug("[%s] Finalized %s", self.op_type.value, self._cache_id)

    def _finalize_content(self) -> None:
        """Hook for ops that derive state before the cache ID is computed."""

    def _invalidate(self) -> None:
        self._cache_id = ""

    def clone(self) -> OpData:
        """Return an independent deep copy with a fresh lock."""
        return copy.deepcopy(self)

    def __getstate__(self) -> dict:
        state = self.__dict__.copy()
        del state["_lock"]
        return state

    def __setstate__(self, state: dict) -> None:
        self.__dict__.update(state)
        self._lock = threading.Lock()

    # ========================================================================
    # Capability set
    # ========================================================================

    @abstractmethod
    def validate(self) -> None:
        """Raise OpDataError if the parameters are not legal."""

    @abstractmethod
    def _compute_cache_id(self) -> str:
        pass

    @abstractmethod
    def is_identity(self) -> bool:
        pass

    @abstractmethod
    def is_no_op(self) -> bool:
        pass

    @abstractmethod
    def get_identity_replacement(self) -> OpData:
        """Cheapest op with the same effect as this one when it is an identity."""

    @abstractmethod
    def inverse(self) -> OpData:
        pass

    @abstractmethod
    def _equals(self, other: OpData) -> bool:
        pass

    def has_channel_crosstalk(self) -> bool:
        return False

    def is_inverse(self, other: OpData) -> bool:
        return False

    def may_compose(self, other: OpData) -> bool:
        return False

    def compose(self, other: OpData) -> OpData:
        raise OpDataError(
            f"{self.op_type.value} op can't be combined with a {other.op_type.value} op."
        )

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(self) is not type(other):
            return False
        return self._equals(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        name = f" '{self.metadata.name}'" if self.metadata.name else ""
        return f"<{type(self).__name__}{name}>"
