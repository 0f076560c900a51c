"""
Op list optimization and finalization.

The optimizer rewrites a list of ops into a shorter list with the same
effect, within the tolerance allowed by the :class:`OptimizationFlags`:

- no-ops are removed
- identities are replaced by their (cheaper) identity replacement
- adjacent inverse pairs collapse into one identity replacement
- adjacent composable ops are merged
- a leading run of separable ops is baked into one half-domain 1D LUT

Passes repeat until nothing changes (at most ``OPTIMIZER_CONFIG.max_passes``).

Example:
    >>> ops = [GammaOpData(params=[2.0]), GammaOpData(params=[3.0])]
    >>> optimize_ops(ops)[0].red_params
    (6.0,)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from colorops.config import OPTIMIZER_CONFIG
from colorops.half import HALF_DOMAIN_SIZE
from colorops.ops.base import OpData, OpType
from colorops.ops.exposure_contrast import ExposureContrastOpData
from colorops.ops.gamma import GammaOpData
from colorops.ops.lut1d import (
    Lut1DOpData,
    compose_lut1d_vec,
    make_fast_lut1d_from_inverse,
    make_lookup_domain,
)
from colorops.ops.lut3d import Lut3DOpData, make_fast_lut3d_from_inverse
from colorops.ops.matrix import MatrixOpData
from colorops.types import (
    BitDepth,
    FinalizationFlags,
    LutInversionQuality,
    OptimizationFlags,
    TransformDirection,
)

logger = logging.getLogger(__name__)

# Flag that allows an adjacent inverse pair of each op type to cancel
PAIR_IDENTITY_FLAGS: dict[OpType, OptimizationFlags] = {
    OpType.GAMMA: OptimizationFlags.PAIR_IDENTITY_GAMMA,
    OpType.LOG: OptimizationFlags.PAIR_IDENTITY_LOG,
    OpType.LUT1D: OptimizationFlags.PAIR_IDENTITY_LUT1D,
    OpType.LUT3D: OptimizationFlags.PAIR_IDENTITY_LUT3D,
    OpType.RANGE: OptimizationFlags.PAIR_IDENTITY_CLAMP,
}

# Flag that allows two adjacent ops (keyed on the first) to be composed
COMPOSE_FLAGS: dict[OpType, OptimizationFlags] = {
    OpType.MATRIX: OptimizationFlags.COMP_MATRIX,
    OpType.GAMMA: OptimizationFlags.COMP_GAMMA,
    OpType.LUT1D: OptimizationFlags.COMP_LUT1D,
    OpType.LUT3D: OptimizationFlags.COMP_LUT3D,
    OpType.RANGE: OptimizationFlags.PAIR_IDENTITY_CLAMP,
}

_SEPARABLE_TYPES = (OpType.RANGE, OpType.LOG, OpType.LUT1D, OpType.CDL)
_CHEAP_TYPES = (OpType.MATRIX, OpType.RANGE)


def is_separable(op: OpData) -> bool:
    """True if the op maps each of R, G and B on its own and leaves alpha alone."""
    if op.has_channel_crosstalk():
        return False
    if isinstance(op, MatrixOpData):
        return not op.has_alpha()
    if isinstance(op, GammaOpData):
        return op.is_alpha_component_identity()
    if isinstance(op, ExposureContrastOpData):
        return not op.is_dynamic()
    return op.op_type in _SEPARABLE_TYPES


# ============================================================================
# Passes
# ============================================================================


def _remove_no_ops(ops: list[OpData]) -> bool:
    kept = [op for op in ops if not op.is_no_op()]
    changed = len(kept) != len(ops)
    ops[:] = kept
    return changed


def _replace_identities(ops: list[OpData]) -> bool:
    changed = False
    for i, op in enumerate(ops):
        if not op.is_identity():
            continue
        replacement = op.get_identity_replacement()
        if replacement != op:
            ops[i] = replacement
            changed = True
    return changed


def _remove_inverse_pairs(ops: list[OpData], flags: OptimizationFlags) -> bool:
    changed = False
    i = 0
    while i < len(ops) - 1:
        a, b = ops[i], ops[i + 1]
        flag = PAIR_IDENTITY_FLAGS.get(a.op_type)
        if flag is not None and flags & flag and a.is_inverse(b):
            logger.debug("[Optimizer] Removed inverse pair of %s ops", a.op_type.value)
            ops[i : i + 2] = [a.get_identity_replacement()]
            changed = True
        else:
            i += 1
    return changed


def _compose_pairs(ops: list[OpData], flags: OptimizationFlags) -> bool:
    changed = False
    i = 0
    while i < len(ops) - 1:
        a, b = ops[i], ops[i + 1]
        flag = COMPOSE_FLAGS.get(a.op_type)
        if flag is not None and flags & flag and a.may_compose(b):
            logger.debug(
                "[Optimizer] Composed %s with %s", a.op_type.value, b.op_type.value
            )
            ops[i : i + 2] = [a.compose(b)]
            changed = True
        else:
            i += 1
    return changed


def _compose_separable_prefix(ops: list[OpData]) -> bool:
    end = 0
    while end < len(ops) and is_separable(ops[end]):
        end += 1
    prefix = ops[:end]
    if len(prefix) < 2 or all(op.op_type in _CHEAP_TYPES for op in prefix):
        return False

    lut = compose_lut1d_vec(make_lookup_domain(BitDepth.F16), prefix)
    logger.debug(
        "[Optimizer] Baked %d separable ops into a %d-entry half-domain LUT",
        len(prefix),
        HALF_DOMAIN_SIZE,
    )
    ops[:end] = [lut]
    return True


# ============================================================================
# Public API
# ============================================================================


def optimize_ops(
    ops: Sequence[OpData],
    flags: OptimizationFlags = OPTIMIZER_CONFIG.default_flags,
) -> list[OpData]:
    """
    Return an optimized copy of an op list.

    :param ops: Ops applied in order (left untouched)
    :param flags: Rewrites the optimizer may apply
    :returns: New list of ops with the same effect
    """
    result = list(ops)
    if flags == OptimizationFlags.NONE or not result:
        return result

    for _ in range(OPTIMIZER_CONFIG.max_passes):
        changed = _remove_no_ops(result)
        if flags & OptimizationFlags.IDENTITY:
            changed |= _replace_identities(result)
            changed |= _remove_no_ops(result)
        changed |= _remove_inverse_pairs(result, flags)
        changed |= _compose_pairs(result, flags)
        if flags & OptimizationFlags.COMP_SEPARABLE_PREFIX:
            changed |= _compose_separable_prefix(result)
        if not changed:
            break
    else:
        logger.warning(
            "[Optimizer] Stopped after %d passes, op list may not be fully optimized",
            OPTIMIZER_CONFIG.max_passes,
        )

    logger.debug("[Optimizer] Reduced %d ops to %d", len(ops), len(result))
    return result


def finalize_ops(
    ops: Sequence[OpData],
    finalization: FinalizationFlags = FinalizationFlags.DEFAULT,
) -> list[OpData]:
    """
    Finalize every op of a list, ready for rendering.

    With FAST finalization, inverse LUTs whose inversion quality resolves
    to FAST are replaced by forward approximations.

    :param ops: Ops to finalize
    :param finalization: EXACT or FAST
    :returns: New list of finalized ops
    """
    result: list[OpData] = []
    for op in ops:
        if (
            finalization is FinalizationFlags.FAST
            and isinstance(op, (Lut1DOpData, Lut3DOpData))
            and op.direction is TransformDirection.INVERSE
            and op.get_concrete_inversion_quality() is LutInversionQuality.FAST
        ):
            if isinstance(op, Lut1DOpData):
                op = make_fast_lut1d_from_inverse(op)
            else:
                op = make_fast_lut3d_from_inverse(op)
        op.finalize()
        result.append(op)
    return result
