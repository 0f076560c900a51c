"""CPU evaluation: Numba kernels, per-op renderers and the processor."""

from colorops.cpu.processor import CPUProcessor
from colorops.cpu.renderers import RENDERERS, apply_op, apply_ops

__all__ = ["CPUProcessor", "RENDERERS", "apply_op", "apply_ops"]
