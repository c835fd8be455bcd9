# services/color_service.py
from typing import Sequence
import numpy as np

from ..models.tolerance import TolerancePolicy, DEFAULT_TOLERANCE


def same_color(
        a: Sequence[int],
        b: Sequence[int],
        policy: TolerancePolicy = DEFAULT_TOLERANCE,
) -> bool:
    """
    Compare two RGB(A) colours channel by channel; alpha is ignored.

    Args:
        a, b: colours as (R, G, B[, A]) 0-255 integers.
        policy: tolerances to apply.

    Returns:
        True if every channel delta is within the active threshold, which is
        ``policy.uniform`` when all three deltas are equal and
        ``policy.general`` otherwise.
    """
    d_r = abs(int(a[0]) - int(b[0]))
    d_g = abs(int(a[1]) - int(b[1]))
    d_b = abs(int(a[2]) - int(b[2]))
    t = policy.threshold_for(d_r, d_g, d_b)
    return d_r <= t and d_g <= t and d_b <= t


def match_mask(
        pixels: np.ndarray,
        reference: Sequence[int],
        policy: TolerancePolicy = DEFAULT_TOLERANCE,
) -> np.ndarray:
    """
    Vectorised ``same_color`` over an (H, W, >=3) uint8 array.
    Returns a bool mask (H, W).
    """
    ref = np.asarray(reference[:3], dtype=np.int16)
    deltas = np.abs(pixels[..., :3].astype(np.int16) - ref)    # (H,W,3), never negative

    uniform = (deltas[..., 0] == deltas[..., 1]) & (deltas[..., 1] == deltas[..., 2])
    thr = np.where(uniform, policy.uniform, policy.general)
    return (deltas <= thr[..., None]).all(axis=-1)
