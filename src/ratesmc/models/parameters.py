"""
Composition of flat parameter vectors of nested models.

A model that owns sub-models exposes one flat vector, the concatenation of
its own parameters and those of its parts; on the way back the vector is
split by the known lengths of the parts.
"""

from typing import List, Sequence
import numpy as np

from ..exceptions import DataError


def concatenate_parameters(*parts: Sequence[float]) -> np.ndarray:
    """Concatenate parameter vectors, empty parts allowed."""
    arrays = [np.asarray(p, dtype=np.float64).ravel() for p in parts]
    if not arrays:
        return np.zeros(0)
    return np.concatenate(arrays)


def split_parameters(parameters: Sequence[float], lengths: Sequence[int]) -> List[np.ndarray]:
    """
    Split a flat parameter vector into consecutive parts.

    Args:
        parameters: Flat vector
        lengths: Length of each part

    Returns:
        List of copies, one per part

    Raises:
        DataError: If the lengths do not add up to the vector length
    """
    parameters = np.asarray(parameters, dtype=np.float64).ravel()
    if sum(lengths) != len(parameters):
        raise DataError(f"Expected {sum(lengths)} parameters, got {len(parameters)}")
    parts = []
    offset = 0
    for n in lengths:
        parts.append(parameters[offset:offset + n].copy())
        offset += n
    return parts


__all__ = ["concatenate_parameters", "split_parameters"]
