"""
Element-wise algebra on DenseImage.

Named equivalents of the overloaded operators of ``DenseImage`` plus the
element-wise math functions. Every function returns a new image with the
dimensions and scalar type of its (first) image operand; results computed in
floating point are converted back to that type.

Some names (``abs``, ``round``, ``pow``) deliberately mirror numpy's and
shadow the builtins inside this module.
"""

from typing import Union

import numpy as np

from .dense_image import DenseImage, Scalar, _is_scalar
from dense_image_utils.logger_config import get_logger

logger = get_logger(__name__)

Operand = Union[DenseImage, Scalar]


# ----------------------------------------------------------------------
# Arithmetic
# ----------------------------------------------------------------------

def add(first: Operand, second: Operand) -> DenseImage:
    return first + second


def subtract(first: Operand, second: Operand) -> DenseImage:
    return first - second


def multiply(first: Operand, second: Operand) -> DenseImage:
    return first * second


def divide(first: Operand, second: Operand) -> DenseImage:
    return first / second


def add_scalar(image: DenseImage, value: Scalar) -> DenseImage:
    return image + value


def subtract_scalar(image: DenseImage, value: Scalar) -> DenseImage:
    return image - value


def multiply_scalar(image: DenseImage, value: Scalar) -> DenseImage:
    return image * value


def divide_scalar(image: DenseImage, value: Scalar) -> DenseImage:
    return image / value


def negate(image: DenseImage) -> DenseImage:
    return -image


# ----------------------------------------------------------------------
# Comparisons and logic (boolean results)
# ----------------------------------------------------------------------

def less_than(first: DenseImage, second: Operand) -> DenseImage:
    return first < second


def less_equal(first: DenseImage, second: Operand) -> DenseImage:
    return first <= second


def greater_than(first: DenseImage, second: Operand) -> DenseImage:
    return first > second


def greater_equal(first: DenseImage, second: Operand) -> DenseImage:
    return first >= second


def equal(first: DenseImage, second: Operand) -> DenseImage:
    return first == second


def logical_not(mask: DenseImage) -> DenseImage:
    return ~mask


def logical_and(first: DenseImage, second: DenseImage) -> DenseImage:
    return first & second


def logical_or(first: DenseImage, second: DenseImage) -> DenseImage:
    return first | second


# ----------------------------------------------------------------------
# Element-wise math
# ----------------------------------------------------------------------

def _apply(image: DenseImage, func) -> DenseImage:
    result = DenseImage.like(image, copy_data=False)
    if result.size == 0:
        return result
    with np.errstate(all='ignore'):
        np.copyto(result.data, func(image.data), casting='unsafe')
    return result


def cos(image: DenseImage) -> DenseImage:
    return _apply(image, np.cos)


def sin(image: DenseImage) -> DenseImage:
    return _apply(image, np.sin)


def tan(image: DenseImage) -> DenseImage:
    return _apply(image, np.tan)


def asin(image: DenseImage) -> DenseImage:
    return _apply(image, np.arcsin)


def acos(image: DenseImage) -> DenseImage:
    return _apply(image, np.arccos)


def atan(image: DenseImage) -> DenseImage:
    return _apply(image, np.arctan)


def cosh(image: DenseImage) -> DenseImage:
    return _apply(image, np.cosh)


def sinh(image: DenseImage) -> DenseImage:
    return _apply(image, np.sinh)


def tanh(image: DenseImage) -> DenseImage:
    return _apply(image, np.tanh)


def exp(image: DenseImage) -> DenseImage:
    return _apply(image, np.exp)


def log(image: DenseImage) -> DenseImage:
    """Natural logarithm."""
    return _apply(image, np.log)


def log10(image: DenseImage) -> DenseImage:
    return _apply(image, np.log10)


def sqrt(image: DenseImage) -> DenseImage:
    return _apply(image, np.sqrt)


def abs(image: DenseImage) -> DenseImage:
    return _apply(image, np.abs)


def ceil(image: DenseImage) -> DenseImage:
    return _apply(image, np.ceil)


def floor(image: DenseImage) -> DenseImage:
    return _apply(image, np.floor)


def round(image: DenseImage) -> DenseImage:
    """
    Round half down on the fractional part.

    ``v - floor(v) <= 0.5`` rounds to ``floor(v)``, anything above to
    ``ceil(v)``; so 2.5 -> 2, 2.51 -> 3 and -2.5 -> -3.
    """
    def _round_half_down(values):
        lower = np.floor(values)
        return np.where(values - lower <= 0.5, lower, np.ceil(values))

    return _apply(image, _round_half_down)


def mod(image: DenseImage, divisor: float) -> DenseImage:
    """Floating remainder of each element (sign of the dividend, as fmod)."""
    return _apply(image, lambda values: np.fmod(values, divisor))


def pow(base: Operand, exponent: Operand) -> DenseImage:
    """
    Element-wise power.

    ``pow(image, p)`` raises every element to ``p``; ``pow(p, image)`` raises
    the scalar ``p`` to every element.
    """
    if isinstance(base, DenseImage) and _is_scalar(exponent):
        return _apply(base, lambda values: np.power(values.astype(np.float64), float(exponent)))
    if _is_scalar(base) and isinstance(exponent, DenseImage):
        return _apply(exponent, lambda values: np.power(float(base), values.astype(np.float64)))
    raise TypeError(
        f"pow expects an image and a scalar, got {type(base).__name__} and {type(exponent).__name__}"
    )


def pow_scalar_base(base: Scalar, image: DenseImage) -> DenseImage:
    """Raise the scalar ``base`` to every element of ``image``."""
    return pow(base, image)


def atan2(iy: DenseImage, ix: DenseImage) -> DenseImage:
    """
    Four-quadrant arctangent of ``iy / ix``.

    Elements are paired in storage order. If the element counts differ the
    result is the zero-filled copy of ``iy``.
    """
    result = DenseImage.like(iy, copy_data=False)
    if iy.size != ix.size:
        logger.debug(f"atan2: element counts differ ({iy.size} vs {ix.size}), returning zeros")
        return result
    if result.size == 0:
        return result

    with np.errstate(all='ignore'):
        phase = np.arctan2(iy.buffer, ix.buffer)
    np.copyto(result.data, phase.reshape(iy.shape, order='F'), casting='unsafe')
    return result
