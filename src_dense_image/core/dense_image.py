"""
Dense multi-channel image container.

This module provides ``DenseImage``, a (row, column, channel) numeric array
that owns a single contiguous buffer. Elements are laid out channel-major,
then column-major, with the row index varying fastest:

    index(row, col, channel) = channel * (height * width) + col * height + row

which is exactly the memory order of a Fortran-ordered numpy array of shape
``(height, width, channels)``. Filtering, resizing and transposition rely on
this layout, so every operation that replaces the buffer keeps it
Fortran-contiguous.

Failures never raise: an allocation that cannot be satisfied leaves the image
empty, a shape mismatch turns an operation into a no-op (or a default result,
or ``False`` for methods reporting success), and invalid parameters yield an
empty or zero-filled image. Each of these is reported at DEBUG level through
the library logger.
"""

import copy as _copy
import numbers
from typing import Tuple, Optional, Union, Dict, Any

import numpy as np
import pandas as pd

from dense_image_utils.logger_config import get_logger

logger = get_logger(__name__)

Scalar = Union[int, float, bool, np.number, np.bool_]
Region = Tuple[slice, slice, slice]


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (numbers.Number, np.number, np.bool_))


def _apply_into(ufunc, out: np.ndarray, *operands) -> None:
    """
    Evaluate ``ufunc`` element-wise into ``out`` with C-style conversion.

    numpy has no boolean subtract or negative, so boolean results are
    computed on int8 and converted back (non-zero is True).
    """
    with np.errstate(all='ignore'):
        if out.dtype == np.bool_:
            widened = [np.asarray(operand).astype(np.int8) if np.asarray(operand).dtype == np.bool_ else operand
                       for operand in operands]
            np.copyto(out, ufunc(*widened), casting='unsafe')
        else:
            ufunc(*operands, out=out, casting='unsafe')


def resolve_region(
    shape: Tuple[int, int, int],
    row_lo: int = -1,
    row_hi: int = -1,
    column_lo: int = -1,
    column_hi: int = -1,
    channel_lo: int = -1,
    channel_hi: int = -1
) -> Optional[Region]:
    """
    Resolve inclusive region bounds against an image shape.

    A negative lower bound means the first index of the axis, a negative upper
    bound the last one, and any bound at or past the extent is clamped to the
    last index.

    Args:
        shape: (height, width, channels) of the image
        row_lo, row_hi, column_lo, column_hi, channel_lo, channel_hi: inclusive bounds

    Returns:
        Optional[Region]: Slices selecting the region, or None when the
        resolved extent is non-positive on any axis
    """
    bounds = ((row_lo, row_hi), (column_lo, column_hi), (channel_lo, channel_hi))
    slices = []
    for extent, (lo, hi) in zip(shape, bounds):
        if extent <= 0:
            return None
        if lo < 0:
            lo = 0
        if lo >= extent:
            lo = extent - 1
        if hi < 0 or hi >= extent:
            hi = extent - 1
        if hi - lo + 1 <= 0:
            return None
        slices.append(slice(lo, hi + 1))
    return tuple(slices)


class DenseImage:
    """
    Dense (height, width, channels) image with an owned contiguous buffer.

    The scalar type is a numpy dtype (``float64`` by default); boolean masks
    are DenseImage instances with ``dtype=bool``. Arithmetic and comparison
    operators are overloaded per element, see ``src_dense_image.core.algebra``
    for the named-function equivalents.

    Examples:
        >>> image = DenseImage(4, 4, 1)
        >>> image.fill(5)
        >>> (image + 1).at(0, 0)
        6.0
    """

    # Make numpy defer to our reflected operators (e.g. np.float64(2) * image)
    __array_ufunc__ = None
    # Comparison operators return masks, so images are not hashable
    __hash__ = None

    def __init__(
        self,
        height: int = 0,
        width: int = 0,
        channels: Optional[int] = None,
        dtype: Any = np.float64
    ):
        """
        Create an image of the given dimensions, filled with zeros.

        Args:
            height: Number of rows (non-positive values give an empty image)
            width: Number of columns
            channels: Number of channels (default: 1 for a non-empty
                height/width, otherwise 0)
            dtype: Scalar type of the elements
        """
        if channels is None:
            channels = 1 if (height > 0 and width > 0) else 0
        self._dtype = np.dtype(dtype)
        self._data = self._allocate(height, width, channels)

    def _allocate(self, height: int, width: int, channels: int) -> np.ndarray:
        dims = tuple(int(d) if d > 0 else 0 for d in (height, width, channels))
        try:
            return np.zeros(dims, dtype=self._dtype, order='F')
        except (MemoryError, ValueError) as e:
            logger.warning(f"Could not allocate {dims} image of {self._dtype}, image left empty: {e}")
            return np.zeros((0, 0, 0), dtype=self._dtype, order='F')

    # ------------------------------------------------------------------
    # Alternative constructors and copies
    # ------------------------------------------------------------------

    @classmethod
    def like(
        cls,
        other: 'DenseImage',
        copy_data: bool = True,
        dtype: Any = None
    ) -> 'DenseImage':
        """
        Create an image with the same dimensions as ``other``.

        Args:
            other: Source image
            copy_data: Copy the source values if True, otherwise zero-fill
                (the shape-only copy used as a scratch result)
            dtype: Scalar type of the new image (default: the source type);
                values are converted with numpy's unsafe cast

        Returns:
            DenseImage: The new image; empty if the source is empty
        """
        image = cls(dtype=other.dtype if dtype is None else dtype)
        if other.size == 0:
            return image

        image._data = image._allocate(*other.shape)
        if image.shape != other.shape:
            return image

        if copy_data:
            np.copyto(image._data, other._data, casting='unsafe')
        return image

    @classmethod
    def from_array(cls, array: np.ndarray, dtype: Any = None) -> 'DenseImage':
        """
        Create an image holding a copy of a numpy array.

        Args:
            array: 2D (height, width) or 3D (height, width, channels) array
                indexed as [row, column(, channel)]
            dtype: Scalar type (default: the array's dtype)

        Returns:
            DenseImage: Image owning a Fortran-ordered copy of the values
        """
        values = np.asarray(array)
        if values.ndim == 2:
            values = values[:, :, np.newaxis]
        if values.ndim != 3:
            raise ValueError(f"Expected a 2D or 3D array, got shape {values.shape}")

        image = cls(dtype=values.dtype if dtype is None else dtype)
        if values.size == 0:
            return image
        image._data = image._allocate(*values.shape)
        if image.shape == values.shape:
            np.copyto(image._data, values, casting='unsafe')
        return image

    def copy(self) -> 'DenseImage':
        return DenseImage.like(self)

    def astype(self, dtype: Any) -> 'DenseImage':
        """Return a copy converted element-wise to another scalar type."""
        return DenseImage.like(self, dtype=dtype)

    def __copy__(self) -> 'DenseImage':
        return self.copy()

    def __deepcopy__(self, memo: Dict[int, Any]) -> 'DenseImage':
        return self.copy()

    def to_numpy(self) -> np.ndarray:
        """Return a (height, width, channels) copy of the values."""
        return self._data.copy(order='F')

    # ------------------------------------------------------------------
    # Dimensions and storage
    # ------------------------------------------------------------------

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def channels(self) -> int:
        return self._data.shape[2]

    @property
    def size(self) -> int:
        return self._data.size

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self._data.shape

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def data(self) -> np.ndarray:
        """The owned (height, width, channels) buffer, Fortran ordered."""
        return self._data

    @property
    def buffer(self) -> np.ndarray:
        """Flat view of the buffer in storage order."""
        return self._data.reshape(-1, order='F')

    def get_dimensions(self) -> Tuple[int, int, int]:
        return self._data.shape

    def is_empty(self) -> bool:
        return self._data.size == 0

    def linear_index(self, row: int, column: int, channel: int = 0) -> int:
        """Position of (row, column, channel) in the flat storage buffer."""
        return channel * self.height * self.width + column * self.height + row

    def at(self, row: int, column: int, channel: int = 0) -> Scalar:
        return self._data[row, column, channel]

    def set_at(self, value: Scalar, row: int, column: int, channel: int = 0) -> None:
        self._data[row, column, channel] = value

    def __getitem__(self, key):
        if not isinstance(key, tuple) or len(key) not in (2, 3):
            raise TypeError("DenseImage is indexed as image[row, column] or image[row, column, channel]")
        if len(key) == 2:
            key = key + (0,)
        return self._data[key]

    def __setitem__(self, key, value) -> None:
        if not isinstance(key, tuple) or len(key) not in (2, 3):
            raise TypeError("DenseImage is indexed as image[row, column] or image[row, column, channel]")
        if len(key) == 2:
            key = key + (0,)
        self._data[key] = value

    def reset_dimensions(self, height: int, width: int, channels: int = 1) -> None:
        """
        Discard the current buffer and allocate a zero-filled one.

        Any non-positive dimension is clamped to 0, which leaves the image empty.
        """
        self._data = self._allocate(height, width, channels)

    def reshape(self, height: int, width: int, channels: int = 1) -> None:
        """
        Reinterpret the buffer with new dimensions without moving any value.

        Only legal when ``height * width * channels`` equals the current size;
        otherwise the image is left unchanged.
        """
        if min(height, width, channels) < 0 or height * width * channels != self.size:
            logger.debug(f"reshape to {(height, width, channels)} ignored for image of size {self.size}")
            return
        self._data = self._data.reshape((height, width, channels), order='F')

    def normalize_intensity_range(self) -> None:
        """Rescale all values to [0, 1]; no-op when empty or constant."""
        if self.size == 0:
            return

        min_value = self._data.min()
        max_value = self._data.max()
        if min_value == max_value:
            return

        with np.errstate(all='ignore'):
            scaled = (self._data.astype(np.float64) - float(min_value)) / (float(max_value) - float(min_value))
            np.copyto(self._data, scaled, casting='unsafe')

    # ------------------------------------------------------------------
    # Assignment and copying methods
    # ------------------------------------------------------------------

    def fill(self, value: Scalar) -> 'DenseImage':
        """Set every element to ``value``."""
        self._data[...] = value
        return self

    def assign(self, other: 'DenseImage') -> 'DenseImage':
        """
        Take over the dimensions and values of another image.

        The receiver keeps its own scalar type; values are converted. An empty
        source leaves the receiver unchanged.
        """
        if other is self or other.size == 0:
            return self

        data = self._allocate(*other.shape)
        if data.shape != other.shape:
            self._data = data
            return self
        np.copyto(data, other._data, casting='unsafe')
        self._data = data
        return self

    def _replace_with(self, other: 'DenseImage') -> None:
        # Unlike assign(), an empty source empties the receiver
        if other.size == 0:
            self._data = self._allocate(*other.shape)
            return
        self.assign(other)

    def copy_masked(self, mask: 'DenseImage', source: Union['DenseImage', Scalar]) -> bool:
        """
        Copy values wherever ``mask`` is true.

        Args:
            mask: Boolean image with the receiver's dimensions
            source: Image with the receiver's dimensions, or a scalar

        Returns:
            bool: False (and no change) on any dimension mismatch
        """
        if mask.shape != self.shape:
            logger.debug(f"copy_masked: mask {mask.shape} does not match image {self.shape}")
            return False

        selection = mask.data.astype(bool)
        if isinstance(source, DenseImage):
            if source.shape != self.shape:
                logger.debug(f"copy_masked: source {source.shape} does not match image {self.shape}")
                return False
            np.copyto(self._data, source.data, where=selection, casting='unsafe')
        else:
            self._data[selection] = source
        return True

    def copy_channel(self, source: 'DenseImage', source_channel: int, target_channel: int) -> bool:
        """
        Copy one channel of ``source`` into one channel of the receiver.

        Returns:
            bool: False if height/width differ or a channel index is invalid
        """
        if source.height != self.height or source.width != self.width:
            logger.debug(f"copy_channel: source {source.shape} does not match image {self.shape}")
            return False
        if not 0 <= source_channel < source.channels or not 0 <= target_channel < self.channels:
            logger.debug(f"copy_channel: invalid channels {source_channel} -> {target_channel}")
            return False

        np.copyto(self._data[:, :, target_channel], source.data[:, :, source_channel], casting='unsafe')
        return True

    def get_sub_image(
        self,
        row_lo: int = -1,
        row_hi: int = -1,
        column_lo: int = -1,
        column_hi: int = -1,
        channel_lo: int = -1,
        channel_hi: int = -1
    ) -> 'DenseImage':
        """
        Copy an inclusive rectangular block.

        Bounds follow ``resolve_region``; the result is empty if the resolved
        extent is non-positive on any axis.
        """
        region = resolve_region(self.shape, row_lo, row_hi, column_lo, column_hi, channel_lo, channel_hi)
        if region is None:
            return DenseImage(dtype=self._dtype)
        return DenseImage.from_array(self._data[region], dtype=self._dtype)

    # ------------------------------------------------------------------
    # Adapter bridge
    # ------------------------------------------------------------------

    def copy_from_adapter(self, adapter) -> bool:
        """
        Import the pixels of an external image source.

        The receiver is first resized to the adapter's size, then filled.

        Args:
            adapter: An ``ImageAdapter``

        Returns:
            bool: False if the receiver could not take the adapter's dimensions
        """
        height, width, channels = adapter.get_size()
        self.reset_dimensions(height, width, channels)

        if (height, width, channels) != self.shape:
            logger.debug(f"copy_from_adapter: image is {self.shape} after resizing to {(height, width, channels)}")
            return False

        if self.size > 0:
            np.copyto(self._data, adapter.read_pixels(), casting='unsafe')
        return True

    def copy_to_adapter(self, adapter) -> bool:
        """
        Export the pixels to an external image of the same dimensions.

        The adapter is never resized.

        Returns:
            bool: False if the adapter's dimensions differ from the receiver's
        """
        if tuple(adapter.get_size()) != self.shape:
            logger.debug(f"copy_to_adapter: adapter size {adapter.get_size()} differs from image {self.shape}")
            return False

        if self.size > 0:
            adapter.write_pixels(self._data.astype(np.float64))
        return True

    # ------------------------------------------------------------------
    # Compound (in-place) arithmetic
    # ------------------------------------------------------------------

    def _inplace(self, other, ufunc, op_name: str):
        if isinstance(other, DenseImage):
            if other.shape != self.shape:
                logger.debug(f"{op_name}: shape mismatch {self.shape} vs {other.shape}, left operand unchanged")
                return self
            operand = other._data
        elif _is_scalar(other):
            # the scalar takes the image's type first, as in v op T(s)
            operand = np.asarray(other).astype(self._dtype)
        else:
            return NotImplemented

        _apply_into(ufunc, self._data, self._data, operand)
        return self

    def __iadd__(self, other):
        return self._inplace(other, np.add, '+=')

    def __isub__(self, other):
        return self._inplace(other, np.subtract, '-=')

    def __imul__(self, other):
        return self._inplace(other, np.multiply, '*=')

    def __itruediv__(self, other):
        return self._inplace(other, np.true_divide, '/=')

    def increment(self) -> 'DenseImage':
        """Prefix increment: add 1 to every element and return the receiver."""
        self += 1
        return self

    def decrement(self) -> 'DenseImage':
        """Prefix decrement: subtract 1 from every element and return the receiver."""
        self -= 1
        return self

    def post_increment(self) -> 'DenseImage':
        """Postfix increment: returns a full copy of the state before adding 1."""
        previous = self.copy()
        self += 1
        return previous

    def post_decrement(self) -> 'DenseImage':
        """Postfix decrement: returns a full copy of the state before subtracting 1."""
        previous = self.copy()
        self -= 1
        return previous

    # ------------------------------------------------------------------
    # Binary and unary arithmetic
    # ------------------------------------------------------------------

    def _binary(self, other, ufunc, op_name: str):
        if not isinstance(other, DenseImage) and not _is_scalar(other):
            return NotImplemented
        result = DenseImage.like(self)
        return result._inplace(other, ufunc, op_name)

    def _reflected(self, other, ufunc):
        # scalar on the left: s op v for every element
        if not _is_scalar(other):
            return NotImplemented
        result = DenseImage.like(self, copy_data=False)
        operand = np.asarray(other).astype(self._dtype)
        _apply_into(ufunc, result._data, operand, self._data)
        return result

    def __add__(self, other):
        return self._binary(other, np.add, '+')

    def __radd__(self, other):
        return self._reflected(other, np.add)

    def __sub__(self, other):
        return self._binary(other, np.subtract, '-')

    def __rsub__(self, other):
        return self._reflected(other, np.subtract)

    def __mul__(self, other):
        return self._binary(other, np.multiply, '*')

    def __rmul__(self, other):
        return self._reflected(other, np.multiply)

    def __truediv__(self, other):
        return self._binary(other, np.true_divide, '/')

    def __rtruediv__(self, other):
        return self._reflected(other, np.true_divide)

    def __neg__(self) -> 'DenseImage':
        result = DenseImage.like(self, copy_data=False)
        _apply_into(np.negative, result._data, self._data)
        return result

    def __pos__(self) -> 'DenseImage':
        return self.copy()

    # ------------------------------------------------------------------
    # Comparisons and logical operators (results are boolean images)
    # ------------------------------------------------------------------

    def _compare(self, other, ufunc, op_name: str):
        result = DenseImage(self.height, self.width, self.channels, dtype=bool)
        if isinstance(other, DenseImage):
            if other.shape != self.shape:
                logger.debug(f"{op_name}: shape mismatch {self.shape} vs {other.shape}, result left unset")
                return result
            operand = other._data
        elif _is_scalar(other):
            operand = other
        else:
            return NotImplemented

        if result.size > 0:
            with np.errstate(invalid='ignore'):
                ufunc(self._data, operand, out=result._data)
        return result

    def __lt__(self, other):
        return self._compare(other, np.less, '<')

    def __le__(self, other):
        return self._compare(other, np.less_equal, '<=')

    def __gt__(self, other):
        return self._compare(other, np.greater, '>')

    def __ge__(self, other):
        return self._compare(other, np.greater_equal, '>=')

    def __eq__(self, other):
        return self._compare(other, np.equal, '==')

    def __ne__(self, other):
        return self._compare(other, np.not_equal, '!=')

    def _require_mask(self, op_name: str) -> None:
        if self._dtype != np.bool_:
            raise TypeError(f"{op_name} is only defined for boolean images, got {self._dtype}")

    def _logical(self, other, ufunc, op_name: str):
        self._require_mask(op_name)
        if not isinstance(other, DenseImage):
            return NotImplemented
        other._require_mask(op_name)

        result = DenseImage(self.height, self.width, self.channels, dtype=bool)
        if other.shape != self.shape:
            logger.debug(f"{op_name}: shape mismatch {self.shape} vs {other.shape}, result left unset")
            return result
        if result.size > 0:
            ufunc(self._data, other._data, out=result._data)
        return result

    def __invert__(self) -> 'DenseImage':
        self._require_mask('logical not')
        result = DenseImage.like(self, copy_data=False)
        np.logical_not(self._data, out=result._data)
        return result

    def __and__(self, other):
        return self._logical(other, np.logical_and, 'logical and')

    def __or__(self, other):
        return self._logical(other, np.logical_or, 'logical or')

    def __bool__(self) -> bool:
        raise ValueError("The truth value of a DenseImage is ambiguous. Use image.any() or image.all()")

    def any(self) -> bool:
        return bool(self._data.any())

    def all(self) -> bool:
        return bool(self._data.all())

    def equals(self, other: 'DenseImage') -> bool:
        """True if both images have the same dimensions and identical values."""
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    # ------------------------------------------------------------------
    # Generators and conversions applied to the receiver
    # ------------------------------------------------------------------

    def set_to_gray(self) -> None:
        """Average the channels into a single gray channel."""
        from ..geometry.geometric_ops import rgb2gray
        self.assign(rgb2gray(self))

    def set_to_random(self, lower_bound: float, upper_bound: float, seed: Optional[int] = None) -> None:
        """Fill the current dimensions with uniform random values."""
        if self.size == 0:
            return
        rng = np.random.default_rng(seed)
        np.copyto(self._data, rng.uniform(lower_bound, upper_bound, size=self.shape), casting='unsafe')

    def set_to_meshgrid_x(self, x1, x2, y1, y2, dx=1, dy=1) -> None:
        from ..kernels.kernel_factory import meshgrid_x
        self._replace_with(meshgrid_x(x1, x2, y1, y2, dx, dy))

    def set_to_meshgrid_y(self, x1, x2, y1, y2, dx=1, dy=1) -> None:
        from ..kernels.kernel_factory import meshgrid_y
        self._replace_with(meshgrid_y(x1, x2, y1, y2, dx, dy))

    def set_to_gaussian(self, size: int, sigma: float) -> None:
        from ..kernels.kernel_factory import gaussian
        self._replace_with(gaussian(size, sigma))

    def set_to_gabor_x(self, size: int, sigma: float, period: float, phaseshift: float = 0) -> None:
        from ..kernels.kernel_factory import gabor_x
        kernel = gabor_x(size, sigma, period, phaseshift)
        # invalid parameters leave the receiver untouched
        if kernel.size > 0:
            self.assign(kernel)

    def set_to_gabor_y(self, size: int, sigma: float, period: float, phaseshift: float = 0) -> None:
        from ..kernels.kernel_factory import gabor_y
        kernel = gabor_y(size, sigma, period, phaseshift)
        if kernel.size > 0:
            self.assign(kernel)

    def set_to_gabor_oriented(
        self,
        size: int,
        sigma: float,
        period: float,
        angle: float,
        phaseshift: float = 0
    ) -> None:
        from ..kernels.kernel_factory import gabor_oriented
        kernel = gabor_oriented(size, sigma, period, angle, phaseshift)
        if kernel.size > 0:
            self.assign(kernel)

    def get_gabor_phase_stack(self, config=None) -> 'DenseImage':
        """Gabor phase responses of channel 0, one output channel per filter."""
        from ..kernels.gabor_stack import gabor_phase_stack
        return gabor_phase_stack(self, config)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def describe(self) -> Dict[str, Any]:
        """
        Summarize dimensions, type and value statistics.

        Returns:
            Dict[str, Any]: Image information
        """
        info = {
            'height': self.height,
            'width': self.width,
            'channels': self.channels,
            'size': self.size,
            'dtype': str(self._dtype),
            'size_bytes': self._data.nbytes,
            'empty': self.size == 0,
        }
        if self.size == 0:
            return info

        values = self._data.astype(np.float64)
        info['min_value'] = float(np.min(values))
        info['max_value'] = float(np.max(values))
        info['mean_value'] = float(np.mean(values))
        info['std_value'] = float(np.std(values))
        return info

    def to_frame(self, channel: int = 0) -> pd.DataFrame:
        """One channel as a DataFrame indexed by row, with one column per image column."""
        if not 0 <= channel < self.channels:
            return pd.DataFrame()
        frame = pd.DataFrame(self._data[:, :, channel])
        frame.index.name = 'row'
        frame.columns.name = 'column'
        return frame

    def print_contents(self) -> None:
        """Log the dimensions and every channel (debugging aid)."""
        logger.info(f"Height: {self.height}, Width: {self.width}, Channels: {self.channels}")
        for k in range(self.channels):
            logger.info(f"Channel {k}\n{self.to_frame(k).to_string()}")

    def __repr__(self) -> str:
        return (f"DenseImage(height={self.height}, width={self.width}, "
                f"channels={self.channels}, dtype={self._dtype})")


def have_equal_dimensions(first: DenseImage, second: DenseImage) -> bool:
    """True if both images have the same height, width and channel count."""
    return first.shape == second.shape


def have_equal_height_width(first: DenseImage, second: DenseImage) -> bool:
    """True if both images have the same height and width (channels ignored)."""
    return first.height == second.height and first.width == second.width
