"""
Image fit math (scale, zoom, pan) and decoded image loading/caching.
"""

# Standard Library
import dataclasses
import logging
import math
import os
import threading
import typing

# PIP3 modules
import PIL.Image
import PIL.ImageOps

# local repo modules
import photo_calendar as pcal
import photo_calendar.config
import photo_calendar.geometry


Rect = pcal.geometry.Rect
FillMode = pcal.config.FillMode
ImageAsset = pcal.config.ImageAsset

MIN_ZOOM = pcal.config.MIN_ZOOM
MAX_ZOOM = pcal.config.MAX_ZOOM
MIN_PAN = pcal.config.MIN_PAN
MAX_PAN = pcal.config.MAX_PAN

ALPHA_MODES = ("RGBA", "LA", "PA", "RGBa", "La")

logger = logging.getLogger(__name__)


#============================================
def clamp_zoom(zoom: float | None) -> float:
	"""
	Clamp a zoom factor into [0.5, 3.0]; unset or non-positive means 1.0.
	"""
	if zoom is None or not math.isfinite(zoom) or zoom <= 0:
		return 1.0
	return min(MAX_ZOOM, max(MIN_ZOOM, zoom))


#============================================
def clamp_pan(pan: float | None) -> float:
	"""
	Clamp a pan offset into [-1, 1]; unset means centered.
	"""
	if pan is None or not math.isfinite(pan):
		return 0.0
	return min(MAX_PAN, max(MIN_PAN, pan))


#============================================
def compute_base_scale(
	image_width: float,
	image_height: float,
	rect_width: float,
	rect_height: float,
	fill_mode: FillMode,
) -> float:
	"""
	Scale that makes an image cover or fit inside a rectangle.

	Args:
		image_width: Source width in pixels.
		image_height: Source height in pixels.
		rect_width: Destination width in points.
		rect_height: Destination height in points.
		fill_mode: COVER uses the larger fit scale, CONTAIN the smaller.

	Returns:
		Points per source pixel.
	"""
	scale_x = rect_width / image_width
	scale_y = rect_height / image_height
	if fill_mode == FillMode.CONTAIN:
		return min(scale_x, scale_y)
	return max(scale_x, scale_y)


#============================================
def _scaled_size(
	image_width: float,
	image_height: float,
	dest: Rect,
	fill_mode: FillMode,
	zoom: float | None,
) -> tuple[float, float]:
	scale = compute_base_scale(image_width, image_height, dest.width, dest.height, fill_mode)
	scale *= clamp_zoom(zoom)
	return (image_width * scale, image_height * scale)


#============================================
def _is_degenerate(image_width: float, image_height: float, dest: Rect) -> bool:
	return image_width <= 0 or image_height <= 0 or dest.width <= 0 or dest.height <= 0


#============================================
def compute_pan_limits(
	image_width: float,
	image_height: float,
	dest: Rect,
	fill_mode: FillMode,
	zoom: float | None,
) -> tuple[float, float]:
	"""
	Excess of the scaled image over the destination on each axis.

	The excess is the distance the image can move from center before an
	edge shows, so it bounds interactive panning.

	Args:
		image_width: Source width in pixels.
		image_height: Source height in pixels.
		dest: Destination rectangle.
		fill_mode: Fill mode.
		zoom: Zoom factor (clamped).

	Returns:
		Tuple of (excess_x, excess_y) in points.
	"""
	if _is_degenerate(image_width, image_height, dest):
		return (0.0, 0.0)
	drawn_width, drawn_height = _scaled_size(image_width, image_height, dest, fill_mode, zoom)
	excess_x = max(0.0, (drawn_width - dest.width) / 2.0)
	excess_y = max(0.0, (drawn_height - dest.height) / 2.0)
	return (excess_x, excess_y)


#============================================
def compute_transformed_rect(
	image_width: float,
	image_height: float,
	dest: Rect,
	fill_mode: FillMode,
	zoom: float | None = 1.0,
	pan_x: float | None = 0.0,
	pan_y: float | None = 0.0,
) -> Rect:
	"""
	Rectangle to draw an image at, before clipping to the destination.

	The image is centered on the destination, then shifted by pan times the
	excess on each axis. Pan +1 lines the image's left (or top) edge up with
	the destination's. Degenerate inputs return the destination itself.

	Args:
		image_width: Source width in pixels.
		image_height: Source height in pixels.
		dest: Destination rectangle.
		fill_mode: Fill mode.
		zoom: Zoom factor.
		pan_x: Horizontal pan in [-1, 1].
		pan_y: Vertical pan in [-1, 1].

	Returns:
		Unclipped draw rectangle.
	"""
	if _is_degenerate(image_width, image_height, dest):
		return dest
	drawn_width, drawn_height = _scaled_size(image_width, image_height, dest, fill_mode, zoom)
	excess_x = max(0.0, (drawn_width - dest.width) / 2.0)
	excess_y = max(0.0, (drawn_height - dest.height) / 2.0)
	left = dest.mid_x - drawn_width / 2.0 + clamp_pan(pan_x) * excess_x
	top = dest.mid_y - drawn_height / 2.0 + clamp_pan(pan_y) * excess_y
	return Rect(left, top, left + drawn_width, top + drawn_height)


#============================================
def compute_asset_rect(
	image_width: float,
	image_height: float,
	dest: Rect,
	fill_mode: FillMode,
	asset: ImageAsset,
) -> Rect:
	return compute_transformed_rect(
		image_width,
		image_height,
		dest,
		fill_mode,
		asset.zoom,
		asset.pan_x,
		asset.pan_y,
	)


#============================================
def adjust_zoom(asset: ImageAsset, zoom: float) -> float:
	"""
	Store a clamped zoom on an asset.

	Args:
		asset: Asset to update.
		zoom: Requested zoom.

	Returns:
		Zoom actually stored.
	"""
	asset.zoom = clamp_zoom(zoom)
	return asset.zoom


#============================================
def adjust_pan(asset: ImageAsset, pan_x: float, pan_y: float) -> tuple[float, float]:
	"""
	Store clamped pan offsets on an asset.

	Args:
		asset: Asset to update.
		pan_x: Requested horizontal pan.
		pan_y: Requested vertical pan.

	Returns:
		Tuple of stored (pan_x, pan_y).
	"""
	asset.pan_x = clamp_pan(pan_x)
	asset.pan_y = clamp_pan(pan_y)
	return (asset.pan_x, asset.pan_y)


#============================================
def has_alpha(image: PIL.Image.Image) -> bool:
	if image.mode in ALPHA_MODES:
		return True
	return "transparency" in image.info


#============================================
def load_image(path: str) -> PIL.Image.Image | None:
	"""
	Decode an image file without caching.

	EXIF orientation is applied. Images with transparency come back as
	RGBA, everything else as RGB. Missing or undecodable files return None.

	Args:
		path: Image file path.

	Returns:
		Decoded image or None.
	"""
	if not path or not os.path.isfile(path):
		logger.debug("Image not found: %s", path)
		return None
	try:
		with PIL.Image.open(path) as source:
			source.load()
			mode = "RGBA" if has_alpha(source) else "RGB"
			image = PIL.ImageOps.exif_transpose(source)
			if image.mode != mode:
				image = image.convert(mode)
			else:
				image = image.copy()
	except (OSError, ValueError, PIL.Image.DecompressionBombError) as error:
		logger.debug("Image decode failed for %s: %s", path, error)
		return None
	return image


#============================================
def cache_key(path: str) -> str:
	return os.path.normcase(os.path.abspath(path))


@dataclasses.dataclass
class _CacheEntry:
	ready: threading.Event = dataclasses.field(default_factory=threading.Event)
	image: PIL.Image.Image | None = None


class ImageCache:
	"""
	Path-keyed decoded image cache with at most one decode per path.

	The first caller for a path decodes it; concurrent callers for the same
	path wait on that decode. The lock only guards the entry table, never a
	decode. Failed decodes are cached as None. Eviction is clear() only.
	"""

	def __init__(self, loader: typing.Callable[[str], PIL.Image.Image | None] | None = None):
		self._lock = threading.Lock()
		self._entries: dict[str, _CacheEntry] = {}
		self._loader = loader if loader is not None else load_image

	def get_or_load(self, path: str) -> PIL.Image.Image | None:
		if not path:
			return None
		key = cache_key(path)
		with self._lock:
			entry = self._entries.get(key)
			owner = entry is None
			if owner:
				entry = _CacheEntry()
				self._entries[key] = entry
		if owner:
			try:
				entry.image = self._loader(path)
			finally:
				entry.ready.set()
		else:
			entry.ready.wait()
		return entry.image

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()
		logger.debug("Image cache cleared")

	def __len__(self) -> int:
		with self._lock:
			return len(self._entries)

	def __contains__(self, path: str) -> bool:
		with self._lock:
			return cache_key(path) in self._entries

	def estimated_memory_bytes(self) -> int:
		"""
		Rough decoded size: width x height x bands for each cached image.
		"""
		with self._lock:
			entries = list(self._entries.values())
		total = 0
		for entry in entries:
			image = entry.image
			if image is not None:
				total += image.width * image.height * len(image.getbands())
		return total
