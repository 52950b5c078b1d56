"""
Raster drawing surface in page points over a PIL image.
"""

# Standard Library
import contextlib
import io
import logging
import math
import os
import string

# PIP3 modules
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont
import reportlab

# local repo modules
import photo_calendar as pcal
import photo_calendar.config
import photo_calendar.geometry


Rect = pcal.geometry.Rect

DEFAULT_TARGET_DPI = pcal.config.DEFAULT_TARGET_DPI
DEFAULT_FONT_FILE = pcal.config.DEFAULT_FONT_FILE
DEFAULT_BOLD_FONT_FILE = pcal.config.DEFAULT_BOLD_FONT_FILE
PAGE_COLOR = pcal.config.PAGE_COLOR

REPORTLAB_FONT_DIR = os.path.join(os.path.dirname(reportlab.__file__), "fonts")
FONT_FILE_SUFFIXES = (".ttf", ".otf")
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)

RGB = tuple[int, int, int]
PixelBox = tuple[int, int, int, int]

logger = logging.getLogger(__name__)


#============================================
def parse_hex_color(value: str | None, default: RGB | None = BLACK) -> RGB | None:
	"""
	Parse a hex color string into an RGB tuple.

	Args:
		value: Color string like "#AABBCC" or "#ABC". Alpha forms
			"#AARRGGBB" and "#ARGB" are accepted and the alpha is dropped.
		default: Returned for missing or invalid strings.

	Returns:
		Tuple of (r, g, b) in 0-255, or the default.
	"""
	if not isinstance(value, str):
		return default
	text = value.strip()
	digits = text[1:]
	if len(digits) in (3, 4):
		digits = "".join(char * 2 for char in digits)
	if len(digits) == 8:
		digits = digits[2:]
	if not text.startswith("#") or len(digits) != 6 or any(char not in string.hexdigits for char in digits):
		logger.debug("Invalid color %r, using %s", value, default)
		return default
	return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


#============================================
def resolve_font_path(family: str | None, bold: bool = False) -> str:
	"""
	Map a font family to a TrueType file.

	Explicit font file paths are used as given. Family names map to the Vera
	fonts shipped with reportlab so output does not depend on system fonts.

	Args:
		family: Font family name or font file path.
		bold: Whether the bold face is wanted.

	Returns:
		Font file path.
	"""
	if family and family.lower().endswith(FONT_FILE_SUFFIXES) and os.path.isfile(family):
		return family
	if bold:
		return os.path.join(REPORTLAB_FONT_DIR, DEFAULT_BOLD_FONT_FILE)
	return os.path.join(REPORTLAB_FONT_DIR, DEFAULT_FONT_FILE)


#============================================
def load_font(path: str, size_px: int) -> PIL.ImageFont.FreeTypeFont:
	"""
	Load a TrueType font at a pixel size, falling back to PIL's default font.
	"""
	try:
		return PIL.ImageFont.truetype(path, size_px)
	except OSError as error:
		logger.debug("Font %s unavailable (%s), using default font", path, error)
		return PIL.ImageFont.load_default(size=size_px)


class RasterSurface:
	"""
	Off-screen RGB raster that callers draw on in page points.

	The point-to-pixel scale is dpi / 72. Clipping is a stack of pixel boxes;
	every primitive is restricted to the current clip.
	"""

	def __init__(
		self,
		width_pt: float,
		height_pt: float,
		dpi: float = DEFAULT_TARGET_DPI,
		background: str = PAGE_COLOR,
	):
		self.width_pt = width_pt
		self.height_pt = height_pt
		self.dpi = dpi
		self.scale = pcal.config.dpi_scale(dpi)
		self.width_px = max(1, int(round(width_pt * self.scale)))
		self.height_px = max(1, int(round(height_pt * self.scale)))
		fill = parse_hex_color(background, WHITE)
		self.image = PIL.Image.new("RGB", (self.width_px, self.height_px), fill)
		self._draw = PIL.ImageDraw.Draw(self.image)
		self._full_clip: PixelBox = (0, 0, self.width_px, self.height_px)
		self._clip = self._full_clip
		self._clip_stack: list[PixelBox] = []
		self._fonts: dict[tuple[str, int], PIL.ImageFont.FreeTypeFont] = {}

	@property
	def bounds(self) -> Rect:
		return Rect(0.0, 0.0, self.width_pt, self.height_pt)

	#============================================
	def _px(self, value: float) -> int:
		return int(round(value * self.scale))

	def _box(self, rect: Rect) -> PixelBox:
		return (self._px(rect.left), self._px(rect.top), self._px(rect.right), self._px(rect.bottom))

	def _line_px(self, width: float) -> int:
		return max(1, int(round(width * self.scale)))

	@contextlib.contextmanager
	def _layer(self):
		"""
		Yield (draw, origin_x, origin_y) restricted to the current clip.

		Yields None when the clip is empty.
		"""
		x0, y0, x1, y1 = self._clip
		if x1 <= x0 or y1 <= y0:
			yield None
			return
		if self._clip == self._full_clip:
			yield (self._draw, 0, 0)
			return
		region = self.image.crop(self._clip)
		yield (PIL.ImageDraw.Draw(region), x0, y0)
		self.image.paste(region, (x0, y0))

	#============================================
	def save(self) -> None:
		self._clip_stack.append(self._clip)

	def restore(self) -> None:
		if self._clip_stack:
			self._clip = self._clip_stack.pop()

	def clip_rect(self, rect: Rect) -> None:
		"""
		Intersect the current clip with a rectangle.
		"""
		x0, y0, x1, y1 = self._box(rect)
		cx0, cy0, cx1, cy1 = self._clip
		left, top = max(x0, cx0), max(y0, cy0)
		right, bottom = min(x1, cx1), min(y1, cy1)
		if right < left:
			right = left
		if bottom < top:
			bottom = top
		self._clip = (left, top, right, bottom)

	@contextlib.contextmanager
	def clipped(self, rect: Rect):
		self.save()
		self.clip_rect(rect)
		try:
			yield self
		finally:
			self.restore()

	#============================================
	def fill_rect(self, rect: Rect, color: str | None) -> None:
		rgb = parse_hex_color(color, None)
		if rgb is None:
			return
		x0, y0, x1, y1 = self._box(rect)
		if x1 <= x0 or y1 <= y0:
			return
		with self._layer() as layer:
			if layer is None:
				return
			draw, origin_x, origin_y = layer
			draw.rectangle(
				(x0 - origin_x, y0 - origin_y, x1 - origin_x - 1, y1 - origin_y - 1),
				fill=rgb,
			)

	def stroke_rect(self, rect: Rect, color: str | None, width: float = 1.0) -> None:
		rgb = parse_hex_color(color, None)
		if rgb is None:
			return
		x0, y0, x1, y1 = self._box(rect)
		if x1 <= x0 or y1 <= y0:
			return
		with self._layer() as layer:
			if layer is None:
				return
			draw, origin_x, origin_y = layer
			draw.rectangle(
				(x0 - origin_x, y0 - origin_y, x1 - origin_x - 1, y1 - origin_y - 1),
				outline=rgb,
				width=self._line_px(width),
			)

	def draw_line(self, x0: float, y0: float, x1: float, y1: float, color: str | None, width: float = 1.0) -> None:
		rgb = parse_hex_color(color, None)
		if rgb is None:
			return
		with self._layer() as layer:
			if layer is None:
				return
			draw, origin_x, origin_y = layer
			draw.line(
				[
					(self._px(x0) - origin_x, self._px(y0) - origin_y),
					(self._px(x1) - origin_x, self._px(y1) - origin_y),
				],
				fill=rgb,
				width=self._line_px(width),
			)

	#============================================
	def font(self, size: float, bold: bool = False, family: str | None = None) -> PIL.ImageFont.FreeTypeFont:
		size_px = max(1, int(round(size * self.scale)))
		path = resolve_font_path(family, bold)
		key = (path, size_px)
		cached = self._fonts.get(key)
		if cached is None:
			cached = load_font(path, size_px)
			self._fonts[key] = cached
		return cached

	def measure_text(self, text: str, size: float, bold: bool = False, family: str | None = None) -> float:
		"""
		Text advance width in points.
		"""
		return self.font(size, bold, family).getlength(text) / self.scale

	def draw_text(
		self,
		text: str,
		x: float,
		y: float,
		size: float,
		color: str | None,
		bold: bool = False,
		family: str | None = None,
		anchor: str = "la",
	) -> None:
		"""
		Draw text at a point using a PIL anchor.

		Args:
			text: Text to draw.
			x: Anchor x in points.
			y: Anchor y in points.
			size: Font size in points.
			color: Hex color; invalid colors draw black.
			bold: Use the bold face.
			family: Font family or font file path.
			anchor: PIL text anchor, "la" is left/top, "mm" is centered.
		"""
		if not text:
			return
		rgb = parse_hex_color(color, BLACK)
		font = self.font(size, bold, family)
		with self._layer() as layer:
			if layer is None:
				return
			draw, origin_x, origin_y = layer
			draw.text(
				(x * self.scale - origin_x, y * self.scale - origin_y),
				text,
				fill=rgb,
				font=font,
				anchor=anchor,
			)

	def draw_text_centered(
		self,
		text: str,
		rect: Rect,
		size: float,
		color: str | None,
		bold: bool = False,
		family: str | None = None,
	) -> None:
		self.draw_text(text, rect.mid_x, rect.mid_y, size, color, bold=bold, family=family, anchor="mm")

	#============================================
	def draw_image(self, image: PIL.Image.Image, dest: Rect) -> None:
		"""
		Draw an image stretched into a destination rectangle.

		Only the part of the source that lands inside the current clip is
		resampled (bilinear), so large zoomed photos stay cheap.

		Args:
			image: Decoded source image.
			dest: Destination rectangle in points; may exceed the clip.
		"""
		dest_x = dest.left * self.scale
		dest_y = dest.top * self.scale
		dest_w = dest.width * self.scale
		dest_h = dest.height * self.scale
		if dest_w <= 0 or dest_h <= 0 or image.width <= 0 or image.height <= 0:
			return
		cx0, cy0, cx1, cy1 = self._clip
		vis_x0 = max(cx0, int(math.floor(dest_x)))
		vis_y0 = max(cy0, int(math.floor(dest_y)))
		vis_x1 = min(cx1, int(math.ceil(dest_x + dest_w)))
		vis_y1 = min(cy1, int(math.ceil(dest_y + dest_h)))
		if vis_x1 <= vis_x0 or vis_y1 <= vis_y0:
			return

		ratio_x = image.width / dest_w
		ratio_y = image.height / dest_h
		src_x0 = min(image.width, max(0.0, (vis_x0 - dest_x) * ratio_x))
		src_y0 = min(image.height, max(0.0, (vis_y0 - dest_y) * ratio_y))
		src_x1 = min(float(image.width), max(src_x0, (vis_x1 - dest_x) * ratio_x))
		src_y1 = min(float(image.height), max(src_y0, (vis_y1 - dest_y) * ratio_y))
		if src_x1 <= src_x0 or src_y1 <= src_y0:
			return

		source = image
		if image.mode not in ("RGB", "RGBA"):
			source = image.convert("RGBA" if "A" in image.getbands() else "RGB")
		patch = source.resize(
			(vis_x1 - vis_x0, vis_y1 - vis_y0),
			resample=PIL.Image.Resampling.BILINEAR,
			box=(src_x0, src_y0, src_x1, src_y1),
		)
		if patch.mode == "RGBA":
			# blend over what is already on the page
			self.image.paste(patch, (vis_x0, vis_y0), patch)
		else:
			self.image.paste(patch, (vis_x0, vis_y0))

	def rotate_region(self, rect: Rect) -> None:
		"""
		Rotate the pixels inside a rectangle by 180 degrees in place.
		"""
		x0, y0, x1, y1 = self._box(rect)
		x0, y0 = max(0, x0), max(0, y0)
		x1, y1 = min(self.width_px, x1), min(self.height_px, y1)
		if x1 <= x0 or y1 <= y0:
			return
		region = self.image.crop((x0, y0, x1, y1)).transpose(PIL.Image.Transpose.ROTATE_180)
		self.image.paste(region, (x0, y0))

	#============================================
	def pixel(self, x: float, y: float) -> RGB:
		"""
		Color of the pixel under a point, for inspection.
		"""
		px = min(self.width_px - 1, max(0, int(x * self.scale)))
		py = min(self.height_px - 1, max(0, int(y * self.scale)))
		return self.image.getpixel((px, py))

	def to_png_bytes(self) -> bytes:
		buffer = io.BytesIO()
		self.image.save(buffer, format="PNG")
		return buffer.getvalue()
