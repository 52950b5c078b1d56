import os

import PIL.Image
import pytest

import photo_calendar.geometry
import photo_calendar.surface


Rect = photo_calendar.geometry.Rect
RasterSurface = photo_calendar.surface.RasterSurface

RED = (255, 0, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


#============================================
def test_parse_hex_color() -> None:
	parse = photo_calendar.surface.parse_hex_color
	assert parse("#336699") == (0x33, 0x66, 0x99)
	assert parse("#abc") == (0xAA, 0xBB, 0xCC)
	assert parse(" #FFFFFF ") == WHITE
	assert parse("336699") == (0, 0, 0)
	assert parse("#80336699") == (0x33, 0x66, 0x99)
	assert parse("#8abc") == (0xAA, 0xBB, 0xCC)
	assert parse("#12") == (0, 0, 0)
	assert parse("#1234567") == (0, 0, 0)
	assert parse("#GGGGGG") == (0, 0, 0)
	assert parse(None) == (0, 0, 0)
	assert parse("bogus", None) is None


#============================================
def test_font_paths_use_bundled_fonts() -> None:
	regular = photo_calendar.surface.resolve_font_path("Helvetica")
	bold = photo_calendar.surface.resolve_font_path("Helvetica", bold=True)
	assert os.path.basename(regular) == "Vera.ttf"
	assert os.path.basename(bold) == "VeraBd.ttf"
	assert os.path.isfile(regular)
	assert os.path.isfile(bold)
	assert photo_calendar.surface.resolve_font_path(regular) == regular


#============================================
def test_pixel_size_follows_dpi() -> None:
	surface = RasterSurface(100.0, 50.0, dpi=144)
	assert surface.scale == 2.0
	assert (surface.width_px, surface.height_px) == (200, 100)
	tiny = RasterSurface(0.1, 0.1, dpi=72)
	assert (tiny.width_px, tiny.height_px) == (1, 1)


#============================================
def test_clip_restricts_fill() -> None:
	surface = RasterSurface(100.0, 100.0, dpi=72)
	with surface.clipped(Rect(0.0, 0.0, 50.0, 100.0)):
		surface.fill_rect(Rect(0.0, 0.0, 100.0, 100.0), "#FF0000")
	assert surface.pixel(25, 50) == RED
	assert surface.pixel(75, 50) == WHITE
	surface.fill_rect(Rect(60.0, 0.0, 100.0, 100.0), "#0000FF")
	assert surface.pixel(75, 50) == BLUE


#============================================
def test_nested_clips_intersect() -> None:
	surface = RasterSurface(100.0, 100.0, dpi=72)
	surface.save()
	surface.clip_rect(Rect(0.0, 0.0, 50.0, 50.0))
	surface.clip_rect(Rect(25.0, 25.0, 100.0, 100.0))
	surface.fill_rect(surface.bounds, "#FF0000")
	surface.restore()
	assert surface.pixel(30, 30) == RED
	assert surface.pixel(10, 10) == WHITE
	assert surface.pixel(60, 60) == WHITE


#============================================
def test_invalid_fill_color_draws_nothing() -> None:
	surface = RasterSurface(10.0, 10.0, dpi=72)
	surface.fill_rect(surface.bounds, "not-a-color")
	assert surface.pixel(5, 5) == WHITE


#============================================
def test_thin_lines_keep_one_pixel() -> None:
	surface = RasterSurface(100.0, 20.0, dpi=72)
	surface.draw_line(0.0, 10.0, 100.0, 10.0, "#000000", 0.1)
	assert surface.pixel(50, 10) == (0, 0, 0)


#============================================
def test_draw_image_stretches_and_clips() -> None:
	image = PIL.Image.new("RGB", (200, 100), RED)
	image.paste(BLUE, (100, 0, 200, 100))
	surface = RasterSurface(100.0, 50.0, dpi=72)
	surface.draw_image(image, Rect(0.0, 0.0, 100.0, 50.0))
	assert surface.pixel(25, 25) == RED
	assert surface.pixel(75, 25) == BLUE

	clipped = RasterSurface(100.0, 50.0, dpi=72)
	with clipped.clipped(Rect(0.0, 0.0, 50.0, 50.0)):
		clipped.draw_image(image, Rect(-100.0, 0.0, 100.0, 50.0))
	assert clipped.pixel(25, 25) == BLUE
	assert clipped.pixel(75, 25) == WHITE


#============================================
def test_rotate_region() -> None:
	surface = RasterSurface(100.0, 100.0, dpi=72)
	surface.fill_rect(Rect(0.0, 0.0, 10.0, 10.0), "#FF0000")
	surface.rotate_region(surface.bounds)
	assert surface.pixel(95, 95) == RED
	assert surface.pixel(5, 5) == WHITE


#============================================
def test_measure_text_is_in_points() -> None:
	low = RasterSurface(100.0, 100.0, dpi=72)
	high = RasterSurface(100.0, 100.0, dpi=288)
	low_width = low.measure_text("September 2024", 18)
	high_width = high.measure_text("September 2024", 18)
	assert low_width > 0
	assert high_width == pytest.approx(low_width, rel=0.1)


#============================================
def test_png_bytes() -> None:
	surface = RasterSurface(20.0, 20.0, dpi=72)
	assert surface.to_png_bytes().startswith(b"\x89PNG")
