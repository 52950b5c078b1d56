import pytest

import photo_calendar.config
import photo_calendar.geometry
import photo_calendar.image_fit


Rect = photo_calendar.geometry.Rect
FillMode = photo_calendar.config.FillMode
ImageAsset = photo_calendar.config.ImageAsset


#============================================
def _assert_rect_close(actual: Rect, expected: Rect) -> None:
	for actual_value, expected_value in zip(actual, expected):
		assert actual_value == pytest.approx(expected_value)


#============================================
def test_equal_aspect_cover_matches_destination() -> None:
	dest = Rect(10.0, 20.0, 210.0, 120.0)
	for fill_mode in FillMode:
		rect = photo_calendar.image_fit.compute_transformed_rect(400, 200, dest, fill_mode)
		_assert_rect_close(rect, dest)


#============================================
def test_base_scale_cover_and_contain() -> None:
	scale = photo_calendar.image_fit.compute_base_scale
	assert scale(400, 100, 100, 100, FillMode.COVER) == pytest.approx(1.0)
	assert scale(400, 100, 100, 100, FillMode.CONTAIN) == pytest.approx(0.25)


#============================================
def test_cover_is_centered_and_pan_aligns_edges() -> None:
	"""
	A 4:1 image covering a square overflows 150 points on each side.
	"""
	dest = Rect(0.0, 0.0, 100.0, 100.0)
	transform = photo_calendar.image_fit.compute_transformed_rect
	centered = transform(400, 100, dest, FillMode.COVER)
	_assert_rect_close(centered, Rect(-150.0, 0.0, 250.0, 100.0))
	left = transform(400, 100, dest, FillMode.COVER, pan_x=1.0)
	assert left.left == pytest.approx(dest.left)
	right = transform(400, 100, dest, FillMode.COVER, pan_x=-1.0)
	assert right.right == pytest.approx(dest.right)


#============================================
def test_pan_is_clamped() -> None:
	dest = Rect(0.0, 0.0, 100.0, 100.0)
	transform = photo_calendar.image_fit.compute_transformed_rect
	assert transform(400, 100, dest, FillMode.COVER, 2.0, 5.0, 0.0) == transform(400, 100, dest, FillMode.COVER, 2.0, 1.0, 0.0)
	assert transform(400, 100, dest, FillMode.COVER, 2.0, 0.0, -7.0) == transform(400, 100, dest, FillMode.COVER, 2.0, 0.0, -1.0)


#============================================
def test_contain_has_no_excess() -> None:
	dest = Rect(0.0, 0.0, 100.0, 100.0)
	transform = photo_calendar.image_fit.compute_transformed_rect
	rect = transform(200, 100, dest, FillMode.CONTAIN)
	_assert_rect_close(rect, Rect(0.0, 25.0, 100.0, 75.0))
	assert transform(200, 100, dest, FillMode.CONTAIN, pan_x=1.0, pan_y=1.0) == rect
	limits = photo_calendar.image_fit.compute_pan_limits(200, 100, dest, FillMode.CONTAIN, 1.0)
	assert limits == (0.0, 0.0)


#============================================
def test_pan_limits_grow_with_zoom() -> None:
	dest = Rect(0.0, 0.0, 100.0, 100.0)
	limits = photo_calendar.image_fit.compute_pan_limits(100, 100, dest, FillMode.COVER, 2.0)
	assert limits == (pytest.approx(50.0), pytest.approx(50.0))
	assert photo_calendar.image_fit.compute_pan_limits(0, 100, dest, FillMode.COVER, 2.0) == (0.0, 0.0)


#============================================
def test_degenerate_inputs_return_destination() -> None:
	dest = Rect(5.0, 5.0, 50.0, 50.0)
	transform = photo_calendar.image_fit.compute_transformed_rect
	assert transform(0, 100, dest, FillMode.COVER) == dest
	assert transform(100, -1, dest, FillMode.CONTAIN) == dest
	empty = Rect(5.0, 5.0, 5.0, 50.0)
	assert transform(100, 100, empty, FillMode.COVER) == empty


#============================================
def test_zoom_and_pan_clamps() -> None:
	clamp_zoom = photo_calendar.image_fit.clamp_zoom
	assert clamp_zoom(10.0) == 3.0
	assert clamp_zoom(0.1) == 0.5
	assert clamp_zoom(0.0) == 1.0
	assert clamp_zoom(-2.0) == 1.0
	assert clamp_zoom(None) == 1.0
	clamp_pan = photo_calendar.image_fit.clamp_pan
	assert clamp_pan(3.0) == 1.0
	assert clamp_pan(-3.0) == -1.0
	assert clamp_pan(None) == 0.0


#============================================
def test_adjust_asset_transform() -> None:
	asset = ImageAsset(path="photo.jpg")
	assert photo_calendar.image_fit.adjust_zoom(asset, 9.0) == 3.0
	assert asset.zoom == 3.0
	assert photo_calendar.image_fit.adjust_pan(asset, 0.5, -4.0) == (0.5, -1.0)
	assert (asset.pan_x, asset.pan_y) == (0.5, -1.0)


#============================================
def test_asset_rect_uses_asset_state() -> None:
	dest = Rect(0.0, 0.0, 100.0, 100.0)
	asset = ImageAsset(path="photo.jpg", zoom=2.0, pan_x=1.0, pan_y=-1.0)
	rect = photo_calendar.image_fit.compute_asset_rect(100, 100, dest, FillMode.COVER, asset)
	_assert_rect_close(rect, Rect(0.0, -100.0, 200.0, 100.0))
