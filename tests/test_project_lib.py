import json
import pathlib

import pytest

import photo_calendar.config
import photo_calendar.project_lib


Placement = photo_calendar.config.Placement
PhotoLayout = photo_calendar.config.PhotoLayout
PageSize = photo_calendar.config.PageSize
ImageAsset = photo_calendar.config.ImageAsset
MonthPhoto = photo_calendar.config.MonthPhoto
CoverPhoto = photo_calendar.config.CoverPhoto
Unassigned = photo_calendar.config.Unassigned


#============================================
def test_save_and_load_project(project, tmp_path: pathlib.Path) -> None:
	project.start_month = 6
	project.first_day_of_week = 1
	project.page.size = PageSize.CUSTOM
	project.page.custom_width = 500.0
	project.page.custom_height = 700.0
	project.layout.placement = Placement.PHOTO_LEFT_CALENDAR_RIGHT
	project.layout.split_ratio = 0.4
	project.cover.title = "Summer"
	project.cover.borderless_calendar = True
	project.month_photo_layouts[2] = PhotoLayout.GRID_2X2
	project.image_assets.append(ImageAsset(path="a.jpg", role=MonthPhoto(month=2, slot=3), zoom=1.5, pan_x=-0.5, order=4))
	project.image_assets.append(ImageAsset(path="b.jpg", role=CoverPhoto(slot=1)))
	project.image_assets.append(ImageAsset(path="c.jpg"))
	project.enable_double_sided = True

	path = tmp_path / "project.json"
	photo_calendar.project_lib.save_project(path, project)
	stored = json.loads(path.read_text(encoding="utf-8"))
	assert stored["layout"]["placement"] == "photo_left_calendar_right"
	assert stored["image_assets"][0]["role"] == "monthPhoto"
	assert stored["image_assets"][0]["month_index"] == 2

	loaded = photo_calendar.project_lib.load_project(path)
	assert loaded == project


#============================================
def test_bad_values_fall_back_to_defaults() -> None:
	data = {
		"name": "Broken",
		"year": "2025",
		"start_month": 14,
		"first_day_of_week": 9,
		"page": {"size": "poster", "orientation": "landscape"},
		"margins": {"left": "wide", "top": 5},
		"theme": {"accent_color": 12},
		"layout": {"split_ratio": "nan", "fill_mode": "contain"},
		"cover": "not a section",
		"month_photo_layouts": {"3": "grid_2x2", "x": "single", "4": "mosaic"},
		"enable_double_sided": "yes",
	}
	project = photo_calendar.project_lib.parse_project(data)
	assert project.name == "Broken"
	assert project.year == 2025
	assert project.start_month == 1
	assert project.first_day_of_week == 0
	assert project.page.size == PageSize.LETTER
	assert project.page.orientation == photo_calendar.config.Orientation.LANDSCAPE
	assert project.margins.left == photo_calendar.config.DEFAULT_MARGIN
	assert project.margins.top == 5.0
	assert project.theme.accent_color == "#0078D4"
	assert project.layout.split_ratio == 0.5
	assert project.layout.fill_mode == photo_calendar.config.FillMode.CONTAIN
	assert project.cover == photo_calendar.config.CoverSpec()
	assert project.month_photo_layouts == {3: PhotoLayout.GRID_2X2, 4: PhotoLayout.SINGLE}
	assert project.enable_double_sided is False


#============================================
def test_asset_roles_parse() -> None:
	data = {
		"image_assets": [
			{"path": "a.jpg", "role": "monthPhoto", "month_index": -2},
			{"path": "b.jpg", "role": "monthPhoto"},
			{"path": "c.jpg", "role": "backCoverPhoto", "slot_index": 2},
			{"path": "d.jpg", "role": "poster"},
			{"role": "coverPhoto"},
			"junk",
		],
	}
	assets = photo_calendar.project_lib.parse_project(data).image_assets
	assert [asset.path for asset in assets] == ["a.jpg", "b.jpg", "c.jpg", "d.jpg"]
	assert assets[0].role == MonthPhoto(month=-2, slot=0)
	assert assets[1].role == Unassigned()
	assert assets[2].role == photo_calendar.config.BackCoverPhoto(slot=2)
	assert assets[3].role == Unassigned()


#============================================
def test_load_project_rejects_invalid_json(tmp_path: pathlib.Path) -> None:
	path = tmp_path / "broken.json"
	path.write_text("{not json", encoding="utf-8")
	with pytest.raises(ValueError):
		photo_calendar.project_lib.load_project(path)
	with pytest.raises(OSError):
		photo_calendar.project_lib.load_project(tmp_path / "missing.json")
