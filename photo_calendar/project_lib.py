"""
Project files: JSON load/save for CalendarProject records.
"""

# Standard Library
import dataclasses
import enum
import json
import logging
import math
import pathlib

# local repo modules
import photo_calendar as pcal
import photo_calendar.config


CalendarProject = pcal.config.CalendarProject
PageSpec = pcal.config.PageSpec
Margins = pcal.config.Margins
ThemeSpec = pcal.config.ThemeSpec
LayoutSpec = pcal.config.LayoutSpec
CoverSpec = pcal.config.CoverSpec
ImageAsset = pcal.config.ImageAsset
PhotoLayout = pcal.config.PhotoLayout
AssetRole = pcal.config.AssetRole
Unassigned = pcal.config.Unassigned
MonthPhoto = pcal.config.MonthPhoto
CoverPhoto = pcal.config.CoverPhoto
BackCoverPhoto = pcal.config.BackCoverPhoto

MONTHS_PER_YEAR = pcal.config.MONTHS_PER_YEAR
DAYS_PER_WEEK = pcal.config.DAYS_PER_WEEK

ROLE_UNASSIGNED = "unassigned"
ROLE_MONTH_PHOTO = "monthPhoto"
ROLE_COVER_PHOTO = "coverPhoto"
ROLE_BACK_COVER_PHOTO = "backCoverPhoto"

OPTIONAL_FLOAT_FIELDS = {"custom_width", "custom_height", "title_font_size", "subtitle_font_size"}

logger = logging.getLogger(__name__)


#============================================
def parse_enum(enum_class: type[enum.Enum], value: object, default: enum.Enum) -> enum.Enum:
	"""
	Parse an enum from its string value.

	Args:
		enum_class: Enum type.
		value: Stored value.
		default: Fallback for unknown values.

	Returns:
		Enum member.
	"""
	try:
		return enum_class(value)
	except ValueError:
		logger.debug("Unknown %s value %r, using %s", enum_class.__name__, value, default.value)
		return default


#============================================
def parse_float(value: object, default: float) -> float:
	if isinstance(value, bool) or value is None:
		return default
	try:
		number = float(value)
	except (TypeError, ValueError):
		logger.debug("Invalid number %r, using %s", value, default)
		return default
	if not math.isfinite(number):
		logger.debug("Non-finite number %r, using %s", value, default)
		return default
	return number


#============================================
def parse_optional_float(value: object) -> float | None:
	if value is None:
		return None
	number = parse_float(value, math.nan)
	if math.isnan(number):
		return None
	return number


#============================================
def parse_int(value: object, default: int) -> int:
	number = parse_float(value, math.nan)
	if math.isnan(number):
		return default
	return int(number)


#============================================
def parse_bool(value: object, default: bool) -> bool:
	if isinstance(value, bool):
		return value
	logger.debug("Invalid flag %r, using %s", value, default)
	return default


#============================================
def _coerce_field(name: str, value: object, default: object) -> object:
	"""
	Coerce a stored value to the type of a record field's default.
	"""
	if isinstance(default, enum.Enum):
		return parse_enum(type(default), value, default)
	if isinstance(default, bool):
		return parse_bool(value, default)
	if isinstance(default, float):
		return parse_float(value, default)
	if isinstance(default, int):
		return parse_int(value, default)
	if name in OPTIONAL_FLOAT_FIELDS:
		return parse_optional_float(value)
	if value is None or isinstance(value, str):
		return value
	logger.debug("Invalid text %r for %s, using %r", value, name, default)
	return default


#============================================
def parse_section(record_class: type, data: object):
	"""
	Build a configuration record from a dict, keeping defaults for missing keys.

	Args:
		record_class: Dataclass with defaults for every field.
		data: Stored section.

	Returns:
		Record instance.
	"""
	record = record_class()
	if not isinstance(data, dict):
		if data is not None:
			logger.debug("Ignoring %s section of type %s", record_class.__name__, type(data).__name__)
		return record
	for field in dataclasses.fields(record_class):
		if field.name in data:
			value = _coerce_field(field.name, data[field.name], getattr(record, field.name))
			setattr(record, field.name, value)
	return record


#============================================
def section_to_dict(record) -> dict:
	data = {}
	for field in dataclasses.fields(record):
		value = getattr(record, field.name)
		if isinstance(value, enum.Enum):
			value = value.value
		data[field.name] = value
	return data


#============================================
def parse_role(data: dict) -> AssetRole:
	"""
	Parse an asset role from its role name, month index, and slot index.

	Args:
		data: Stored asset.

	Returns:
		AssetRole; unknown roles become Unassigned.
	"""
	role_name = data.get("role", ROLE_UNASSIGNED)
	slot = max(0, parse_int(data.get("slot_index"), 0))
	if role_name == ROLE_MONTH_PHOTO:
		month = data.get("month_index")
		if month is None:
			logger.debug("Month photo without month index: %s", data.get("path"))
			return Unassigned()
		return MonthPhoto(month=parse_int(month, 0), slot=slot)
	if role_name == ROLE_COVER_PHOTO:
		return CoverPhoto(slot=slot)
	if role_name == ROLE_BACK_COVER_PHOTO:
		return BackCoverPhoto(slot=slot)
	if role_name != ROLE_UNASSIGNED:
		logger.debug("Unknown role %r, treating as unassigned", role_name)
	return Unassigned()


#============================================
def role_to_dict(role: AssetRole) -> dict:
	if isinstance(role, MonthPhoto):
		return {"role": ROLE_MONTH_PHOTO, "month_index": role.month, "slot_index": role.slot}
	if isinstance(role, CoverPhoto):
		return {"role": ROLE_COVER_PHOTO, "month_index": None, "slot_index": role.slot}
	if isinstance(role, BackCoverPhoto):
		return {"role": ROLE_BACK_COVER_PHOTO, "month_index": None, "slot_index": role.slot}
	return {"role": ROLE_UNASSIGNED, "month_index": None, "slot_index": None}


#============================================
def parse_asset(data: object) -> ImageAsset | None:
	if not isinstance(data, dict) or not isinstance(data.get("path"), str) or not data["path"]:
		logger.debug("Skipping asset without a path: %r", data)
		return None
	return ImageAsset(
		path=data["path"],
		role=parse_role(data),
		zoom=parse_float(data.get("zoom"), 1.0),
		pan_x=parse_float(data.get("pan_x"), 0.0),
		pan_y=parse_float(data.get("pan_y"), 0.0),
		order=parse_int(data.get("order"), 0),
	)


#============================================
def asset_to_dict(asset: ImageAsset) -> dict:
	data = {"path": asset.path}
	data.update(role_to_dict(asset.role))
	data["zoom"] = asset.zoom
	data["pan_x"] = asset.pan_x
	data["pan_y"] = asset.pan_y
	data["order"] = asset.order
	return data


#============================================
def parse_month_layouts(data: object) -> dict[int, PhotoLayout]:
	layouts: dict[int, PhotoLayout] = {}
	if not isinstance(data, dict):
		return layouts
	for key, value in data.items():
		offset = parse_int(key, None)
		if offset is None:
			logger.debug("Ignoring month layout key %r", key)
			continue
		layouts[offset] = parse_enum(PhotoLayout, value, PhotoLayout.SINGLE)
	return layouts


#============================================
def parse_project(data: dict) -> CalendarProject:
	"""
	Build a CalendarProject from decoded JSON.

	Bad values fall back to defaults; nothing here raises for bad data.

	Args:
		data: Decoded project dict.

	Returns:
		CalendarProject.
	"""
	project = CalendarProject()
	if not isinstance(data, dict):
		logger.debug("Project data is not an object, using defaults")
		return project
	if isinstance(data.get("name"), str):
		project.name = data["name"]
	project.year = parse_int(data.get("year"), project.year)

	start_month = parse_int(data.get("start_month"), 1)
	if start_month < 1 or start_month > MONTHS_PER_YEAR:
		logger.debug("Start month %r out of range, using 1", start_month)
		start_month = 1
	project.start_month = start_month

	first_day = parse_int(data.get("first_day_of_week"), 0)
	if first_day < 0 or first_day >= DAYS_PER_WEEK:
		logger.debug("First day of week %r out of range, using 0", first_day)
		first_day = 0
	project.first_day_of_week = first_day

	project.page = parse_section(PageSpec, data.get("page"))
	project.margins = parse_section(Margins, data.get("margins"))
	project.theme = parse_section(ThemeSpec, data.get("theme"))
	project.layout = parse_section(LayoutSpec, data.get("layout"))
	project.cover = parse_section(CoverSpec, data.get("cover"))

	assets = data.get("image_assets")
	if isinstance(assets, list):
		for item in assets:
			asset = parse_asset(item)
			if asset is not None:
				project.image_assets.append(asset)
	project.month_photo_layouts = parse_month_layouts(data.get("month_photo_layouts"))
	project.enable_double_sided = parse_bool(data.get("enable_double_sided", False), False)
	return project


#============================================
def project_to_dict(project: CalendarProject) -> dict:
	"""
	Convert a CalendarProject to a JSON-ready dict.
	"""
	return {
		"name": project.name,
		"year": project.year,
		"start_month": project.start_month,
		"first_day_of_week": project.first_day_of_week,
		"page": section_to_dict(project.page),
		"margins": section_to_dict(project.margins),
		"theme": section_to_dict(project.theme),
		"layout": section_to_dict(project.layout),
		"cover": section_to_dict(project.cover),
		"image_assets": [asset_to_dict(asset) for asset in project.image_assets],
		"month_photo_layouts": {
			str(offset): layout.value for offset, layout in sorted(project.month_photo_layouts.items())
		},
		"enable_double_sided": project.enable_double_sided,
	}


#============================================
def load_project(path: str | pathlib.Path) -> CalendarProject:
	"""
	Load a project JSON file.

	Args:
		path: Project file path.

	Returns:
		CalendarProject.

	Raises:
		OSError: The file cannot be read.
		ValueError: The file is not valid JSON.
	"""
	project_path = pathlib.Path(path)
	with project_path.open("r", encoding="utf-8") as handle:
		data = json.load(handle)
	return parse_project(data)


#============================================
def save_project(path: str | pathlib.Path, project: CalendarProject) -> None:
	project_path = pathlib.Path(path)
	with project_path.open("w", encoding="utf-8") as handle:
		json.dump(project_to_dict(project), handle, indent=2, sort_keys=True)
		handle.write("\n")
