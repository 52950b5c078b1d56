"""
Page rendering: month pages, covers, and the double-sided covers sheet.
"""

# Standard Library
import dataclasses
import enum
import logging
import typing

# PIP3 modules
import PIL.Image

# local repo modules
import photo_calendar as pcal
import photo_calendar.config
import photo_calendar.geometry
import photo_calendar.image_fit
import photo_calendar.layout
import photo_calendar.month_grid
import photo_calendar.surface


Rect = pcal.geometry.Rect
RasterSurface = pcal.surface.RasterSurface
CalendarProject = pcal.config.CalendarProject
ImageAsset = pcal.config.ImageAsset
ThemeSpec = pcal.config.ThemeSpec
FillMode = pcal.config.FillMode
PhotoLayout = pcal.config.PhotoLayout
AssetRole = pcal.config.AssetRole
MonthPhoto = pcal.config.MonthPhoto
CoverPhoto = pcal.config.CoverPhoto
BackCoverPhoto = pcal.config.BackCoverPhoto
WeekRow = pcal.month_grid.WeekRow

HEADER_HEIGHT = pcal.config.HEADER_HEIGHT
DAY_OF_WEEK_HEIGHT = pcal.config.DAY_OF_WEEK_HEIGHT
DAY_OF_WEEK_TEXT_SIZE = pcal.config.DAY_OF_WEEK_TEXT_SIZE
DAY_NUMBER_INSET = pcal.config.DAY_NUMBER_INSET
DAYS_PER_WEEK = pcal.config.DAYS_PER_WEEK
GRID_LINE_WIDTH = pcal.config.GRID_LINE_WIDTH
GRID_LINE_COLOR = pcal.config.GRID_LINE_COLOR
SLOT_BORDER_WIDTH = pcal.config.SLOT_BORDER_WIDTH
SLOT_HIGHLIGHT_WIDTH = pcal.config.SLOT_HIGHLIGHT_WIDTH
SLOT_GAP = pcal.config.SLOT_GAP
HINT_TEXT_SIZE = pcal.config.HINT_TEXT_SIZE
TITLE_LINE_FACTOR = pcal.config.TITLE_LINE_FACTOR
COVER_TITLE_SPACING = pcal.config.COVER_TITLE_SPACING
PLACEHOLDER_FILL_COLOR = pcal.config.PLACEHOLDER_FILL_COLOR
PLACEHOLDER_BORDER_COLOR = pcal.config.PLACEHOLDER_BORDER_COLOR
CUTOUT_COLOR = pcal.config.CUTOUT_COLOR
EMPTY_SLOT_HINT = pcal.config.EMPTY_SLOT_HINT
FRONT_COVER_INDEX = pcal.config.FRONT_COVER_INDEX
BACK_COVER_INDEX = pcal.config.BACK_COVER_INDEX

ImageLoader = typing.Callable[[str], PIL.Image.Image | None]
RoleForSlot = typing.Callable[[int], AssetRole]

logger = logging.getLogger(__name__)


class PageKind(enum.Enum):
	MONTH = "month"
	FRONT_COVER = "front_cover"
	BACK_COVER = "back_cover"
	COVERS_SHEET = "covers_sheet"


@dataclasses.dataclass(frozen=True)
class PagePlan:
	"""
	One output page: what to draw and whether it is printed upside down.

	Month pages may take their photos from a different offset than their
	grid (double-sided printing pairs a photo with the next month's grid).
	"""
	kind: PageKind
	photo_offset: int = 0
	calendar_offset: int = 0
	rotated: bool = False
	label: str = ""


@dataclasses.dataclass
class MonthPageLayout:
	content: Rect
	photo: Rect
	grid: Rect
	header: Rect
	day_of_week: Rect
	weeks_area: Rect
	cutout: Rect | None
	slots: list[Rect]
	weeks: list[WeekRow]
	year: int
	month: int
	photo_layout: PhotoLayout
	borderless: bool


#============================================
def plan_for_offset(offset: int) -> PagePlan:
	"""
	Plan for a single page offset.

	Args:
		offset: -1 front cover, 12 back cover, otherwise a month offset
			(-2 is the previous December).

	Returns:
		PagePlan.
	"""
	if offset == FRONT_COVER_INDEX:
		return PagePlan(PageKind.FRONT_COVER)
	if offset == BACK_COVER_INDEX:
		return PagePlan(PageKind.BACK_COVER)
	return PagePlan(PageKind.MONTH, photo_offset=offset, calendar_offset=offset)


#============================================
def page_label(project: CalendarProject, plan: PagePlan) -> str:
	"""
	Human readable page label for progress output and manifests.
	"""
	if plan.label:
		return plan.label
	if plan.kind == PageKind.FRONT_COVER:
		label = "Front Cover"
	elif plan.kind == PageKind.BACK_COVER:
		label = "Back Cover"
	elif plan.kind == PageKind.COVERS_SHEET:
		label = "Covers"
	else:
		year, month = pcal.month_grid.resolve_month(project.year, project.start_month, plan.calendar_offset)
		label = pcal.month_grid.month_title(year, month)
		if plan.photo_offset != plan.calendar_offset:
			label += f" (photos from offset {plan.photo_offset})"
	if plan.rotated:
		label += " [rotated]"
	return label


#============================================
def find_asset_for_slot(assets: list[ImageAsset], role: AssetRole) -> ImageAsset | None:
	"""
	Find the asset assigned to a slot role.

	Args:
		assets: Project image assets.
		role: Exact role to match, slot included.

	Returns:
		Matching asset with the lowest order, or None.
	"""
	matches = [asset for asset in assets if asset.role == role]
	if not matches:
		return None
	if len(matches) > 1:
		logger.debug("%d assets claim %s, using lowest order", len(matches), role)
	return min(matches, key=lambda asset: asset.order)


#============================================
def month_role(photo_offset: int) -> RoleForSlot:
	return lambda slot_index: MonthPhoto(month=photo_offset, slot=slot_index)


#============================================
def cover_role(back: bool) -> RoleForSlot:
	if back:
		return lambda slot_index: BackCoverPhoto(slot=slot_index)
	return lambda slot_index: CoverPhoto(slot=slot_index)


#============================================
def _top_band(rect: Rect, height: float) -> Rect:
	return Rect(rect.left, rect.top, rect.right, min(rect.bottom, rect.top + height))


#============================================
def compute_month_page_layout(
	project: CalendarProject,
	width: float,
	height: float,
	photo_offset: int,
	calendar_offset: int,
) -> MonthPageLayout:
	"""
	Resolve every rectangle of a month page.

	In borderless calendar mode the margins are zero and the header and the
	cut-out holding the day-of-week row and weeks are inset from the grid
	rectangle by the calendar padding.

	Args:
		project: Calendar project.
		width: Page width in points.
		height: Page height in points.
		photo_offset: Page offset whose photos fill the slots.
		calendar_offset: Page offset whose month fills the grid.

	Returns:
		MonthPageLayout.
	"""
	borderless = project.cover.borderless_calendar
	margins = pcal.layout.zero_margins() if borderless else project.margins
	content = pcal.layout.compute_content_rect(width, height, margins)
	photo_rect, grid_rect = pcal.layout.compute_split(content, project.layout, project.page.orientation)
	photo_layout = pcal.layout.resolve_photo_layout(project, photo_offset)
	slots = pcal.layout.compute_photo_slots(photo_rect, photo_layout)

	year, month = pcal.month_grid.resolve_month(project.year, project.start_month, calendar_offset)
	weeks = pcal.month_grid.build_month_grid(year, month, project.first_day_of_week)

	cutout = None
	if borderless:
		padding = max(0.0, project.cover.calendar_padding)
		header = _top_band(pcal.geometry.inset_rect(grid_rect, padding, padding, padding, 0.0), HEADER_HEIGHT)
		cutout = pcal.geometry.inset_rect(grid_rect, padding, header.bottom - grid_rect.top, padding, padding)
		body = cutout
	else:
		header = _top_band(grid_rect, HEADER_HEIGHT)
		body = Rect(grid_rect.left, header.bottom, grid_rect.right, grid_rect.bottom)
	day_of_week = _top_band(body, DAY_OF_WEEK_HEIGHT)
	weeks_area = Rect(body.left, day_of_week.bottom, body.right, body.bottom)

	return MonthPageLayout(
		content=content,
		photo=photo_rect,
		grid=grid_rect,
		header=header,
		day_of_week=day_of_week,
		weeks_area=weeks_area,
		cutout=cutout,
		slots=slots,
		weeks=weeks,
		year=year,
		month=month,
		photo_layout=photo_layout,
		borderless=borderless,
	)


#============================================
def draw_empty_slot(surface: RasterSurface, rect: Rect, hint_text: str | None = None, font_family: str | None = None) -> None:
	"""
	Draw a placeholder for a slot with no usable photo.
	"""
	surface.fill_rect(rect, PLACEHOLDER_FILL_COLOR)
	surface.stroke_rect(rect, PLACEHOLDER_BORDER_COLOR, SLOT_BORDER_WIDTH)
	if hint_text:
		with surface.clipped(rect):
			surface.draw_text_centered(hint_text, rect, HINT_TEXT_SIZE, PLACEHOLDER_BORDER_COLOR, family=font_family)


#============================================
def draw_slot_highlight(surface: RasterSurface, rect: Rect, color: str) -> None:
	surface.stroke_rect(rect, color, SLOT_HIGHLIGHT_WIDTH)


#============================================
def draw_photo(surface: RasterSurface, image: PIL.Image.Image, rect: Rect, fill_mode: FillMode, asset: ImageAsset) -> None:
	"""
	Draw a photo into a slot with the asset's zoom and pan, clipped to the slot.
	"""
	dest = pcal.image_fit.compute_asset_rect(image.width, image.height, rect, fill_mode, asset)
	with surface.clipped(rect):
		surface.draw_image(image, dest)


#============================================
def draw_photo_slots(
	surface: RasterSurface,
	slots: list[Rect],
	assets: list[ImageAsset],
	role_for_slot: RoleForSlot,
	fill_mode: FillMode,
	image_loader: ImageLoader,
	theme: ThemeSpec,
	active_slot: int = -1,
) -> None:
	"""
	Draw every slot in order: the matched photo or a placeholder.

	Args:
		surface: Drawing surface.
		slots: Slot rectangles in slot-index order.
		assets: Project image assets.
		role_for_slot: Maps a slot index to the role that fills it.
		fill_mode: Fill mode for photos.
		image_loader: Returns a decoded image for a path, or None.
		theme: Theme for the highlight color and hint font.
		active_slot: Slot to highlight, -1 for none.
	"""
	for slot_index, rect in enumerate(slots):
		asset = find_asset_for_slot(assets, role_for_slot(slot_index))
		image = None
		if asset is not None:
			image = image_loader(asset.path)
			if image is None:
				logger.debug("No image for slot %d (%s), drawing placeholder", slot_index, asset.path)
		is_active = slot_index == active_slot
		if image is None:
			hint = EMPTY_SLOT_HINT if is_active else None
			draw_empty_slot(surface, rect, hint, theme.font_family)
		else:
			draw_photo(surface, image, rect, fill_mode, asset)
		if is_active:
			draw_slot_highlight(surface, rect, theme.accent_color)


#============================================
def draw_calendar_header(surface: RasterSurface, rect: Rect, title: str, theme: ThemeSpec) -> None:
	surface.draw_text_centered(
		title,
		rect,
		theme.header_font_size,
		theme.primary_text_color,
		bold=True,
		family=theme.font_family,
	)


#============================================
def draw_day_of_week_row(surface: RasterSurface, rect: Rect, day_names: list[str], theme: ThemeSpec) -> None:
	"""
	Draw the day-of-week abbreviations with their cell borders.
	"""
	column_width = rect.width / DAYS_PER_WEEK
	for column, name in enumerate(day_names):
		left = rect.left + column * column_width
		right = rect.left + (column + 1) * column_width
		cell = Rect(left, rect.top, right, rect.bottom)
		surface.draw_text_centered(name, cell, DAY_OF_WEEK_TEXT_SIZE, theme.primary_text_color, family=theme.font_family)
		surface.draw_line(left, rect.top, right, rect.top, GRID_LINE_COLOR, GRID_LINE_WIDTH)
		surface.draw_line(left, rect.bottom, right, rect.bottom, GRID_LINE_COLOR, GRID_LINE_WIDTH)
		surface.draw_line(left, rect.top, left, rect.bottom, GRID_LINE_COLOR, GRID_LINE_WIDTH)
	surface.draw_line(rect.right, rect.top, rect.right, rect.bottom, GRID_LINE_COLOR, GRID_LINE_WIDTH)


#============================================
def draw_day_grid(surface: RasterSurface, rect: Rect, weeks: list[WeekRow], theme: ThemeSpec) -> None:
	"""
	Draw day numbers in the top-left of each non-empty cell, then the lines.

	Args:
		surface: Drawing surface.
		rect: Weeks area.
		weeks: Month grid rows.
		theme: Theme for text color, size, and font.
	"""
	if not weeks:
		return
	column_width = rect.width / DAYS_PER_WEEK
	row_height = rect.height / len(weeks)

	for row, week in enumerate(weeks):
		for column, day in enumerate(week):
			if day is None:
				continue
			surface.draw_text(
				str(day.day),
				rect.left + column * column_width + DAY_NUMBER_INSET,
				rect.top + row * row_height + DAY_NUMBER_INSET,
				theme.day_font_size,
				theme.primary_text_color,
				family=theme.font_family,
			)

	for column in range(DAYS_PER_WEEK + 1):
		x = rect.left + column * column_width
		surface.draw_line(x, rect.top, x, rect.bottom, GRID_LINE_COLOR, GRID_LINE_WIDTH)
	for row in range(len(weeks) + 1):
		y = rect.top + row * row_height
		surface.draw_line(rect.left, y, rect.right, y, GRID_LINE_COLOR, GRID_LINE_WIDTH)


#============================================
def draw_calendar_grid(
	surface: RasterSurface,
	page_layout: MonthPageLayout,
	project: CalendarProject,
	include_header: bool = True,
) -> None:
	"""
	Draw the month title, day-of-week row, and week rows.
	"""
	theme = project.theme
	if include_header:
		title = pcal.month_grid.month_title(page_layout.year, page_layout.month)
		draw_calendar_header(surface, page_layout.header, title, theme)
	day_names = pcal.month_grid.rotated_day_names(project.first_day_of_week)
	draw_day_of_week_row(surface, page_layout.day_of_week, day_names, theme)
	draw_day_grid(surface, page_layout.weeks_area, page_layout.weeks, theme)


#============================================
def draw_month_page(
	surface: RasterSurface,
	project: CalendarProject,
	photo_offset: int,
	calendar_offset: int,
	image_loader: ImageLoader,
	active_slot: int = -1,
) -> MonthPageLayout:
	"""
	Draw a month page: background band, photo slots, then the grid.

	With the borderless background band the whole page takes the theme
	background, the header is drawn on the band, and a white cut-out receives
	the rest of the grid.

	Args:
		surface: Drawing surface sized to the page.
		project: Calendar project.
		photo_offset: Offset whose photos fill the slots.
		calendar_offset: Offset whose month fills the grid.
		image_loader: Decoded image provider.
		active_slot: Slot to highlight, -1 for none.

	Returns:
		The resolved page layout.
	"""
	page_layout = compute_month_page_layout(
		project,
		surface.width_pt,
		surface.height_pt,
		photo_offset,
		calendar_offset,
	)
	band = page_layout.borderless and project.cover.use_calendar_background_on_borderless
	if band:
		surface.fill_rect(surface.bounds, project.theme.background_color)
		title = pcal.month_grid.month_title(page_layout.year, page_layout.month)
		draw_calendar_header(surface, page_layout.header, title, project.theme)
		surface.fill_rect(page_layout.cutout, CUTOUT_COLOR)

	draw_photo_slots(
		surface,
		page_layout.slots,
		project.image_assets,
		month_role(photo_offset),
		project.layout.fill_mode,
		image_loader,
		project.theme,
		active_slot,
	)
	draw_calendar_grid(surface, page_layout, project, include_header=not band)
	return page_layout


#============================================
def compute_title_band_height(project: CalendarProject) -> float:
	"""
	Height of the cover title band, 0 when there is no title or subtitle.
	"""
	cover = project.cover
	height = 0.0
	if cover.title:
		height += (cover.title_font_size or project.theme.title_font_size) * TITLE_LINE_FACTOR
	if cover.subtitle:
		height += (cover.subtitle_font_size or project.theme.subtitle_font_size) * TITLE_LINE_FACTOR
	if height > 0:
		height += COVER_TITLE_SPACING
	return height


#============================================
def draw_cover_content(
	surface: RasterSurface,
	rect: Rect,
	project: CalendarProject,
	back: bool,
	image_loader: ImageLoader,
	active_slot: int = -1,
) -> list[Rect]:
	"""
	Draw cover photo slots and, on the front cover, the title band.

	Args:
		surface: Drawing surface.
		rect: Cover content rectangle.
		project: Calendar project.
		back: Draw the back cover instead of the front.
		image_loader: Decoded image provider.
		active_slot: Slot to highlight, -1 for none.

	Returns:
		Slot rectangles drawn.
	"""
	cover = project.cover
	theme = project.theme
	band_height = 0.0 if back else compute_title_band_height(project)
	band_top = max(rect.top, rect.bottom - band_height)
	photo_area = Rect(rect.left, rect.top, rect.right, band_top)

	photo_layout = cover.back_layout if back else cover.front_layout
	slots = pcal.layout.compute_photo_slots(photo_area, photo_layout)
	draw_photo_slots(
		surface,
		slots,
		project.image_assets,
		cover_role(back),
		project.layout.fill_mode,
		image_loader,
		theme,
		active_slot,
	)

	if band_height <= 0:
		return slots
	family = cover.title_font_family or theme.font_family
	line_top = band_top + COVER_TITLE_SPACING / 2.0
	if cover.title:
		size = cover.title_font_size or theme.title_font_size
		line = Rect(rect.left, line_top, rect.right, line_top + size * TITLE_LINE_FACTOR)
		surface.draw_text_centered(cover.title, line, size, cover.title_color or theme.primary_text_color, bold=True, family=family)
		line_top = line.bottom
	if cover.subtitle:
		size = cover.subtitle_font_size or theme.subtitle_font_size
		line = Rect(rect.left, line_top, rect.right, line_top + size * TITLE_LINE_FACTOR)
		surface.draw_text_centered(cover.subtitle, line, size, cover.subtitle_color or theme.accent_color, family=family)
	return slots


#============================================
def draw_cover_page(
	surface: RasterSurface,
	project: CalendarProject,
	back: bool,
	image_loader: ImageLoader,
	active_slot: int = -1,
) -> list[Rect]:
	"""
	Draw a full front or back cover page.

	A borderless side ignores the margins. Cover padding fills the page with
	the theme background and insets the content by the padding.
	"""
	cover = project.cover
	borderless = cover.borderless_back_cover if back else cover.borderless_front_cover
	padding = cover.back_cover_padding if back else cover.front_cover_padding
	margins = pcal.layout.zero_margins() if borderless else project.margins
	rect = pcal.layout.compute_content_rect(surface.width_pt, surface.height_pt, margins)
	if padding > 0:
		surface.fill_rect(surface.bounds, project.theme.background_color)
		rect = pcal.geometry.inset_uniform(rect, padding)
	return draw_cover_content(surface, rect, project, back, image_loader, active_slot)


#============================================
def compute_covers_sheet_halves(project: CalendarProject, width: float, height: float) -> tuple[Rect, Rect]:
	"""
	Top (front cover) and bottom (back cover) halves of the covers sheet.
	"""
	content = pcal.layout.compute_content_rect(width, height, project.margins)
	half_gap = min(SLOT_GAP, content.height) / 2.0
	top = Rect(content.left, content.top, content.right, content.mid_y - half_gap)
	bottom = Rect(content.left, content.mid_y + half_gap, content.right, content.bottom)
	return (top, bottom)


#============================================
def draw_covers_sheet(surface: RasterSurface, project: CalendarProject, image_loader: ImageLoader) -> None:
	"""
	Draw the double-sided covers sheet.

	The front cover fills the top half upside down so it reads correctly
	once the sheet is folded; the back cover fills the bottom half.
	"""
	top, bottom = compute_covers_sheet_halves(project, surface.width_pt, surface.height_pt)
	draw_cover_content(surface, top, project, False, image_loader)
	surface.rotate_region(top)
	draw_cover_content(surface, bottom, project, True, image_loader)


#============================================
def draw_page(
	surface: RasterSurface,
	project: CalendarProject,
	plan: PagePlan,
	image_loader: ImageLoader | None = None,
	active_slot: int = -1,
) -> None:
	"""
	Draw one planned page onto a surface.

	Args:
		surface: Drawing surface sized to the page.
		project: Calendar project.
		plan: Page plan.
		image_loader: Decoded image provider, uncached decode when None.
		active_slot: Slot to highlight, -1 for none.
	"""
	loader = image_loader if image_loader is not None else pcal.image_fit.load_image
	if plan.kind == PageKind.FRONT_COVER:
		draw_cover_page(surface, project, False, loader, active_slot)
	elif plan.kind == PageKind.BACK_COVER:
		draw_cover_page(surface, project, True, loader, active_slot)
	elif plan.kind == PageKind.COVERS_SHEET:
		draw_covers_sheet(surface, project, loader)
	else:
		draw_month_page(surface, project, plan.photo_offset, plan.calendar_offset, loader, active_slot)
	if plan.rotated:
		surface.rotate_region(surface.bounds)
