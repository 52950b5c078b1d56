"""
Page geometry, photo/grid split, and photo slot patterns.
"""

# Standard Library
import logging
import math

# local repo modules
import photo_calendar as pcal
import photo_calendar.config
import photo_calendar.geometry


Rect = pcal.geometry.Rect
Margins = pcal.config.Margins
PageSpec = pcal.config.PageSpec
PageSize = pcal.config.PageSize
Orientation = pcal.config.Orientation
Placement = pcal.config.Placement
PhotoLayout = pcal.config.PhotoLayout
LayoutSpec = pcal.config.LayoutSpec
CalendarProject = pcal.config.CalendarProject

PAGE_SIZES_INCHES = pcal.config.PAGE_SIZES_INCHES
DEFAULT_PAGE_WIDTH = pcal.config.DEFAULT_PAGE_WIDTH
DEFAULT_PAGE_HEIGHT = pcal.config.DEFAULT_PAGE_HEIGHT
MIN_SPLIT_RATIO = pcal.config.MIN_SPLIT_RATIO
MAX_SPLIT_RATIO = pcal.config.MAX_SPLIT_RATIO
DEFAULT_SPLIT_RATIO = pcal.config.DEFAULT_SPLIT_RATIO
SLOT_GAP = pcal.config.SLOT_GAP

SLOT_COUNTS = {
	PhotoLayout.SINGLE: 1,
	PhotoLayout.TWO_VERTICAL_SPLIT: 2,
	PhotoLayout.GRID_2X2: 4,
	PhotoLayout.TWO_HORIZONTAL_STACK: 2,
	PhotoLayout.THREE_LEFT_STACK: 3,
	PhotoLayout.THREE_RIGHT_STACK: 3,
}

LANDSCAPE_PLACEMENTS = {
	Placement.PHOTO_TOP_CALENDAR_BOTTOM: Placement.PHOTO_LEFT_CALENDAR_RIGHT,
	Placement.PHOTO_BOTTOM_CALENDAR_TOP: Placement.PHOTO_RIGHT_CALENDAR_LEFT,
}
PORTRAIT_PLACEMENTS = {
	Placement.PHOTO_LEFT_CALENDAR_RIGHT: Placement.PHOTO_TOP_CALENDAR_BOTTOM,
	Placement.PHOTO_RIGHT_CALENDAR_LEFT: Placement.PHOTO_BOTTOM_CALENDAR_TOP,
}

logger = logging.getLogger(__name__)


#============================================
def resolve_page_size(page_spec: PageSpec) -> tuple[float, float]:
	"""
	Resolve a page spec into point dimensions.

	Named sizes are converted from inches and swapped for landscape. Custom
	sizes are used as given when both dimensions are positive; otherwise the
	letter size is used.

	Args:
		page_spec: Page specification.

	Returns:
		Tuple of (width_pt, height_pt).
	"""
	if page_spec.size == PageSize.CUSTOM:
		width = page_spec.custom_width
		height = page_spec.custom_height
		if width is not None and height is not None and width > 0 and height > 0:
			return (float(width), float(height))
		logger.debug("Custom page size incomplete (%s x %s), using letter", width, height)
		width, height = DEFAULT_PAGE_WIDTH, DEFAULT_PAGE_HEIGHT
	else:
		width_in, height_in = PAGE_SIZES_INCHES[page_spec.size.value]
		width = pcal.config.inches_to_points(width_in)
		height = pcal.config.inches_to_points(height_in)
	if page_spec.orientation == Orientation.LANDSCAPE:
		return (height, width)
	return (width, height)


#============================================
def page_rect(width: float, height: float) -> Rect:
	return Rect(0.0, 0.0, width, height)


#============================================
def zero_margins() -> Margins:
	return Margins(left=0.0, top=0.0, right=0.0, bottom=0.0)


#============================================
def compute_content_rect(width: float, height: float, margins: Margins) -> Rect:
	"""
	Inset the page rectangle by its margins.

	Args:
		width: Page width in points.
		height: Page height in points.
		margins: Page margins.

	Returns:
		Content rectangle.
	"""
	return pcal.geometry.inset_rect(
		page_rect(width, height),
		margins.left,
		margins.top,
		margins.right,
		margins.bottom,
	)


#============================================
def adjust_placement(placement: Placement, orientation: Orientation) -> Placement:
	"""
	Swap vertical and horizontal placements to suit the page orientation.

	Landscape pages put the photo beside the grid, portrait pages put it
	above or below. Applying the adjustment twice gives the same result.

	Args:
		placement: Configured placement.
		orientation: Page orientation.

	Returns:
		Effective placement.
	"""
	if orientation == Orientation.LANDSCAPE:
		return LANDSCAPE_PLACEMENTS.get(placement, placement)
	return PORTRAIT_PLACEMENTS.get(placement, placement)


#============================================
def clamp_split_ratio(ratio: float) -> float:
	"""
	Clamp a split ratio into [0.1, 0.9].
	"""
	if ratio is None or not math.isfinite(ratio):
		return DEFAULT_SPLIT_RATIO
	return min(MAX_SPLIT_RATIO, max(MIN_SPLIT_RATIO, ratio))


#============================================
def compute_split(area: Rect, layout_spec: LayoutSpec, orientation: Orientation) -> tuple[Rect, Rect]:
	"""
	Split an area into photo and grid rectangles.

	Args:
		area: Content rectangle.
		layout_spec: Layout specification.
		orientation: Page orientation.

	Returns:
		Tuple of (photo_rect, grid_rect).
	"""
	ratio = clamp_split_ratio(layout_spec.split_ratio)
	placement = adjust_placement(layout_spec.placement, orientation)

	if placement == Placement.PHOTO_LEFT_CALENDAR_RIGHT:
		split_x = area.left + area.width * ratio
		return (
			Rect(area.left, area.top, split_x, area.bottom),
			Rect(split_x, area.top, area.right, area.bottom),
		)
	if placement == Placement.PHOTO_RIGHT_CALENDAR_LEFT:
		split_x = area.left + area.width * (1.0 - ratio)
		return (
			Rect(split_x, area.top, area.right, area.bottom),
			Rect(area.left, area.top, split_x, area.bottom),
		)
	if placement == Placement.PHOTO_BOTTOM_CALENDAR_TOP:
		split_y = area.top + area.height * (1.0 - ratio)
		return (
			Rect(area.left, split_y, area.right, area.bottom),
			Rect(area.left, area.top, area.right, split_y),
		)
	split_y = area.top + area.height * ratio
	return (
		Rect(area.left, area.top, area.right, split_y),
		Rect(area.left, split_y, area.right, area.bottom),
	)


#============================================
def _half_extent(length: float) -> tuple[float, float]:
	"""
	Split a length into a cell size and a gap that never go negative.

	Args:
		length: Available length.

	Returns:
		Tuple of (cell_length, gap).
	"""
	gap = min(SLOT_GAP, max(0.0, length))
	return ((max(0.0, length) - gap) / 2.0, gap)


#============================================
def compute_photo_slots(area: Rect, photo_layout: PhotoLayout) -> list[Rect]:
	"""
	Divide a photo area into slot rectangles separated by a fixed gap.

	Each cell is measured from the area origin, and cells on the far side
	end exactly on the area edge, so cells plus gaps fill the area.

	Args:
		area: Photo rectangle.
		photo_layout: Slot pattern.

	Returns:
		Slot rectangles in slot-index order.
	"""
	half_w, gap_x = _half_extent(area.width)
	half_h, gap_y = _half_extent(area.height)
	mid_left = area.left + half_w
	mid_right = area.left + half_w + gap_x
	mid_top = area.top + half_h
	mid_bottom = area.top + half_h + gap_y

	if photo_layout == PhotoLayout.TWO_VERTICAL_SPLIT:
		return [
			Rect(area.left, area.top, mid_left, area.bottom),
			Rect(mid_right, area.top, area.right, area.bottom),
		]
	if photo_layout == PhotoLayout.GRID_2X2:
		return [
			Rect(area.left, area.top, mid_left, mid_top),
			Rect(mid_right, area.top, area.right, mid_top),
			Rect(area.left, mid_bottom, mid_left, area.bottom),
			Rect(mid_right, mid_bottom, area.right, area.bottom),
		]
	if photo_layout == PhotoLayout.TWO_HORIZONTAL_STACK:
		return [
			Rect(area.left, area.top, area.right, mid_top),
			Rect(area.left, mid_bottom, area.right, area.bottom),
		]
	if photo_layout == PhotoLayout.THREE_LEFT_STACK:
		return [
			Rect(area.left, area.top, mid_left, mid_top),
			Rect(area.left, mid_bottom, mid_left, area.bottom),
			Rect(mid_right, area.top, area.right, area.bottom),
		]
	if photo_layout == PhotoLayout.THREE_RIGHT_STACK:
		return [
			Rect(area.left, area.top, mid_left, area.bottom),
			Rect(mid_right, area.top, area.right, mid_top),
			Rect(mid_right, mid_bottom, area.right, area.bottom),
		]
	return [area]


#============================================
def slot_count(photo_layout: PhotoLayout) -> int:
	return SLOT_COUNTS[photo_layout]


#============================================
def resolve_photo_layout(project: CalendarProject, page_offset: int) -> PhotoLayout:
	"""
	Slot pattern for a month page: the per-month override or the default.

	Args:
		project: Calendar project.
		page_offset: Month page offset.

	Returns:
		PhotoLayout.
	"""
	return project.month_photo_layouts.get(page_offset, project.layout.photo_layout)
