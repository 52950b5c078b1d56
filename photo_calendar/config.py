"""
Shared configuration, constants, and project records.
"""

# Standard Library
import dataclasses
import datetime
import enum


POINTS_PER_INCH = 72.0
DEFAULT_TARGET_DPI = 300.0

DEFAULT_PAGE_WIDTH = 612.0
DEFAULT_PAGE_HEIGHT = 792.0
DEFAULT_MARGIN = 14.4

MIN_SPLIT_RATIO = 0.1
MAX_SPLIT_RATIO = 0.9
DEFAULT_SPLIT_RATIO = 0.5
MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
MIN_PAN = -1.0
MAX_PAN = 1.0
SLOT_GAP = 4.0

HEADER_HEIGHT = 40.0
DAY_OF_WEEK_HEIGHT = 20.0
DAY_OF_WEEK_TEXT_SIZE = 10.0
DAY_NUMBER_INSET = 2.0
GRID_LINE_WIDTH = 0.5
SLOT_BORDER_WIDTH = 1.0
SLOT_HIGHLIGHT_WIDTH = 2.0
HINT_TEXT_SIZE = 12.0
TITLE_LINE_FACTOR = 1.5
COVER_TITLE_SPACING = 8.0
DEFAULT_CALENDAR_PADDING = 20.0

GRID_LINE_COLOR = "#808080"
PLACEHOLDER_FILL_COLOR = "#EEEEEE"
PLACEHOLDER_BORDER_COLOR = "#808080"
CUTOUT_COLOR = "#FFFFFF"
PAGE_COLOR = "#FFFFFF"
EMPTY_SLOT_HINT = "No photo assigned"
FAILED_PAGE_TEXT = "Page could not be rendered"
PROGRESS_BAR_WIDTH = 30

DEFAULT_FONT_FAMILY = "Helvetica"
DEFAULT_FONT_FILE = "Vera.ttf"
DEFAULT_BOLD_FONT_FILE = "VeraBd.ttf"

MONTHS_PER_YEAR = 12
DAYS_PER_WEEK = 7
MAX_WEEK_ROWS = 6
PREVIOUS_DECEMBER_INDEX = -2
FRONT_COVER_INDEX = -1
BACK_COVER_INDEX = 12

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTH_NAMES = (
	"January",
	"February",
	"March",
	"April",
	"May",
	"June",
	"July",
	"August",
	"September",
	"October",
	"November",
	"December",
)

PAGE_SIZES_INCHES = {
	"five_by_seven": (5.0, 7.0),
	"a4": (8.27, 11.69),
	"letter": (8.5, 11.0),
	"tabloid_11x17": (11.0, 17.0),
	"super_b_13x19": (13.0, 19.0),
}


class PageSize(enum.Enum):
	FIVE_BY_SEVEN = "five_by_seven"
	A4 = "a4"
	LETTER = "letter"
	TABLOID_11X17 = "tabloid_11x17"
	SUPER_B_13X19 = "super_b_13x19"
	CUSTOM = "custom"


class Orientation(enum.Enum):
	PORTRAIT = "portrait"
	LANDSCAPE = "landscape"


class Placement(enum.Enum):
	PHOTO_TOP_CALENDAR_BOTTOM = "photo_top_calendar_bottom"
	PHOTO_BOTTOM_CALENDAR_TOP = "photo_bottom_calendar_top"
	PHOTO_LEFT_CALENDAR_RIGHT = "photo_left_calendar_right"
	PHOTO_RIGHT_CALENDAR_LEFT = "photo_right_calendar_left"


class FillMode(enum.Enum):
	COVER = "cover"
	CONTAIN = "contain"


class PhotoLayout(enum.Enum):
	SINGLE = "single"
	TWO_VERTICAL_SPLIT = "two_vertical_split"
	GRID_2X2 = "grid_2x2"
	TWO_HORIZONTAL_STACK = "two_horizontal_stack"
	THREE_LEFT_STACK = "three_left_stack"
	THREE_RIGHT_STACK = "three_right_stack"


#============================================
# Asset roles. Compared by value, so a slot lookup is an equality test.

@dataclasses.dataclass(frozen=True)
class Unassigned:
	pass


@dataclasses.dataclass(frozen=True)
class MonthPhoto:
	month: int
	slot: int = 0


@dataclasses.dataclass(frozen=True)
class CoverPhoto:
	slot: int = 0


@dataclasses.dataclass(frozen=True)
class BackCoverPhoto:
	slot: int = 0


AssetRole = Unassigned | MonthPhoto | CoverPhoto | BackCoverPhoto


@dataclasses.dataclass
class PageSpec:
	size: PageSize = PageSize.LETTER
	orientation: Orientation = Orientation.PORTRAIT
	custom_width: float | None = None
	custom_height: float | None = None


@dataclasses.dataclass
class Margins:
	left: float = DEFAULT_MARGIN
	top: float = DEFAULT_MARGIN
	right: float = DEFAULT_MARGIN
	bottom: float = DEFAULT_MARGIN


@dataclasses.dataclass
class ThemeSpec:
	font_family: str = DEFAULT_FONT_FAMILY
	header_font_size: float = 28.0
	day_font_size: float = 11.0
	title_font_size: float = 36.0
	subtitle_font_size: float = 18.0
	primary_text_color: str = "#000000"
	accent_color: str = "#0078D4"
	background_color: str = "#FFFFFF"


@dataclasses.dataclass
class LayoutSpec:
	placement: Placement = Placement.PHOTO_TOP_CALENDAR_BOTTOM
	split_ratio: float = DEFAULT_SPLIT_RATIO
	fill_mode: FillMode = FillMode.COVER
	photo_layout: PhotoLayout = PhotoLayout.SINGLE


@dataclasses.dataclass
class CoverSpec:
	front_layout: PhotoLayout = PhotoLayout.SINGLE
	back_layout: PhotoLayout = PhotoLayout.SINGLE
	title: str | None = None
	subtitle: str | None = None
	title_font_family: str | None = None
	title_font_size: float | None = None
	subtitle_font_size: float | None = None
	title_color: str | None = None
	subtitle_color: str | None = None
	borderless_front_cover: bool = False
	borderless_back_cover: bool = False
	borderless_calendar: bool = False
	front_cover_padding: float = 0.0
	back_cover_padding: float = 0.0
	calendar_padding: float = DEFAULT_CALENDAR_PADDING
	use_calendar_background_on_borderless: bool = True


@dataclasses.dataclass
class ImageAsset:
	path: str
	role: AssetRole = dataclasses.field(default_factory=Unassigned)
	zoom: float = 1.0
	pan_x: float = 0.0
	pan_y: float = 0.0
	order: int = 0


def _current_year() -> int:
	return datetime.date.today().year


@dataclasses.dataclass
class CalendarProject:
	name: str = "New Project"
	year: int = dataclasses.field(default_factory=_current_year)
	start_month: int = 1
	first_day_of_week: int = 0
	page: PageSpec = dataclasses.field(default_factory=PageSpec)
	margins: Margins = dataclasses.field(default_factory=Margins)
	theme: ThemeSpec = dataclasses.field(default_factory=ThemeSpec)
	layout: LayoutSpec = dataclasses.field(default_factory=LayoutSpec)
	cover: CoverSpec = dataclasses.field(default_factory=CoverSpec)
	image_assets: list[ImageAsset] = dataclasses.field(default_factory=list)
	month_photo_layouts: dict[int, PhotoLayout] = dataclasses.field(default_factory=dict)
	enable_double_sided: bool = False


#============================================
def inches_to_points(value: float) -> float:
	"""
	Convert inches to points.

	Args:
		value: Inches value.

	Returns:
		Points value.
	"""
	return value * POINTS_PER_INCH


#============================================
def dpi_scale(dpi: float) -> float:
	"""
	Pixels per point for a target DPI.
	"""
	return dpi / POINTS_PER_INCH
