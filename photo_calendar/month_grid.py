"""
Month grid generation and page offset to month resolution.
"""

# Standard Library
import calendar
import datetime

# local repo modules
import photo_calendar as pcal
import photo_calendar.config


DAYS_PER_WEEK = pcal.config.DAYS_PER_WEEK
MAX_WEEK_ROWS = pcal.config.MAX_WEEK_ROWS
MONTHS_PER_YEAR = pcal.config.MONTHS_PER_YEAR
PREVIOUS_DECEMBER_INDEX = pcal.config.PREVIOUS_DECEMBER_INDEX
DAY_NAMES = pcal.config.DAY_NAMES
MONTH_NAMES = pcal.config.MONTH_NAMES

WeekRow = list[datetime.date | None]


#============================================
def _check_month(month: int) -> None:
	if month < 1 or month > MONTHS_PER_YEAR:
		raise ValueError(f"month must be in 1..12, got {month}")


#============================================
def _check_first_day(first_day_of_week: int) -> None:
	if first_day_of_week < 0 or first_day_of_week >= DAYS_PER_WEEK:
		raise ValueError(f"first_day_of_week must be in 0..6, got {first_day_of_week}")


#============================================
def days_in_month(year: int, month: int) -> int:
	"""
	Number of days in a month, leap years included.

	Args:
		year: Calendar year.
		month: Month number 1..12.

	Returns:
		Day count.
	"""
	_check_month(month)
	return calendar.monthrange(year, month)[1]


#============================================
def weekday_index(day: datetime.date) -> int:
	"""
	Weekday index with Sunday=0 through Saturday=6.
	"""
	return (day.weekday() + 1) % DAYS_PER_WEEK


#============================================
def build_month_grid(year: int, month: int, first_day_of_week: int) -> list[WeekRow]:
	"""
	Build the week-by-day matrix for a month.

	Cells outside the month are None. Rows are only emitted while the walk has
	not passed the last day, so the grid never ends in a row of pure
	next-month overflow, and never exceeds six rows.

	Args:
		year: Calendar year.
		month: Month number 1..12.
		first_day_of_week: Column 0 weekday, Sunday=0 through Saturday=6.

	Returns:
		List of week rows, each holding seven dates or None.
	"""
	_check_month(month)
	_check_first_day(first_day_of_week)
	day_count = days_in_month(year, month)
	first_weekday = weekday_index(datetime.date(year, month, 1))
	offset = (first_weekday - first_day_of_week + DAYS_PER_WEEK) % DAYS_PER_WEEK

	weeks: list[WeekRow] = []
	current_day = 1 - offset
	while current_day <= day_count and len(weeks) < MAX_WEEK_ROWS:
		week: WeekRow = []
		for _column in range(DAYS_PER_WEEK):
			if 1 <= current_day <= day_count:
				week.append(datetime.date(year, month, current_day))
			else:
				week.append(None)
			current_day += 1
		weeks.append(week)
	return weeks


#============================================
def rotated_day_names(first_day_of_week: int) -> list[str]:
	"""
	Day-of-week abbreviations starting at the configured first day.

	Args:
		first_day_of_week: Sunday=0 through Saturday=6.

	Returns:
		Seven abbreviations.
	"""
	_check_first_day(first_day_of_week)
	return [DAY_NAMES[(index + first_day_of_week) % DAYS_PER_WEEK] for index in range(DAYS_PER_WEEK)]


#============================================
def resolve_month(year: int, start_month: int, offset: int) -> tuple[int, int]:
	"""
	Resolve a page offset into a (year, month) pair.

	Offset 0 is the first configured month and offsets wrap across year
	boundaries. The previous-December offset resolves to December of the
	year before the calendar year.

	Args:
		year: Calendar start year.
		start_month: First configured month 1..12.
		offset: Page offset.

	Returns:
		Tuple of (year, month).
	"""
	_check_month(start_month)
	if offset == PREVIOUS_DECEMBER_INDEX:
		return (year - 1, MONTHS_PER_YEAR)
	total = start_month - 1 + offset
	return (year + total // MONTHS_PER_YEAR, total % MONTHS_PER_YEAR + 1)


#============================================
def month_title(year: int, month: int) -> str:
	"""
	Header title like "March 2024".
	"""
	_check_month(month)
	return f"{MONTH_NAMES[month - 1]} {year}"
