"""
Rectangle primitive in page points (origin top-left, y grows downward).
"""

# Standard Library
import typing


class Rect(typing.NamedTuple):
	left: float
	top: float
	right: float
	bottom: float

	@property
	def width(self) -> float:
		return self.right - self.left

	@property
	def height(self) -> float:
		return self.bottom - self.top

	@property
	def mid_x(self) -> float:
		return (self.left + self.right) / 2.0

	@property
	def mid_y(self) -> float:
		return (self.top + self.bottom) / 2.0

	@property
	def area(self) -> float:
		return max(0.0, self.width) * max(0.0, self.height)


#============================================
def inset_rect(rect: Rect, left: float, top: float, right: float, bottom: float) -> Rect:
	"""
	Shrink a rectangle by independent offsets, never past its center.

	Args:
		rect: Source rectangle.
		left: Left inset.
		top: Top inset.
		right: Right inset.
		bottom: Bottom inset.

	Returns:
		Inset rectangle with non-negative size.
	"""
	new_left = rect.left + left
	new_right = rect.right - right
	new_top = rect.top + top
	new_bottom = rect.bottom - bottom
	if new_right < new_left:
		new_left = new_right = (new_left + new_right) / 2.0
	if new_bottom < new_top:
		new_top = new_bottom = (new_top + new_bottom) / 2.0
	return Rect(new_left, new_top, new_right, new_bottom)


#============================================
def inset_uniform(rect: Rect, amount: float) -> Rect:
	return inset_rect(rect, amount, amount, amount, amount)


#============================================
def intersect_rects(rect_a: Rect, rect_b: Rect) -> Rect | None:
	"""
	Intersect two rectangles.

	Args:
		rect_a: First rectangle.
		rect_b: Second rectangle.

	Returns:
		Overlap rectangle, or None if they do not overlap.
	"""
	left = max(rect_a.left, rect_b.left)
	top = max(rect_a.top, rect_b.top)
	right = min(rect_a.right, rect_b.right)
	bottom = min(rect_a.bottom, rect_b.bottom)
	if right <= left or bottom <= top:
		return None
	return Rect(left, top, right, bottom)


#============================================
def rects_overlap(rect_a: Rect, rect_b: Rect) -> bool:
	"""
	Check whether two rectangles share any interior area.
	"""
	return intersect_rects(rect_a, rect_b) is not None
