"""
Millimeter geometry helpers and the view scale.
"""

# Standard Library
import dataclasses

# local repo modules
import report_designer as rptd
import report_designer.config


DEFAULT_SCALE = rptd.config.DEFAULT_SCALE
MIN_SCALE = rptd.config.MIN_SCALE
MAX_SCALE = rptd.config.MAX_SCALE
ZOOM_STEP = rptd.config.ZOOM_STEP
SCALE_EPSILON = rptd.config.SCALE_EPSILON


#============================================
def clamp(value: float, low: float, high: float) -> float:
	"""
	Clamp a value into [low, high].

	When high < low the range collapses to low.

	Args:
		value: Input value.
		low: Lower bound.
		high: Upper bound.

	Returns:
		Clamped value.
	"""
	if high < low:
		high = low
	return max(low, min(high, value))


#============================================
def boxes_intersect(
	box_a: tuple[float, float, float, float],
	box_b: tuple[float, float, float, float],
) -> bool:
	"""
	Check whether two boxes overlap.

	Touching edges do not count as overlap.

	Args:
		box_a: First bounding box (x0, y0, x1, y1).
		box_b: Second bounding box.

	Returns:
		True if boxes overlap.
	"""
	left = max(box_a[0], box_b[0])
	right = min(box_a[2], box_b[2])
	top = max(box_a[1], box_b[1])
	bottom = min(box_a[3], box_b[3])
	return right > left and bottom > top


#============================================
def contains_point(box: tuple[float, float, float, float], x: float, y: float) -> bool:
	return box[0] <= x <= box[2] and box[1] <= y <= box[3]


#============================================
def clamp_position(
	x: float,
	y: float,
	width: float,
	height: float,
	page_width: float,
	page_height: float,
) -> tuple[float, float]:
	"""
	Clamp a box origin so the box stays on the page.

	Args:
		x: Box left.
		y: Box top.
		width: Box width.
		height: Box height.
		page_width: Page width.
		page_height: Page height.

	Returns:
		Tuple of (x, y).
	"""
	return (
		clamp(x, 0.0, page_width - width),
		clamp(y, 0.0, page_height - height),
	)


#============================================
def clamp_element_into_page(element, page_width: float, page_height: float, min_size: float) -> None:
	"""
	Force an element's size and position into valid page bounds in place.

	Args:
		element: ReportElement.
		page_width: Page width.
		page_height: Page height.
		min_size: Minimum size per axis.
	"""
	element.width = clamp(element.width, min(min_size, page_width), page_width)
	element.height = clamp(element.height, min(min_size, page_height), page_height)
	element.x, element.y = clamp_position(
		element.x, element.y, element.width, element.height, page_width, page_height,
	)


@dataclasses.dataclass
class Viewport:
	"""
	Pixels-per-millimeter view scale; geometry itself never changes with zoom.
	"""

	scale: float = DEFAULT_SCALE
	min_scale: float = MIN_SCALE
	max_scale: float = MAX_SCALE
	manual_zoom: bool = False

	def to_mm(self, pixels: float) -> float:
		return pixels / self.scale

	def to_px(self, millimeters: float) -> float:
		return millimeters * self.scale

	def point_to_mm(self, x_px: float, y_px: float) -> tuple[float, float]:
		return (x_px / self.scale, y_px / self.scale)

	def zoom_in(self) -> float:
		self.scale = clamp(self.scale + ZOOM_STEP, self.min_scale, self.max_scale)
		self.manual_zoom = True
		return self.scale

	def zoom_out(self) -> float:
		self.scale = clamp(self.scale - ZOOM_STEP, self.min_scale, self.max_scale)
		self.manual_zoom = True
		return self.scale

	def reset(self) -> float:
		self.scale = DEFAULT_SCALE
		self.manual_zoom = False
		return self.scale

	def zoom_percent(self) -> int:
		return int(self.scale * 100 / DEFAULT_SCALE)

	def fit_scale(
		self,
		canvas_width_mm: float,
		canvas_height_mm: float,
		available_width_px: float,
		available_height_px: float,
	) -> float:
		"""
		Fit the canvas into the available pixels unless zoom is manual.

		Small changes are ignored to avoid jitter.

		Args:
			canvas_width_mm: Canvas width.
			canvas_height_mm: Canvas height.
			available_width_px: Available width.
			available_height_px: Available height.

		Returns:
			Current scale.
		"""
		if self.manual_zoom or canvas_width_mm <= 0 or canvas_height_mm <= 0:
			return self.scale
		fitted = min(
			available_width_px / canvas_width_mm,
			available_height_px / canvas_height_mm,
		)
		fitted = clamp(fitted, self.min_scale, self.max_scale)
		if abs(fitted - self.scale) > SCALE_EPSILON:
			self.scale = fitted
		return self.scale
