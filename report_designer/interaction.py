"""
Pointer interaction: hit-testing, drag translation and resize handles.

All coordinates here are millimeters. Pixel input is converted by the
builder through its Viewport before it reaches these functions.
"""

# Standard Library
import dataclasses

# local repo modules
import report_designer as rptd
import report_designer.config
import report_designer.geometry
import report_designer.model


ReportElement = rptd.model.ReportElement
ReportTemplate = rptd.model.ReportTemplate

HANDLE_SIZE_PX = rptd.config.HANDLE_SIZE_PX
EDGE_HANDLE_FACTOR = rptd.config.EDGE_HANDLE_FACTOR
MIN_ELEMENT_SIZE_MM = rptd.config.MIN_ELEMENT_SIZE_MM

CORNER_HANDLES = ("topLeft", "topRight", "bottomLeft", "bottomRight")
EDGE_HANDLES = ("top", "bottom", "left", "right")
# handles whose movement also shifts the element origin
LEADING_X_HANDLES = ("topLeft", "bottomLeft", "left")
LEADING_Y_HANDLES = ("topLeft", "topRight", "top")
TRAILING_X_HANDLES = ("topRight", "bottomRight", "right")
TRAILING_Y_HANDLES = ("bottomLeft", "bottomRight", "bottom")


#============================================
def hit_test(template: ReportTemplate, x_mm: float, y_mm: float) -> ReportElement | None:
	"""
	Find the topmost element under a point.

	Elements are visited from the highest zIndex down; among equal zIndex
	values the later list position wins.

	Args:
		template: ReportTemplate.
		x_mm: Pointer x.
		y_mm: Pointer y.

	Returns:
		The hit element or None.
	"""
	for element in reversed(template.sorted_elements()):
		if rptd.geometry.contains_point(element.bounds(), x_mm, y_mm):
			return element
	return None


@dataclasses.dataclass
class DragSession:
	element_id: str
	last_x: float
	last_y: float

	def move(self, template: ReportTemplate, x_mm: float, y_mm: float) -> ReportElement | None:
		"""
		Translate the dragged element by the pointer delta.

		Args:
			template: ReportTemplate owning the element.
			x_mm: Pointer x.
			y_mm: Pointer y.

		Returns:
			The moved element, or None when it no longer exists.
		"""
		element = template.get_element(self.element_id)
		if element is None:
			return None
		delta_x = x_mm - self.last_x
		delta_y = y_mm - self.last_y
		self.last_x = x_mm
		self.last_y = y_mm
		element.x, element.y = rptd.geometry.clamp_position(
			element.x + delta_x,
			element.y + delta_y,
			element.width,
			element.height,
			template.page_width,
			template.page_height,
		)
		return element


#============================================
def handle_size_mm(scale: float, handle_size_px: float = HANDLE_SIZE_PX) -> float:
	return handle_size_px / scale


#============================================
def handle_points(
	element: ReportElement,
	scale: float,
	handle_size_px: float = HANDLE_SIZE_PX,
) -> dict[str, tuple[float, float]]:
	"""
	Compute the centers of the visible resize handles.

	Corners are always present. Top and bottom edge handles need
	width above EDGE_HANDLE_FACTOR handle sizes; left and right edge
	handles need the same of the height.

	Args:
		element: Selected element.
		scale: View scale in pixels per millimeter.
		handle_size_px: On-screen handle size.

	Returns:
		Dict of handle name to (x, y) in millimeters, in hit priority order.
	"""
	size = handle_size_mm(scale, handle_size_px)
	x0, y0, x1, y1 = element.bounds()
	mid_x = element.x + element.width / 2.0
	mid_y = element.y + element.height / 2.0
	points = {
		"topLeft": (x0, y0),
		"topRight": (x1, y0),
		"bottomLeft": (x0, y1),
		"bottomRight": (x1, y1),
	}
	if element.width > size * EDGE_HANDLE_FACTOR:
		points["top"] = (mid_x, y0)
		points["bottom"] = (mid_x, y1)
	if element.height > size * EDGE_HANDLE_FACTOR:
		points["left"] = (x0, mid_y)
		points["right"] = (x1, mid_y)
	return points


#============================================
def handle_at(
	element: ReportElement,
	x_mm: float,
	y_mm: float,
	scale: float,
	handle_size_px: float = HANDLE_SIZE_PX,
) -> str | None:
	"""
	Find the resize handle under a point.

	Args:
		element: Selected element.
		x_mm: Pointer x.
		y_mm: Pointer y.
		scale: View scale.
		handle_size_px: On-screen handle size.

	Returns:
		Handle name or None.
	"""
	size = handle_size_mm(scale, handle_size_px)
	for name, (hx, hy) in handle_points(element, scale, handle_size_px).items():
		if abs(x_mm - hx) <= size and abs(y_mm - hy) <= size:
			return name
	return None


#============================================
def apply_resize(
	element: ReportElement,
	handle: str,
	delta_x: float,
	delta_y: float,
	page_width: float,
	page_height: float,
	min_size: float = MIN_ELEMENT_SIZE_MM,
) -> None:
	"""
	Resize an element in place by dragging one handle.

	Leading-edge handles (left/top side) move the origin so the opposite
	edge stays fixed. Sizes below min_size are clamped; for leading-edge
	handles the origin is then recomputed from the trailing edge as it was
	before the resize. The result is clamped into the page.

	Args:
		element: Element to resize.
		handle: Handle name.
		delta_x: Pointer delta x in millimeters.
		delta_y: Pointer delta y in millimeters.
		page_width: Page width.
		page_height: Page height.
		min_size: Minimum size per axis.
	"""
	if handle not in CORNER_HANDLES and handle not in EDGE_HANDLES:
		raise ValueError(f"Unknown resize handle: {handle}")
	right_before = element.x + element.width
	bottom_before = element.y + element.height

	new_x = element.x
	new_y = element.y
	new_width = element.width
	new_height = element.height

	if handle in LEADING_X_HANDLES:
		new_x += delta_x
		new_width -= delta_x
	elif handle in TRAILING_X_HANDLES:
		new_width += delta_x
	if handle in LEADING_Y_HANDLES:
		new_y += delta_y
		new_height -= delta_y
	elif handle in TRAILING_Y_HANDLES:
		new_height += delta_y

	if new_width < min_size:
		new_width = min_size
		if handle in LEADING_X_HANDLES:
			new_x = right_before - min_size
	if new_height < min_size:
		new_height = min_size
		if handle in LEADING_Y_HANDLES:
			new_y = bottom_before - min_size

	# keep the fixed edge in place while trimming to the page
	if handle in LEADING_X_HANDLES and new_x < 0.0:
		new_width = max(min_size, new_width + new_x)
		new_x = 0.0
	if handle in TRAILING_X_HANDLES and new_x + new_width > page_width:
		new_width = max(min_size, page_width - new_x)
	if handle in LEADING_Y_HANDLES and new_y < 0.0:
		new_height = max(min_size, new_height + new_y)
		new_y = 0.0
	if handle in TRAILING_Y_HANDLES and new_y + new_height > page_height:
		new_height = max(min_size, page_height - new_y)

	new_width = min(new_width, page_width)
	new_height = min(new_height, page_height)
	new_x, new_y = rptd.geometry.clamp_position(
		new_x, new_y, new_width, new_height, page_width, page_height,
	)
	element.x = new_x
	element.y = new_y
	element.width = new_width
	element.height = new_height


@dataclasses.dataclass
class ResizeSession:
	element_id: str
	handle: str
	last_x: float
	last_y: float

	def move(
		self,
		template: ReportTemplate,
		x_mm: float,
		y_mm: float,
		min_size: float = MIN_ELEMENT_SIZE_MM,
	) -> ReportElement | None:
		element = template.get_element(self.element_id)
		if element is None:
			return None
		delta_x = x_mm - self.last_x
		delta_y = y_mm - self.last_y
		self.last_x = x_mm
		self.last_y = y_mm
		apply_resize(
			element,
			self.handle,
			delta_x,
			delta_y,
			template.page_width,
			template.page_height,
			min_size,
		)
		return element
