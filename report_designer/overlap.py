"""
Overlap detection, push-apart resolution and free placement.
"""

# local repo modules
import report_designer as rptd
import report_designer.config
import report_designer.geometry
import report_designer.model


ReportElement = rptd.model.ReportElement
ReportTemplate = rptd.model.ReportTemplate

PUSH_GAP_MM = rptd.config.PUSH_GAP_MM
PUSH_MAX_PASSES = rptd.config.PUSH_MAX_PASSES
PLACEMENT_STEP_MM = rptd.config.PLACEMENT_STEP_MM
PLACEMENT_MAX_ATTEMPTS = rptd.config.PLACEMENT_MAX_ATTEMPTS


#============================================
def has_overlap(
	template: ReportTemplate,
	element_id: str,
	x: float,
	y: float,
	width: float,
	height: float,
) -> bool:
	"""
	Check whether a box overlaps any element other than element_id.

	Args:
		template: ReportTemplate.
		element_id: Id to ignore.
		x: Box left.
		y: Box top.
		width: Box width.
		height: Box height.

	Returns:
		True if any other element intersects the box.
	"""
	box = (x, y, x + width, y + height)
	for other in template.elements:
		if other.id == element_id:
			continue
		if rptd.geometry.boxes_intersect(box, other.bounds()):
			return True
	return False


#============================================
def overlapping_pairs(template: ReportTemplate) -> list[tuple[str, str]]:
	"""
	List every pair of intersecting elements.

	Args:
		template: ReportTemplate.

	Returns:
		List of (id_a, id_b) in element order.
	"""
	pairs: list[tuple[str, str]] = []
	elements = template.elements
	for index, first in enumerate(elements):
		for second in elements[index + 1:]:
			if rptd.geometry.boxes_intersect(first.bounds(), second.bounds()):
				pairs.append((first.id, second.id))
	return pairs


#============================================
def find_free_position(
	template: ReportTemplate,
	element: ReportElement,
	step: float = PLACEMENT_STEP_MM,
	max_attempts: int = PLACEMENT_MAX_ATTEMPTS,
) -> tuple[float, float]:
	"""
	Search for a position where a new element does not overlap others.

	The candidate moves right by step, wrapping to x=0 one step down when
	it passes the page width. The search stops after max_attempts or when
	the element would pass the page bottom.

	Args:
		template: ReportTemplate.
		element: Element about to be placed (not necessarily in the template).
		step: Step in millimeters.
		max_attempts: Attempt cap.

	Returns:
		Tuple of (x, y); the drop point when no free spot was found.
	"""
	x = element.x
	y = element.y
	attempts = 0
	while has_overlap(template, element.id, x, y, element.width, element.height):
		if attempts >= max_attempts:
			return (element.x, element.y)
		x += step
		if x + element.width > template.page_width:
			x = 0.0
			y += step
		if y + element.height > template.page_height:
			return (element.x, element.y)
		attempts += 1
	return (x, y)


#============================================
def push_apart(
	template: ReportTemplate,
	anchor: ReportElement,
	gap: float = PUSH_GAP_MM,
	max_passes: int = PUSH_MAX_PASSES,
) -> list[str]:
	"""
	Push elements that overlap the anchor out of its way.

	Each overlapping element moves in whichever direction (right, left,
	down, up) needs the smallest displacement, ends gap millimeters from
	the anchor, and is clamped into the page. Passes repeat until nothing
	moves or max_passes is reached. The anchor never moves.

	Args:
		template: ReportTemplate.
		anchor: Element whose position just changed.
		gap: Gap left between anchor and pushed element.
		max_passes: Pass cap; leftover overlap is accepted.

	Returns:
		Ids of the displaced elements, in first-displacement order.
	"""
	displaced: list[str] = []
	changed = True
	passes = 0
	while changed and passes < max_passes:
		changed = False
		passes += 1
		for other in template.elements:
			if other is anchor or other.id == anchor.id:
				continue
			if not rptd.geometry.boxes_intersect(anchor.bounds(), other.bounds()):
				continue
			push_right = anchor.right - other.x
			push_left = other.right - anchor.x
			push_down = anchor.bottom - other.y
			push_up = other.bottom - anchor.y
			smallest = min(push_right, push_left, push_down, push_up)
			if smallest == push_right:
				other.x = anchor.right + gap
			elif smallest == push_left:
				other.x = anchor.x - other.width - gap
			elif smallest == push_down:
				other.y = anchor.bottom + gap
			else:
				other.y = anchor.y - other.height - gap
			other.x, other.y = rptd.geometry.clamp_position(
				other.x,
				other.y,
				other.width,
				other.height,
				template.page_width,
				template.page_height,
			)
			if other.id not in displaced:
				displaced.append(other.id)
			changed = True
	return displaced
