"""
Alignment guides and snap-on-release.
"""

# Standard Library
import dataclasses

# local repo modules
import report_designer as rptd
import report_designer.config
import report_designer.model


ReportTemplate = rptd.model.ReportTemplate

SNAP_THRESHOLD_MM = rptd.config.SNAP_THRESHOLD_MM


@dataclasses.dataclass
class GuideSet:
	x: list[float] = dataclasses.field(default_factory=list)
	y: list[float] = dataclasses.field(default_factory=list)

	def is_empty(self) -> bool:
		return not self.x and not self.y


@dataclasses.dataclass
class SnapResult:
	x: float
	y: float
	guide_x: float | None
	guide_y: float | None


#============================================
def projections(start: float, size: float) -> tuple[float, float, float]:
	"""
	Return the leading edge, center and trailing edge along one axis.
	"""
	return (start, start + size / 2.0, start + size)


#============================================
def build_guides(template: ReportTemplate, exclude_id: str | None) -> GuideSet:
	"""
	Collect candidate guides from every element except the moving one.

	Args:
		template: ReportTemplate.
		exclude_id: Id of the moving element.

	Returns:
		GuideSet with left/center/right X and top/center/bottom Y values.
	"""
	guides = GuideSet()
	for element in template.elements:
		if element.id == exclude_id:
			continue
		guides.x.extend(projections(element.x, element.width))
		guides.y.extend(projections(element.y, element.height))
	return guides


#============================================
def _near_axis(candidates: list[float], start: float, size: float, threshold: float) -> list[float]:
	active: list[float] = []
	edges = projections(start, size)
	for guide in candidates:
		if guide in active:
			continue
		if any(abs(edge - guide) <= threshold for edge in edges):
			active.append(guide)
	return active


#============================================
def active_guides(
	guides: GuideSet,
	x: float,
	y: float,
	width: float,
	height: float,
	threshold: float = SNAP_THRESHOLD_MM,
) -> GuideSet:
	"""
	Select the guides close to any projection of the moving element.

	Args:
		guides: Candidate guides for the session.
		x: Element x.
		y: Element y.
		width: Element width.
		height: Element height.
		threshold: Distance threshold in millimeters.

	Returns:
		GuideSet of active guides, de-duplicated, in candidate order.
	"""
	return GuideSet(
		x=_near_axis(guides.x, x, width, threshold),
		y=_near_axis(guides.y, y, height, threshold),
	)


#============================================
def _snap_axis(
	active: list[float],
	start: float,
	size: float,
	threshold: float,
) -> tuple[float, float | None]:
	best_start = start
	best_guide = None
	best_distance = float("inf")
	for guide in active:
		for offset in (0.0, size / 2.0, size):
			distance = abs(start + offset - guide)
			if distance < best_distance and distance <= threshold:
				best_distance = distance
				best_start = guide - offset
				best_guide = guide
	return (best_start, best_guide)


#============================================
def snap_position(
	active: GuideSet,
	x: float,
	y: float,
	width: float,
	height: float,
	threshold: float = SNAP_THRESHOLD_MM,
) -> SnapResult:
	"""
	Align an element to its nearest active guide on each axis.

	Ties keep the first candidate found, walking guides in order and
	edge, center, far edge within a guide.

	Args:
		active: Active guides.
		x: Element x.
		y: Element y.
		width: Element width.
		height: Element height.
		threshold: Distance threshold in millimeters.

	Returns:
		SnapResult; an axis with no guide in range keeps its position.
	"""
	snapped_x, guide_x = _snap_axis(active.x, x, width, threshold)
	snapped_y, guide_y = _snap_axis(active.y, y, height, threshold)
	return SnapResult(x=snapped_x, y=snapped_y, guide_x=guide_x, guide_y=guide_y)
