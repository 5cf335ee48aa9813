import report_designer.geometry as geometry
import report_designer.model as model_lib
import report_designer.overlap as overlap


#============================================
def make_template(*elements, width: float = 100.0, height: float = 80.0) -> model_lib.ReportTemplate:
	template = model_lib.ReportTemplate(
		id="tpl", name="Canvas", page_width=width, page_height=height, page_format="custom",
	)
	for element in elements:
		template.add_element(element)
	return template


#============================================
def box(element_id: str, x: float, y: float, width: float, height: float):
	return model_lib.ReportElement(id=element_id, type="rectangle", x=x, y=y, width=width, height=height)


#============================================
def test_push_apart_separates_stacked_elements() -> None:
	"""
	Two 10 x 10 boxes at the origin end up apart and on the page.
	"""
	anchor = box("a", 0, 0, 10, 10)
	other = box("b", 0, 0, 10, 10)
	template = make_template(anchor, other)

	displaced = overlap.push_apart(template, anchor)
	assert displaced == ["b"]
	assert (anchor.x, anchor.y) == (0.0, 0.0)
	assert not geometry.boxes_intersect(anchor.bounds(), other.bounds())
	assert other.x == 11.0
	assert other.y == 0.0
	assert overlap.overlapping_pairs(template) == []


#============================================
def test_push_apart_picks_smallest_move() -> None:
	anchor = box("a", 40, 40, 20, 20)
	below = box("b", 42, 58, 16, 10)
	template = make_template(anchor, below)

	overlap.push_apart(template, anchor)
	assert below.x == 42.0
	assert below.y == 61.0


#============================================
def test_push_apart_keeps_pushed_element_on_page() -> None:
	"""
	A push past the page edge is clamped back and the overlap is accepted.
	"""
	anchor = box("a", 80, 30, 15, 20)
	other = box("b", 90, 35, 10, 10)
	template = make_template(anchor, other)

	displaced = overlap.push_apart(template, anchor)
	assert displaced == ["b"]
	assert other.x == 90.0
	assert other.right == 100.0
	assert (anchor.x, anchor.y) == (80.0, 30.0)


#============================================
def test_push_apart_without_overlap_moves_nothing() -> None:
	anchor = box("a", 0, 0, 10, 10)
	other = box("b", 10, 0, 10, 10)
	template = make_template(anchor, other)
	assert overlap.push_apart(template, anchor) == []
	assert other.x == 10.0


#============================================
def test_has_overlap_ignores_self() -> None:
	first = box("a", 0, 0, 10, 10)
	template = make_template(first, box("b", 20, 0, 10, 10))
	assert not overlap.has_overlap(template, "a", 0, 0, 10, 10)
	assert overlap.has_overlap(template, "a", 15, 0, 10, 10)


#============================================
def test_find_free_position_steps_right() -> None:
	template = make_template(box("a", 0, 0, 10, 10))
	candidate = box("new", 0, 0, 10, 10)
	assert overlap.find_free_position(template, candidate) == (10.0, 0.0)


#============================================
def test_find_free_position_wraps_rows() -> None:
	template = make_template(box("a", 0, 0, 30, 10), width=30.0, height=40.0)
	candidate = box("new", 0, 0, 10, 10)
	assert overlap.find_free_position(template, candidate) == (0.0, 10.0)


#============================================
def test_find_free_position_falls_back_to_drop_point() -> None:
	template = make_template(box("a", 0, 0, 30, 30), width=30.0, height=30.0)
	candidate = box("new", 5, 5, 10, 10)
	assert overlap.find_free_position(template, candidate) == (5.0, 5.0)
	assert overlap.find_free_position(make_template(box("a", 0, 0, 100, 80)), candidate, max_attempts=3) == (5.0, 5.0)
