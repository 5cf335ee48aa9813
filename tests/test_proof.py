import pathlib

import PIL.Image
import pypdf

import report_designer.model as model_lib
import report_designer.proof as proof


POINTS_PER_MM = 72.0 / 25.4


#============================================
def _tag_template(report_type: str = "label") -> model_lib.ReportTemplate:
	template = model_lib.ReportTemplate(
		id="tpl-proof",
		name="Proof tag",
		report_type=report_type,
		page_width=100.0,
		page_height=80.0,
		page_format="custom",
	)
	template.add_element(
		model_lib.ReportElement(id="title", type="text", x=10.0, y=10.0, width=20.0, height=8.0)
	)
	template.add_element(
		model_lib.ReportElement(id="frame", type="rectangle", x=40.0, y=30.0, width=30.0, height=20.0, z_index=2)
	)
	return template


#============================================
def test_item_cells_skip_off_page_cells() -> None:
	cells = proof.compute_item_cells(_tag_template())
	assert cells == [(10.0, 10.0, 40.0, 45.0), (52.0, 10.0, 40.0, 45.0)]


#============================================
def test_parse_hex_color() -> None:
	assert proof.parse_hex_color("#FF0000") == (1.0, 0.0, 0.0)
	assert proof.parse_hex_color("red") == (0.0, 0.0, 0.0)
	assert proof.parse_hex_color("") == (0.0, 0.0, 0.0)
	assert proof.parse_hex_color("#GG0000") == (0.0, 0.0, 0.0)


#============================================
def test_proof_pdf_matches_page_size(tmp_path: pathlib.Path) -> None:
	"""
	The proof is one page sized to the template in points.
	"""
	output_path = tmp_path / "out" / "proof.pdf"
	count = proof.write_proof_pdf(_tag_template(), output_path)
	assert count == 2
	assert output_path.exists()

	reader = pypdf.PdfReader(str(output_path))
	assert len(reader.pages) == 1
	box = reader.pages[0].mediabox
	assert abs(float(box.width) - 100.0 * POINTS_PER_MM) < 0.01
	assert abs(float(box.height) - 80.0 * POINTS_PER_MM) < 0.01
	text = reader.pages[0].extract_text()
	assert "title" in text
	assert "frame" in text


#============================================
def test_thumbnail_size_and_outline() -> None:
	image = proof.render_thumbnail(_tag_template(), 2.0)
	assert image.size == (200, 160)
	assert image.getpixel((1, 1)) == (255, 255, 255)
	# element outline is drawn over the item grid
	assert image.getpixel((20, 20)) == (0x15, 0x65, 0xC0)
	assert image.getpixel((104, 40)) == (0xBD, 0xBD, 0xBD)


#============================================
def test_document_thumbnail_has_no_grid() -> None:
	image = proof.render_thumbnail(_tag_template(report_type="document"), 2.0)
	assert image.getpixel((104, 40)) == (255, 255, 255)


#============================================
def test_write_thumbnail(tmp_path: pathlib.Path) -> None:
	output_path = tmp_path / "thumb.png"
	size = proof.write_thumbnail(_tag_template(), output_path, 1.5)
	assert size == (150, 120)
	with PIL.Image.open(output_path) as image:
		assert image.size == (150, 120)


#============================================
def test_bad_stroke_color_draws_black(tmp_path: pathlib.Path) -> None:
	template = _tag_template()
	template.get_element("frame").properties["strokeColor"] = "#GG0000"
	output_path = tmp_path / "bad_color.pdf"
	assert proof.write_proof_pdf(template, output_path) == 2
	assert len(pypdf.PdfReader(str(output_path)).pages) == 1
