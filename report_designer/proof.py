"""
Layout proofs: a PDF sheet of the template geometry and a raster thumbnail.

Proofs show geometry only (page, margins, item grid, element boxes and
ids); element content is drawn by the external renderer.
"""

# Standard Library
import pathlib

# PIP3 modules
import PIL.Image
import PIL.ImageDraw
import reportlab.lib.units
import reportlab.pdfgen.canvas

# local repo modules
import report_designer as rptd
import report_designer.config
import report_designer.model


ReportTemplate = rptd.model.ReportTemplate

MM = reportlab.lib.units.mm
PROOF_FONT = rptd.config.PROOF_FONT
PROOF_FONT_SIZE = rptd.config.PROOF_FONT_SIZE
PROOF_LINE_WIDTH = rptd.config.PROOF_LINE_WIDTH
THUMBNAIL_BACKGROUND = rptd.config.THUMBNAIL_BACKGROUND
THUMBNAIL_OUTLINE = rptd.config.THUMBNAIL_OUTLINE
THUMBNAIL_GRID = rptd.config.THUMBNAIL_GRID


#============================================
def compute_item_cells(template: ReportTemplate) -> list[tuple[float, float, float, float]]:
	"""
	Compute the item grid cells of a label template in millimeters.

	Cells run row by row from the top-left margin corner. Cells that would
	leave the page are skipped.

	Args:
		template: ReportTemplate.

	Returns:
		List of (x, y, width, height) cells.
	"""
	cells: list[tuple[float, float, float, float]] = []
	for row in range(template.items_per_column):
		for col in range(template.items_per_row):
			cell_x = template.margin_left + col * (template.item_width + template.horizontal_gap)
			cell_y = template.margin_top + row * (template.item_height + template.vertical_gap)
			if cell_x + template.item_width > template.page_width + 0.001:
				continue
			if cell_y + template.item_height > template.page_height + 0.001:
				continue
			cells.append((cell_x, cell_y, template.item_width, template.item_height))
	return cells


#============================================
def parse_hex_color(value: str) -> tuple[float, float, float]:
	"""
	Parse a hex color string into RGB floats.

	Args:
		value: Color string like "#AABBCC".

	Returns:
		Tuple of (r, g, b) in 0.0-1.0 range.
	"""
	if not value or not value.startswith("#") or len(value) != 7:
		return (0.0, 0.0, 0.0)
	try:
		red = int(value[1:3], 16) / 255.0
		green = int(value[3:5], 16) / 255.0
		blue = int(value[5:7], 16) / 255.0
	except ValueError:
		return (0.0, 0.0, 0.0)
	return (red, green, blue)


#============================================
def _pdf_rect(
	pdf: reportlab.pdfgen.canvas.Canvas,
	page_height: float,
	x: float,
	y: float,
	width: float,
	height: float,
) -> None:
	# PDF origin is bottom-left, template origin is top-left
	pdf.rect(x * MM, (page_height - y - height) * MM, width * MM, height * MM, stroke=1, fill=0)


#============================================
def draw_proof_page(pdf: reportlab.pdfgen.canvas.Canvas, template: ReportTemplate) -> int:
	"""
	Draw one proof page for a template.

	Args:
		pdf: ReportLab canvas sized to the template page.
		template: ReportTemplate.

	Returns:
		Number of element boxes drawn.
	"""
	page_height = template.page_height

	pdf.setLineWidth(PROOF_LINE_WIDTH)
	pdf.setStrokeColorRGB(0.8, 0.8, 0.8)
	pdf.setDash(2, 2)
	_pdf_rect(
		pdf,
		page_height,
		template.margin_left,
		template.margin_top,
		template.page_width - template.margin_left - template.margin_right,
		template.page_height - template.margin_top - template.margin_bottom,
	)
	pdf.setDash()

	if template.report_type == "label":
		pdf.setStrokeColorRGB(0.7, 0.7, 0.7)
		for cell_x, cell_y, cell_width, cell_height in compute_item_cells(template):
			_pdf_rect(pdf, page_height, cell_x, cell_y, cell_width, cell_height)

	pdf.setFont(PROOF_FONT, PROOF_FONT_SIZE)
	count = 0
	for element in template.sorted_elements():
		color = element.properties.get("strokeColor") or element.properties.get("color")
		pdf.setStrokeColorRGB(*parse_hex_color(color if isinstance(color, str) else ""))
		_pdf_rect(pdf, page_height, element.x, element.y, element.width, element.height)
		pdf.setFillColorRGB(0.2, 0.2, 0.2)
		label_y = (page_height - element.y) * MM - PROOF_FONT_SIZE
		pdf.drawString(element.x * MM + 1.0, label_y, f"{element.id} ({element.type})")
		count += 1
	return count


#============================================
def write_proof_pdf(
	template: ReportTemplate,
	output_path: pathlib.Path,
	verbose: bool = False,
) -> int:
	"""
	Write a one-page PDF proof of the template geometry.

	Args:
		template: ReportTemplate.
		output_path: Output PDF path.
		verbose: Print a summary line.

	Returns:
		Number of element boxes drawn.
	"""
	output_path = pathlib.Path(output_path)
	output_path.parent.mkdir(parents=True, exist_ok=True)
	page_size = (template.page_width * MM, template.page_height * MM)
	pdf = reportlab.pdfgen.canvas.Canvas(str(output_path), pagesize=page_size)
	pdf.setTitle(template.name)
	count = draw_proof_page(pdf, template)
	pdf.showPage()
	pdf.save()
	if verbose:
		print(f"Proof written: {output_path} ({count} elements)")
	return count


#============================================
def render_thumbnail(template: ReportTemplate, scale: float) -> PIL.Image.Image:
	"""
	Rasterize the template geometry at a view scale.

	Args:
		template: ReportTemplate.
		scale: Pixels per millimeter.

	Returns:
		RGB image of size page * scale.
	"""
	width_px = max(1, int(round(template.page_width * scale)))
	height_px = max(1, int(round(template.page_height * scale)))
	image = PIL.Image.new("RGB", (width_px, height_px), THUMBNAIL_BACKGROUND)
	draw = PIL.ImageDraw.Draw(image)

	if template.report_type == "label":
		for cell_x, cell_y, cell_width, cell_height in compute_item_cells(template):
			draw.rectangle(
				(
					cell_x * scale,
					cell_y * scale,
					(cell_x + cell_width) * scale,
					(cell_y + cell_height) * scale,
				),
				outline=THUMBNAIL_GRID,
			)

	for element in template.sorted_elements():
		x0, y0, x1, y1 = element.bounds()
		draw.rectangle((x0 * scale, y0 * scale, x1 * scale, y1 * scale), outline=THUMBNAIL_OUTLINE)
	return image


#============================================
def write_thumbnail(
	template: ReportTemplate,
	output_path: pathlib.Path,
	scale: float,
	verbose: bool = False,
) -> tuple[int, int]:
	output_path = pathlib.Path(output_path)
	output_path.parent.mkdir(parents=True, exist_ok=True)
	image = render_thumbnail(template, scale)
	image.save(output_path)
	if verbose:
		print(f"Thumbnail written: {output_path} ({image.width}x{image.height})")
	return image.size
