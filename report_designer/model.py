"""
Template and element data model.
"""

# Standard Library
import copy
import dataclasses
import datetime

# local repo modules
import report_designer as rptd
import report_designer.config
import report_designer.schema


DataSchema = rptd.schema.DataSchema
FieldDefinition = rptd.schema.FieldDefinition

DEFAULT_PAGE_FORMAT = rptd.config.DEFAULT_PAGE_FORMAT
DEFAULT_REPORT_TYPE = rptd.config.DEFAULT_REPORT_TYPE
DEFAULT_ELEMENT_WIDTH = rptd.config.DEFAULT_ELEMENT_WIDTH
DEFAULT_ELEMENT_HEIGHT = rptd.config.DEFAULT_ELEMENT_HEIGHT
PAGE_FORMATS = rptd.config.PAGE_FORMATS

ELEMENT_TYPES = (
	"text",
	"dynamicField",
	"barcode",
	"qrCode",
	"image",
	"line",
	"rectangle",
	"circle",
	"table",
	"checkbox",
	"textbox",
	"pageNumber",
	"date",
	"logo",
	"barChart",
	"lineChart",
	"pieChart",
)

CHART_TYPES = ("barChart", "lineChart", "pieChart")

ELEMENT_DISPLAY_NAMES = {
	"text": "Text",
	"dynamicField": "Dynamic Field",
	"barcode": "Barcode",
	"qrCode": "QR Code",
	"image": "Image",
	"line": "Line",
	"rectangle": "Rectangle",
	"circle": "Circle",
	"table": "Table",
	"checkbox": "Checkbox",
	"textbox": "Text Box",
	"pageNumber": "Page Number",
	"date": "Date",
	"logo": "Logo",
	"barChart": "Bar Chart",
	"lineChart": "Line Chart",
	"pieChart": "Pie Chart",
}

_CHART_DEFAULTS = {
	"dataSource": "",
	"labelField": "label",
	"valueField": "value",
	"title": "",
	"showLegend": True,
}

DEFAULT_PROPERTIES = {
	"text": {
		"text": "Text",
		"fontSize": 10.0,
		"fontWeight": "normal",
		"fontStyle": "normal",
		"alignment": "left",
		"color": "#000000",
		"backgroundColor": None,
	},
	"dynamicField": {
		"fieldName": "",
		"fontSize": 10.0,
		"fontWeight": "normal",
		"alignment": "left",
		"color": "#000000",
		"prefix": "",
		"suffix": "",
		"format": None,
		"maxLines": 1,
	},
	"barcode": {
		"fieldName": "sku",
		"barcodeType": "code128",
		"showText": True,
		"textSize": 8.0,
	},
	"qrCode": {
		"fieldName": "",
		"errorCorrection": "M",
	},
	"image": {
		"source": "field",
		"fieldName": "image",
		"assetPath": "",
		"url": "",
		"fit": "contain",
	},
	"line": {
		"strokeWidth": 1.0,
		"color": "#000000",
		"dashPattern": None,
	},
	"rectangle": {
		"strokeWidth": 1.0,
		"strokeColor": "#000000",
		"fillColor": None,
		"borderRadius": 0.0,
	},
	"circle": {
		"strokeWidth": 1.0,
		"strokeColor": "#000000",
		"fillColor": None,
	},
	"table": {
		"columns": [],
		"dataSource": "",
		"headerStyle": {
			"fontSize": 10.0,
			"fontWeight": "bold",
			"backgroundColor": "#EEEEEE",
		},
		"cellStyle": {
			"fontSize": 9.0,
			"padding": 2.0,
		},
		"borderWidth": 0.5,
		"borderColor": "#000000",
	},
	"checkbox": {
		"fieldName": "",
		"label": "",
		"checkedByDefault": False,
		"size": 12.0,
		"color": "#000000",
	},
	"textbox": {
		"fieldName": "",
		"placeholder": "",
		"fontSize": 10.0,
		"fontWeight": "normal",
		"alignment": "left",
		"color": "#000000",
		"backgroundColor": "#FFFFFF",
		"borderColor": "#000000",
		"borderWidth": 1.0,
		"maxLines": 1,
	},
	"pageNumber": {
		"format": "Page {current} of {total}",
		"fontSize": 8.0,
		"alignment": "center",
		"color": "#666666",
	},
	"date": {
		"format": "dd/MM/yyyy",
		"fontSize": 8.0,
		"color": "#000000",
	},
	"logo": {
		"assetPath": "",
		"fit": "contain",
	},
	"barChart": _CHART_DEFAULTS,
	"lineChart": _CHART_DEFAULTS,
	"pieChart": _CHART_DEFAULTS,
}

# documented keys per element type; None accepted for every key
_NUMBER = (int, float)
_TEXT = (str,)
_FLAG = (bool,)
_CHART_TYPES_DESCRIPTOR = {
	"dataSource": _TEXT,
	"labelField": _TEXT,
	"valueField": _TEXT,
	"title": _TEXT,
	"showLegend": _FLAG,
}
PROPERTY_TYPES = {
	"text": {
		"text": _TEXT,
		"fontSize": _NUMBER,
		"fontWeight": _TEXT,
		"fontStyle": _TEXT,
		"alignment": _TEXT,
		"color": _TEXT,
		"backgroundColor": _TEXT,
	},
	"dynamicField": {
		"fieldName": _TEXT,
		"fontSize": _NUMBER,
		"fontWeight": _TEXT,
		"alignment": _TEXT,
		"color": _TEXT,
		"prefix": _TEXT,
		"suffix": _TEXT,
		"format": _TEXT,
		"maxLines": (int,),
	},
	"barcode": {
		"fieldName": _TEXT,
		"barcodeType": _TEXT,
		"showText": _FLAG,
		"textSize": _NUMBER,
	},
	"qrCode": {
		"fieldName": _TEXT,
		"errorCorrection": _TEXT,
	},
	"image": {
		"source": _TEXT,
		"fieldName": _TEXT,
		"assetPath": _TEXT,
		"url": _TEXT,
		"fit": _TEXT,
	},
	"line": {
		"strokeWidth": _NUMBER,
		"color": _TEXT,
		"dashPattern": (list,),
	},
	"rectangle": {
		"strokeWidth": _NUMBER,
		"strokeColor": _TEXT,
		"fillColor": _TEXT,
		"borderRadius": _NUMBER,
	},
	"circle": {
		"strokeWidth": _NUMBER,
		"strokeColor": _TEXT,
		"fillColor": _TEXT,
	},
	"table": {
		"columns": (list,),
		"dataSource": _TEXT,
		"headerStyle": (dict,),
		"cellStyle": (dict,),
		"borderWidth": _NUMBER,
		"borderColor": _TEXT,
	},
	"checkbox": {
		"fieldName": _TEXT,
		"label": _TEXT,
		"checkedByDefault": _FLAG,
		"size": _NUMBER,
		"color": _TEXT,
	},
	"textbox": {
		"fieldName": _TEXT,
		"placeholder": _TEXT,
		"fontSize": _NUMBER,
		"fontWeight": _TEXT,
		"alignment": _TEXT,
		"color": _TEXT,
		"backgroundColor": _TEXT,
		"borderColor": _TEXT,
		"borderWidth": _NUMBER,
		"maxLines": (int,),
	},
	"pageNumber": {
		"format": _TEXT,
		"fontSize": _NUMBER,
		"alignment": _TEXT,
		"color": _TEXT,
	},
	"date": {
		"format": _TEXT,
		"fontSize": _NUMBER,
		"color": _TEXT,
	},
	"logo": {
		"assetPath": _TEXT,
		"fit": _TEXT,
	},
	"barChart": _CHART_TYPES_DESCRIPTOR,
	"lineChart": _CHART_TYPES_DESCRIPTOR,
	"pieChart": _CHART_TYPES_DESCRIPTOR,
}


class DuplicateElementError(ValueError):
	"""
	Raised when an element id is already used in a template.
	"""


#============================================
def default_properties(element_type: str) -> dict:
	"""
	Build a fresh property bag for an element type.

	Args:
		element_type: Element type name.

	Returns:
		New properties dict.
	"""
	return copy.deepcopy(DEFAULT_PROPERTIES.get(element_type, {}))


@dataclasses.dataclass
class ReportElement:
	id: str
	type: str
	x: float = 0.0
	y: float = 0.0
	width: float = DEFAULT_ELEMENT_WIDTH
	height: float = DEFAULT_ELEMENT_HEIGHT
	rotation: float = 0.0
	z_index: int = 0
	properties: dict | None = None

	def __post_init__(self) -> None:
		if self.type not in ELEMENT_TYPES:
			raise ValueError(f"Unknown element type: {self.type}")
		if self.properties is None:
			self.properties = default_properties(self.type)

	@property
	def display_name(self) -> str:
		return ELEMENT_DISPLAY_NAMES[self.type]

	@property
	def right(self) -> float:
		return self.x + self.width

	@property
	def bottom(self) -> float:
		return self.y + self.height

	def bounds(self) -> tuple[float, float, float, float]:
		"""
		Return (x0, y0, x1, y1) in millimeters.
		"""
		return (self.x, self.y, self.x + self.width, self.y + self.height)

	def copy(self) -> "ReportElement":
		return dataclasses.replace(self, properties=copy.deepcopy(self.properties))


#============================================
def _now() -> datetime.datetime:
	return datetime.datetime.now()


@dataclasses.dataclass
class ReportTemplate:
	id: str
	name: str
	description: str | None = None
	report_type: str = DEFAULT_REPORT_TYPE
	page_width: float = 210.0
	page_height: float = 297.0
	page_format: str = DEFAULT_PAGE_FORMAT
	margin_top: float = 10.0
	margin_bottom: float = 10.0
	margin_left: float = 10.0
	margin_right: float = 10.0
	items_per_row: int = 4
	items_per_column: int = 6
	horizontal_gap: float = 2.0
	vertical_gap: float = 2.0
	item_width: float = 40.0
	item_height: float = 45.0
	elements: list[ReportElement] = dataclasses.field(default_factory=list)
	data_schema_name: str | None = None
	data_schema: DataSchema | None = None
	created_at: datetime.datetime = dataclasses.field(default_factory=_now)
	updated_at: datetime.datetime = dataclasses.field(default_factory=_now)

	def touch(self) -> None:
		self.updated_at = _now()

	def get_element(self, element_id: str) -> ReportElement | None:
		for element in self.elements:
			if element.id == element_id:
				return element
		return None

	def has_element(self, element_id: str) -> bool:
		return self.get_element(element_id) is not None

	def add_element(self, element: ReportElement) -> None:
		"""
		Append an element, keeping ids unique.

		Args:
			element: Element to add.
		"""
		if self.has_element(element.id):
			raise DuplicateElementError(f"Element id already in use: {element.id}")
		self.elements.append(element)
		self.touch()

	def remove_element(self, element_id: str) -> bool:
		"""
		Remove an element by id.

		Args:
			element_id: Element id.

		Returns:
			True if an element was removed.
		"""
		kept = [element for element in self.elements if element.id != element_id]
		if len(kept) == len(self.elements):
			return False
		self.elements = kept
		self.touch()
		return True

	def update_element(self, element: ReportElement) -> bool:
		"""
		Replace the element with the same id.

		Args:
			element: Replacement element.

		Returns:
			True if an element was replaced.
		"""
		for index, existing in enumerate(self.elements):
			if existing.id == element.id:
				self.elements[index] = element
				self.touch()
				return True
		return False

	def rename_element(self, element_id: str, new_id: str) -> bool:
		"""
		Change an element id after checking the new id is free.

		Args:
			element_id: Current id.
			new_id: Requested id.

		Returns:
			True if renamed, False if no element has element_id.
		"""
		element = self.get_element(element_id)
		if element is None:
			return False
		if new_id == element_id:
			return True
		if not new_id:
			raise ValueError("Element id must not be empty")
		if self.has_element(new_id):
			raise DuplicateElementError(f"Element id already in use: {new_id}")
		element.id = new_id
		self.touch()
		return True

	def sorted_elements(self) -> list[ReportElement]:
		"""
		Return elements in paint order (ascending zIndex, stable).
		"""
		return sorted(self.elements, key=lambda element: element.z_index)

	def set_page_format(self, page_format: str) -> None:
		"""
		Apply a named page format.

		Args:
			page_format: Key of PAGE_FORMATS.
		"""
		if page_format not in PAGE_FORMATS:
			raise ValueError(f"Unknown page format: {page_format}")
		self.page_format = page_format
		entry = PAGE_FORMATS[page_format]
		if entry is not None:
			width, height, grid = entry
			self.page_width = width
			self.page_height = height
			if grid is not None:
				self.items_per_row, self.items_per_column = grid
		self.touch()

	def set_data_schema(self, schema: DataSchema) -> None:
		self.data_schema = schema
		self.data_schema_name = schema.name
		self.touch()

	def available_fields(self) -> list[str]:
		if self.data_schema is None:
			return []
		return self.data_schema.field_names()

	def field_definition(self, field_name: str) -> FieldDefinition | None:
		if self.data_schema is None:
			return None
		return self.data_schema.get_field(field_name)

	def is_valid_field(self, field_name: str) -> bool:
		# no schema means any field name is accepted
		if self.data_schema is None:
			return True
		return self.data_schema.get_field(field_name) is not None

	def sample_data(self) -> dict:
		if self.data_schema is None:
			return {}
		return self.data_schema.sample_data


#============================================
def check_element_properties(element: ReportElement) -> list[str]:
	"""
	Check documented property keys against their expected types.

	Unknown keys are not reported.

	Args:
		element: Element to check.

	Returns:
		List of warning strings.
	"""
	warnings: list[str] = []
	descriptor = PROPERTY_TYPES.get(element.type, {})
	for key, expected in descriptor.items():
		if key not in element.properties:
			continue
		value = element.properties[key]
		if value is None:
			continue
		# bool is an int subclass
		if isinstance(value, bool) and bool not in expected:
			matches = False
		else:
			matches = isinstance(value, expected)
		if not matches:
			names = "/".join(kind.__name__ for kind in expected)
			warnings.append(
				f"{element.id}: property '{key}' should be {names}, got {type(value).__name__}"
			)
	return warnings
