"""
Versioned .rpt envelope encoding and decoding.
"""

# Standard Library
import copy
import dataclasses
import datetime
import json
import math
import pathlib

# local repo modules
import report_designer as rptd
import report_designer.config
import report_designer.model
import report_designer.schema


ReportElement = rptd.model.ReportElement
ReportTemplate = rptd.model.ReportTemplate
DataSchema = rptd.schema.DataSchema
SchemaRegistry = rptd.schema.SchemaRegistry

RPT_FORMAT = rptd.config.RPT_FORMAT
RPT_VERSION = rptd.config.RPT_VERSION
SUPPORTED_VERSIONS = rptd.config.SUPPORTED_VERSIONS
RPT_SUFFIX = rptd.config.RPT_SUFFIX
DEFAULT_AUTHOR = rptd.config.DEFAULT_AUTHOR
REPORT_TYPES = rptd.config.REPORT_TYPES
PAGE_FORMATS = rptd.config.PAGE_FORMATS


class FormatError(ValueError):
	"""
	Raised when an .rpt document cannot be loaded.

	Attributes:
		value: The offending value (format tag, version, element type, ...).
	"""

	def __init__(self, message: str, value=None) -> None:
		super().__init__(message)
		self.value = value


@dataclasses.dataclass
class LoadedTemplate:
	template: ReportTemplate
	schema: DataSchema | None
	metadata: dict


@dataclasses.dataclass
class TemplateInfo:
	file_path: str
	name: str
	description: str
	created_at: datetime.datetime | None
	updated_at: datetime.datetime | None


#============================================
def is_version_supported(version: str) -> bool:
	return version in SUPPORTED_VERSIONS


#============================================
def _number(data: dict, key: str, default_value: float) -> float:
	value = data.get(key)
	if value is None:
		return default_value
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		raise FormatError(f"Template field '{key}' must be a number", value)
	# json reads 1e400 as inf
	if not math.isfinite(value):
		raise FormatError(f"Template field '{key}' must be finite", value)
	return float(value)


#============================================
def _integer(data: dict, key: str, default_value: int) -> int:
	value = data.get(key)
	if value is None:
		return default_value
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		raise FormatError(f"Template field '{key}' must be an integer", value)
	if not math.isfinite(value):
		raise FormatError(f"Template field '{key}' must be finite", value)
	return int(value)


#============================================
def _timestamp(value) -> datetime.datetime:
	if value is None:
		return datetime.datetime.now()
	try:
		return datetime.datetime.fromisoformat(value)
	except (TypeError, ValueError) as error:
		raise FormatError(f"Invalid timestamp: {value}", value) from error


#============================================
def element_to_dict(element: ReportElement) -> dict:
	return {
		"id": element.id,
		"type": element.type,
		"x": element.x,
		"y": element.y,
		"width": element.width,
		"height": element.height,
		"rotation": element.rotation,
		"zIndex": element.z_index,
		"properties": copy.deepcopy(element.properties),
	}


#============================================
def element_from_dict(data: dict) -> ReportElement:
	"""
	Build a ReportElement from its dict form.

	Args:
		data: Element dict.

	Returns:
		ReportElement with a deep-copied property bag.
	"""
	if not isinstance(data, dict):
		raise FormatError("Element entry must be an object", data)
	element_type = data.get("type")
	if element_type not in rptd.model.ELEMENT_TYPES:
		raise FormatError(f"Unknown element type: {element_type}", element_type)
	element_id = data.get("id")
	if not isinstance(element_id, str) or not element_id:
		raise FormatError("Element id must be a non-empty string", element_id)
	properties = data.get("properties")
	if properties is None:
		properties = {}
	if not isinstance(properties, dict):
		raise FormatError(f"Element {element_id} properties must be an object", properties)
	return ReportElement(
		id=element_id,
		type=element_type,
		x=_number(data, "x", 0.0),
		y=_number(data, "y", 0.0),
		width=_number(data, "width", rptd.config.DEFAULT_ELEMENT_WIDTH),
		height=_number(data, "height", rptd.config.DEFAULT_ELEMENT_HEIGHT),
		rotation=_number(data, "rotation", 0.0),
		z_index=_integer(data, "zIndex", 0),
		properties=copy.deepcopy(properties),
	)


#============================================
def template_to_dict(template: ReportTemplate) -> dict:
	"""
	Encode a template into its JSON dict form.

	Args:
		template: ReportTemplate.

	Returns:
		Dict with camelCase keys.
	"""
	schema_data = None
	if template.data_schema is not None:
		schema_data = rptd.schema.schema_to_dict(template.data_schema)
	return {
		"id": template.id,
		"name": template.name,
		"description": template.description,
		"reportType": template.report_type,
		"pageWidth": template.page_width,
		"pageHeight": template.page_height,
		"pageFormat": template.page_format,
		"marginTop": template.margin_top,
		"marginBottom": template.margin_bottom,
		"marginLeft": template.margin_left,
		"marginRight": template.margin_right,
		"itemsPerRow": template.items_per_row,
		"itemsPerColumn": template.items_per_column,
		"horizontalGap": template.horizontal_gap,
		"verticalGap": template.vertical_gap,
		"itemWidth": template.item_width,
		"itemHeight": template.item_height,
		"elements": [element_to_dict(element) for element in template.elements],
		"dataSchemaName": template.data_schema_name,
		"dataSchema": schema_data,
		"createdAt": template.created_at.isoformat(),
		"updatedAt": template.updated_at.isoformat(),
	}


#============================================
def template_from_dict(data: dict) -> ReportTemplate:
	"""
	Decode a template from its JSON dict form.

	Args:
		data: Template dict.

	Returns:
		ReportTemplate.
	"""
	if not isinstance(data, dict):
		raise FormatError("Template must be an object", data)
	template_id = data.get("id")
	if not isinstance(template_id, str) or not template_id:
		raise FormatError("Template id must be a non-empty string", template_id)

	report_type = data.get("reportType")
	if report_type not in REPORT_TYPES:
		report_type = rptd.config.DEFAULT_REPORT_TYPE
	page_format = data.get("pageFormat")
	if page_format not in PAGE_FORMATS:
		page_format = rptd.config.DEFAULT_PAGE_FORMAT

	element_list = data.get("elements")
	if element_list is None:
		element_list = []
	if not isinstance(element_list, list):
		raise FormatError("Template elements must be a list", element_list)
	elements = [element_from_dict(item) for item in element_list]
	seen: set[str] = set()
	for element in elements:
		if element.id in seen:
			raise FormatError(f"Duplicate element id: {element.id}", element.id)
		seen.add(element.id)

	schema = None
	if data.get("dataSchema") is not None:
		schema = _schema_from_dict(data["dataSchema"])
	schema_name = data.get("dataSchemaName")
	if schema_name is not None and not isinstance(schema_name, str):
		raise FormatError("Template dataSchemaName must be a string", schema_name)

	return ReportTemplate(
		id=template_id,
		name=data.get("name") or "",
		description=data.get("description"),
		report_type=report_type,
		page_width=_number(data, "pageWidth", 210.0),
		page_height=_number(data, "pageHeight", 297.0),
		page_format=page_format,
		margin_top=_number(data, "marginTop", 10.0),
		margin_bottom=_number(data, "marginBottom", 10.0),
		margin_left=_number(data, "marginLeft", 10.0),
		margin_right=_number(data, "marginRight", 10.0),
		items_per_row=_integer(data, "itemsPerRow", 3),
		items_per_column=_integer(data, "itemsPerColumn", 8),
		horizontal_gap=_number(data, "horizontalGap", 2.0),
		vertical_gap=_number(data, "verticalGap", 2.0),
		item_width=_number(data, "itemWidth", 50.0),
		item_height=_number(data, "itemHeight", 30.0),
		elements=elements,
		data_schema_name=data.get("dataSchemaName"),
		data_schema=schema,
		created_at=_timestamp(data.get("createdAt")),
		updated_at=_timestamp(data.get("updatedAt")),
	)


#============================================
def _schema_from_dict(data) -> DataSchema:
	if not isinstance(data, dict):
		raise FormatError("Data schema must be an object", data)
	try:
		return rptd.schema.schema_from_dict(data)
	except (AttributeError, KeyError, TypeError, ValueError) as error:
		raise FormatError(f"Invalid data schema: {error}", data) from error


#============================================
def build_metadata(template: ReportTemplate, metadata: dict | None = None) -> dict:
	"""
	Build envelope metadata from the template, overlaid with caller keys.

	Args:
		template: ReportTemplate.
		metadata: Optional caller metadata; its keys win.

	Returns:
		Metadata dict.
	"""
	result = {
		"name": template.name,
		"description": template.description or "",
		"author": DEFAULT_AUTHOR,
		"version": RPT_VERSION,
		"createdAt": template.created_at.isoformat(),
		"updatedAt": template.updated_at.isoformat(),
		"exportedAt": datetime.datetime.now().isoformat(),
	}
	if metadata:
		result.update(metadata)
	return result


#============================================
def build_envelope(
	template: ReportTemplate,
	schema: DataSchema | None = None,
	metadata: dict | None = None,
) -> dict:
	"""
	Wrap a template in the .rpt envelope.

	Args:
		template: ReportTemplate.
		schema: Optional schema; defaults to the template's own schema.
		metadata: Optional caller metadata.

	Returns:
		Envelope dict.
	"""
	envelope = {
		"format": RPT_FORMAT,
		"version": RPT_VERSION,
		"metadata": build_metadata(template, metadata),
		"template": template_to_dict(template),
	}
	if schema is None:
		schema = template.data_schema
	if schema is not None:
		envelope["dataSchema"] = rptd.schema.schema_to_dict(schema)
	return envelope


#============================================
def to_json(
	template: ReportTemplate,
	schema: DataSchema | None = None,
	metadata: dict | None = None,
	indent: int | None = 2,
) -> str:
	envelope = build_envelope(template, schema, metadata)
	return json.dumps(envelope, indent=indent, ensure_ascii=False)


#============================================
def check_envelope_header(data) -> str:
	"""
	Check the format tag and version of a decoded envelope.

	Args:
		data: Decoded JSON value.

	Returns:
		The accepted version string.
	"""
	if not isinstance(data, dict):
		raise FormatError("Template document must be a JSON object", type(data).__name__)
	format_tag = data.get("format")
	if format_tag != RPT_FORMAT:
		raise FormatError(
			f'Unsupported file format. Expected "{RPT_FORMAT}", found "{format_tag}"',
			format_tag,
		)
	version = data.get("version")
	if version is None:
		version = RPT_VERSION
	if not is_version_supported(version):
		raise FormatError(f"Unsupported template version: {version}", version)
	return version


#============================================
def parse_envelope(data, registry: SchemaRegistry | None = None) -> LoadedTemplate:
	"""
	Decode an envelope dict into a template, schema and metadata.

	The header is checked before anything else is read.

	Args:
		data: Decoded JSON value.
		registry: Optional registry used to resolve dataSchemaName.

	Returns:
		LoadedTemplate.
	"""
	check_envelope_header(data)
	if "template" not in data:
		raise FormatError("Template document has no template section", None)
	template = template_from_dict(data["template"])

	schema = None
	if data.get("dataSchema") is not None:
		schema = _schema_from_dict(data["dataSchema"])
	elif template.data_schema is not None:
		schema = template.data_schema
	elif template.data_schema_name and registry is not None:
		schema = registry.get(template.data_schema_name)

	metadata = data.get("metadata") or {}
	if not isinstance(metadata, dict):
		raise FormatError("Template metadata must be an object", metadata)
	return LoadedTemplate(template=template, schema=schema, metadata=dict(metadata))


#============================================
def from_json(text: str, registry: SchemaRegistry | None = None) -> LoadedTemplate:
	"""
	Decode .rpt JSON text.

	Args:
		text: JSON content.
		registry: Optional schema registry.

	Returns:
		LoadedTemplate.
	"""
	try:
		data = json.loads(text)
	except (TypeError, ValueError) as error:
		raise FormatError(f"Malformed template JSON: {error}", text) from error
	return parse_envelope(data, registry)


#============================================
def save_template(
	path: pathlib.Path,
	template: ReportTemplate,
	schema: DataSchema | None = None,
	metadata: dict | None = None,
) -> None:
	"""
	Write a template to an .rpt file, creating parent directories.

	Args:
		path: Output path.
		template: ReportTemplate.
		schema: Optional schema.
		metadata: Optional caller metadata.
	"""
	path = pathlib.Path(path)
	path.parent.mkdir(parents=True, exist_ok=True)
	text = to_json(template, schema, metadata)
	path.write_text(text, encoding="utf-8")


#============================================
def load_template(path: pathlib.Path, registry: SchemaRegistry | None = None) -> LoadedTemplate:
	"""
	Read an .rpt file.

	Args:
		path: Input path.
		registry: Optional schema registry.

	Returns:
		LoadedTemplate with loadedAt and filePath added to its metadata.
	"""
	path = pathlib.Path(path)
	text = path.read_text(encoding="utf-8")
	loaded = from_json(text, registry)
	loaded.metadata["loadedAt"] = datetime.datetime.now().isoformat()
	loaded.metadata["filePath"] = str(path)
	return loaded


#============================================
def _read_json(path: pathlib.Path):
	try:
		text = pathlib.Path(path).read_text(encoding="utf-8")
		return json.loads(text)
	except (OSError, ValueError):
		return None


#============================================
def validate_file(path: pathlib.Path) -> bool:
	"""
	Check the header of an .rpt file without building the template.

	Args:
		path: File path.

	Returns:
		True if the file carries a supported format and version.
	"""
	data = _read_json(path)
	if data is None:
		return False
	try:
		check_envelope_header(data)
	except FormatError:
		return False
	return True


#============================================
def read_metadata(path: pathlib.Path) -> dict | None:
	"""
	Read the metadata section of an .rpt file.

	Args:
		path: File path.

	Returns:
		Metadata dict, or None when the file is not an .rpt document.
	"""
	data = _read_json(path)
	if not isinstance(data, dict) or data.get("format") != RPT_FORMAT:
		return None
	metadata = data.get("metadata") or {}
	if not isinstance(metadata, dict):
		return None
	return dict(metadata)


#============================================
def _optional_timestamp(value) -> datetime.datetime | None:
	if not isinstance(value, str):
		return None
	try:
		return datetime.datetime.fromisoformat(value)
	except ValueError:
		return None


#============================================
def list_templates(directory: pathlib.Path) -> list[TemplateInfo]:
	"""
	List .rpt templates in a directory.

	Args:
		directory: Directory to scan (not recursive).

	Returns:
		TemplateInfo entries sorted by file name.
	"""
	directory = pathlib.Path(directory)
	if not directory.is_dir():
		return []
	infos: list[TemplateInfo] = []
	for path in sorted(directory.glob(f"*{RPT_SUFFIX}")):
		if not path.is_file():
			continue
		metadata = read_metadata(path)
		if metadata is None:
			continue
		infos.append(
			TemplateInfo(
				file_path=str(path),
				name=metadata.get("name") or path.name,
				description=metadata.get("description") or "",
				created_at=_optional_timestamp(metadata.get("createdAt")),
				updated_at=_optional_timestamp(metadata.get("updatedAt")),
			)
		)
	return infos
