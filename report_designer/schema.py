"""
Data schemas, field definitions and the rule-based validation engine.
"""

# Standard Library
import dataclasses
import datetime
import re
from collections.abc import Callable

# local repo modules
import report_designer as rptd
import report_designer.record_data


FIELD_TYPES = ("string", "integer", "decimal", "boolean", "datetime")

TYPE_ALIASES = {
	"string": "string",
	"str": "string",
	"text": "string",
	"int": "integer",
	"integer": "integer",
	"double": "decimal",
	"num": "decimal",
	"number": "decimal",
	"float": "decimal",
	"decimal": "decimal",
	"bool": "boolean",
	"boolean": "boolean",
	"datetime": "datetime",
	"date": "datetime",
}

TYPE_LABELS = {
	"string": "text",
	"integer": "integer",
	"decimal": "decimal number",
	"boolean": "boolean",
	"datetime": "date",
}

INTEGER_LITERAL = re.compile(r"^[+-]?\d+$")
DECIMAL_LITERAL = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

# rule parameter fallbacks when the parameter is missing or unparsable
RULE_DEFAULTS = {
	"minLength": 0,
	"maxLength": 999,
	"min": 0.0,
	"max": 999999.0,
}


@dataclasses.dataclass
class ValidationResult:
	is_valid: bool
	errors: list[str] = dataclasses.field(default_factory=list)
	warnings: list[str] = dataclasses.field(default_factory=list)
	error_message: str | None = None

	@classmethod
	def success(cls) -> "ValidationResult":
		return cls(is_valid=True)

	@classmethod
	def failure(cls, errors: list[str], warnings: list[str] | None = None) -> "ValidationResult":
		return cls(
			is_valid=False,
			errors=list(errors),
			warnings=list(warnings or []),
			error_message=errors[0] if errors else None,
		)

	@classmethod
	def error(cls, message: str) -> "ValidationResult":
		return cls(is_valid=False, errors=[message], error_message=message)

	@classmethod
	def warning(cls, warnings: list[str]) -> "ValidationResult":
		return cls(is_valid=True, warnings=list(warnings))


@dataclasses.dataclass
class FieldDefinition:
	name: str
	display_name: str = ""
	type: str = "string"
	is_required: bool = False
	default_value: object = None
	validation_rules: list[str] = dataclasses.field(default_factory=list)
	description: str | None = None
	metadata: dict | None = None

	def __post_init__(self) -> None:
		if not self.display_name:
			self.display_name = self.name
		self.type = normalize_type(self.type)


@dataclasses.dataclass
class DataSchema:
	name: str
	display_name: str = ""
	description: str = ""
	fields: list[FieldDefinition] = dataclasses.field(default_factory=list)
	sample_data: dict = dataclasses.field(default_factory=dict)
	metadata: dict = dataclasses.field(default_factory=dict)

	def __post_init__(self) -> None:
		if not self.display_name:
			self.display_name = self.name
		seen: set[str] = set()
		for field in self.fields:
			if field.name in seen:
				raise ValueError(f"Duplicate field name in schema {self.name}: {field.name}")
			seen.add(field.name)

	def get_field(self, name: str) -> FieldDefinition | None:
		for field in self.fields:
			if field.name == name:
				return field
		return None

	def field_names(self) -> list[str]:
		return [field.name for field in self.fields]

	def required_fields(self) -> list[FieldDefinition]:
		return [field for field in self.fields if field.is_required]

	def fields_by_type(self, field_type: str) -> list[FieldDefinition]:
		wanted = normalize_type(field_type)
		return [field for field in self.fields if field.type == wanted]


class SchemaRegistry:
	"""
	Named schema factories owned by the hosting application.
	"""

	def __init__(self) -> None:
		self._factories: dict[str, Callable[[], DataSchema]] = {}

	def register(self, name: str, factory: Callable[[], DataSchema]) -> None:
		self._factories[name] = factory

	def register_schema(self, schema: DataSchema) -> None:
		self._factories[schema.name] = lambda: schema

	def unregister(self, name: str) -> bool:
		return self._factories.pop(name, None) is not None

	def get(self, name: str) -> DataSchema | None:
		factory = self._factories.get(name)
		if factory is None:
			return None
		return factory()

	def has(self, name: str) -> bool:
		return name in self._factories

	def names(self) -> list[str]:
		return list(self._factories)


#============================================
def normalize_type(type_name: str) -> str:
	"""
	Map a type name or alias to one of FIELD_TYPES.

	Unknown names fall back to "string".

	Args:
		type_name: Type name, any case.

	Returns:
		Canonical type name.
	"""
	if not isinstance(type_name, str):
		return "string"
	return TYPE_ALIASES.get(type_name.strip().lower(), "string")


#============================================
def _is_blank(value) -> bool:
	if value is None:
		return True
	return isinstance(value, str) and not value.strip()


#============================================
def _parse_iso_datetime(value: str) -> bool:
	text = value.strip()
	if text.endswith(("Z", "z")):
		text = text[:-1] + "+00:00"
	try:
		datetime.datetime.fromisoformat(text)
	except ValueError:
		return False
	return True


#============================================
def is_compatible(field_type: str, value) -> bool:
	"""
	Check whether a value fits a semantic field type.

	Strings are accepted for non-string types when they parse.

	Args:
		field_type: Canonical field type.
		value: Non-null value.

	Returns:
		True if compatible.
	"""
	if field_type == "string":
		return isinstance(value, str)
	if field_type == "integer":
		if isinstance(value, bool):
			return False
		if isinstance(value, int):
			return True
		return isinstance(value, str) and INTEGER_LITERAL.match(value.strip()) is not None
	if field_type == "decimal":
		if isinstance(value, bool):
			return False
		if isinstance(value, (int, float)):
			return True
		return isinstance(value, str) and DECIMAL_LITERAL.match(value.strip()) is not None
	if field_type == "boolean":
		if isinstance(value, bool):
			return True
		return isinstance(value, str) and value.strip().lower() in ("true", "false")
	if field_type == "datetime":
		if isinstance(value, (datetime.date, datetime.datetime)):
			return True
		return isinstance(value, str) and _parse_iso_datetime(value)
	return True


#============================================
def _parse_int(param: str | None, default_value: int) -> int:
	if param is None:
		return default_value
	try:
		return int(param.strip())
	except ValueError:
		return default_value


#============================================
def _parse_float(param, default_value: float) -> float:
	if param is None:
		return default_value
	text = str(param).strip()
	if DECIMAL_LITERAL.match(text) is None:
		return default_value
	return float(text)


#============================================
def _format_number(value: float) -> str:
	if value == int(value):
		return str(int(value))
	return str(value)


#============================================
def parse_rule(rule: str) -> tuple[str, str | None]:
	"""
	Split a rule string into name and optional parameter.

	The split happens at the first colon only.

	Args:
		rule: Rule like "minLength:2" or "pattern:^a:b$".

	Returns:
		Tuple of (name, param or None).
	"""
	name, separator, param = rule.partition(":")
	if not separator:
		return (name.strip(), None)
	return (name.strip(), param)


#============================================
def check_rule(field: FieldDefinition, rule: str, value) -> ValidationResult:
	"""
	Evaluate one validation rule against a value.

	Unknown rule names pass.

	Args:
		field: Field definition, used for messages.
		rule: Rule string.
		value: Non-null value.

	Returns:
		ValidationResult.
	"""
	name, param = parse_rule(rule)
	label = field.display_name
	text = value if isinstance(value, str) else str(value)

	if name == "minLength":
		limit = _parse_int(param, RULE_DEFAULTS["minLength"])
		if len(text) < limit:
			return ValidationResult.error(f"{label} must be at least {limit} characters")
	elif name == "maxLength":
		limit = _parse_int(param, RULE_DEFAULTS["maxLength"])
		if len(text) > limit:
			return ValidationResult.error(f"{label} must not exceed {limit} characters")
	elif name == "min":
		limit = _parse_float(param, RULE_DEFAULTS["min"])
		if _parse_float(value, 0.0) < limit:
			return ValidationResult.error(f"{label} must be at least {_format_number(limit)}")
	elif name == "max":
		limit = _parse_float(param, RULE_DEFAULTS["max"])
		if _parse_float(value, 0.0) > limit:
			return ValidationResult.error(f"{label} must not exceed {_format_number(limit)}")
	elif name == "pattern":
		try:
			regex = re.compile(param or "")
		except re.error:
			return ValidationResult.error(f"{label} has an invalid validation pattern: {param}")
		if regex.search(text) is None:
			return ValidationResult.error(f"{label} has an invalid format")
	return ValidationResult.success()


#============================================
def validate_field(field: FieldDefinition, value) -> ValidationResult:
	"""
	Validate a value against a field definition.

	Order: required check, null pass-through, type check, then rules in
	declaration order. The first failure is returned.

	Args:
		field: Field definition.
		value: Value to check.

	Returns:
		ValidationResult.
	"""
	if field.is_required and _is_blank(value):
		return ValidationResult.error(f"{field.display_name} is required")
	if value is None:
		return ValidationResult.success()
	if not is_compatible(field.type, value):
		return ValidationResult.error(
			f"{field.display_name} must be of type {TYPE_LABELS[field.type]}"
		)
	for rule in field.validation_rules:
		result = check_rule(field, rule, value)
		if not result.is_valid:
			return result
	return ValidationResult.success()


#============================================
def validate_record(schema: DataSchema, record) -> ValidationResult:
	"""
	Validate a record against every schema field, stopping at the first failure.

	Args:
		schema: Data schema.
		record: Mapping, dataclass instance or object with to_dict().

	Returns:
		ValidationResult.
	"""
	if record is None:
		return ValidationResult.error("Record data is missing")
	data = rptd.record_data.as_mapping(record)
	if data is None:
		return ValidationResult.error("Record cannot be converted to a mapping")
	for field in schema.fields:
		result = validate_field(field, data.get(field.name))
		if not result.is_valid:
			return result
	return ValidationResult.success()


#============================================
def validate_records(schema: DataSchema, records: list) -> ValidationResult:
	"""
	Validate a list of records, reporting the first failing row.

	Args:
		schema: Data schema.
		records: Records to check.

	Returns:
		ValidationResult with a 1-based "Row N: " prefix on failure.
	"""
	if not records:
		return ValidationResult.error("Record list is empty")
	for index, record in enumerate(records, start=1):
		result = validate_record(schema, record)
		if not result.is_valid:
			return ValidationResult.error(f"Row {index}: {result.error_message}")
	return ValidationResult.success()


#============================================
def check_template_bindings(template, schema: DataSchema) -> ValidationResult:
	"""
	Warn about element field bindings the schema does not declare.

	Args:
		template: ReportTemplate.
		schema: Data schema.

	Returns:
		Valid ValidationResult carrying one warning per unknown binding.
	"""
	warnings: list[str] = []
	for element in template.elements:
		field_name = element.properties.get("fieldName")
		if not isinstance(field_name, str) or not field_name:
			continue
		# dotted paths bind through their first segment
		root_name = field_name.split(".", 1)[0].split("[", 1)[0]
		if schema.get_field(field_name) is None and schema.get_field(root_name) is None:
			warnings.append(f"{element.id}: field '{field_name}' is not defined in schema {schema.name}")
	if not warnings:
		return ValidationResult.success()
	return ValidationResult.warning(warnings)


#============================================
def field_to_dict(field: FieldDefinition) -> dict:
	return {
		"name": field.name,
		"displayName": field.display_name,
		"type": field.type,
		"isRequired": field.is_required,
		"defaultValue": field.default_value,
		"validationRules": list(field.validation_rules),
		"description": field.description,
		"metadata": field.metadata,
	}


#============================================
def field_from_dict(data: dict) -> FieldDefinition:
	return FieldDefinition(
		name=data["name"],
		display_name=data.get("displayName") or data["name"],
		type=normalize_type(data.get("type", "string")),
		is_required=bool(data.get("isRequired", False)),
		default_value=data.get("defaultValue"),
		validation_rules=[str(rule) for rule in data.get("validationRules") or []],
		description=data.get("description"),
		metadata=data.get("metadata"),
	)


#============================================
def schema_to_dict(schema: DataSchema) -> dict:
	return {
		"name": schema.name,
		"displayName": schema.display_name,
		"description": schema.description,
		"fields": [field_to_dict(field) for field in schema.fields],
		"sampleData": schema.sample_data,
		"metadata": schema.metadata,
	}


#============================================
def schema_from_dict(data: dict) -> DataSchema:
	"""
	Build a DataSchema from its JSON dict form.

	Args:
		data: Decoded JSON dict.

	Returns:
		DataSchema.
	"""
	return DataSchema(
		name=data["name"],
		display_name=data.get("displayName") or data["name"],
		description=data.get("description") or "",
		fields=[field_from_dict(item) for item in data.get("fields") or []],
		sample_data=dict(data.get("sampleData") or {}),
		metadata=dict(data.get("metadata") or {}),
	)
