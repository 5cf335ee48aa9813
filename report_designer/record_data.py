"""
Record data access by field path, plus field discovery for the builder.
"""

# Standard Library
import dataclasses
import datetime
import re


INDEXED_PART = re.compile(r"^(.+)\[(\d+)\]$")
CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")


@dataclasses.dataclass
class FieldInfo:
	name: str
	display_name: str
	type_name: str
	value: object = None
	is_nested: bool = False


#============================================
def as_mapping(record) -> dict | None:
	"""
	Convert a record into a mapping.

	Accepts mappings, dataclass instances and objects with to_dict().

	Args:
		record: Record object.

	Returns:
		Dict view of the record, or None when it cannot be converted.
	"""
	if record is None:
		return None
	if isinstance(record, dict):
		return record
	if hasattr(record, "keys") and hasattr(record, "__getitem__"):
		return {key: record[key] for key in record.keys()}
	if dataclasses.is_dataclass(record) and not isinstance(record, type):
		return dataclasses.asdict(record)
	to_dict = getattr(record, "to_dict", None)
	if callable(to_dict):
		result = to_dict()
		if isinstance(result, dict):
			return result
	return None


#============================================
def get_field_value(record, field_path: str):
	"""
	Read a value from a record using a dotted path.

	Path parts may carry a list index, for example "order.items[0].sku".

	Args:
		record: Record object.
		field_path: Dotted field path.

	Returns:
		The value, or None when any part of the path is missing.
	"""
	if record is None or not field_path:
		return None
	current = as_mapping(record)
	if current is None:
		return None

	for part in field_path.split("."):
		if current is None:
			return None
		match = INDEXED_PART.match(part)
		if match is not None:
			key = match.group(1)
			index = int(match.group(2))
			if isinstance(current, dict):
				current = current.get(key)
			if isinstance(current, (list, tuple)) and index < len(current):
				current = current[index]
			else:
				return None
			continue
		if isinstance(current, dict):
			current = current.get(part)
			continue
		nested = as_mapping(current)
		if nested is None:
			return None
		current = nested.get(part)
	return current


#============================================
def format_display_name(name: str) -> str:
	"""
	Turn camelCase or snake_case into a readable title.

	Args:
		name: Field name.

	Returns:
		Title-cased display name.
	"""
	spaced = CAMEL_BOUNDARY.sub(r"\1 \2", name).replace("_", " ")
	words = [word[0].upper() + word[1:].lower() for word in spaced.split(" ") if word]
	return " ".join(words)


#============================================
def extract_fields(record, prefix: str = "") -> list[FieldInfo]:
	"""
	List the fields available in a record, recursing into nested data.

	Lists of mappings contribute the fields of their first entry under
	a "name[]" prefix.

	Args:
		record: Record object.
		prefix: Path prefix for nested fields.

	Returns:
		List of FieldInfo entries.
	"""
	data = as_mapping(record)
	if data is None:
		return []

	fields: list[FieldInfo] = []
	for key, value in data.items():
		field_name = f"{prefix}.{key}" if prefix else str(key)
		display_name = format_display_name(str(key))
		if isinstance(value, dict):
			fields.append(FieldInfo(field_name, display_name, "map", value, True))
			fields.extend(extract_fields(value, prefix=field_name))
			continue
		if isinstance(value, (list, tuple)):
			fields.append(FieldInfo(field_name, display_name, "list", value, True))
			if value and isinstance(value[0], dict):
				fields.extend(extract_fields(value[0], prefix=f"{field_name}[]"))
			continue
		fields.append(FieldInfo(field_name, display_name, type(value).__name__, value))
	return fields


#============================================
def field_names(record) -> list[str]:
	return [field.name for field in extract_fields(record) if not field.is_nested]


#============================================
def field_types(record) -> dict[str, str]:
	return {field.name: field.type_name for field in extract_fields(record) if not field.is_nested}


#============================================
def _parse_datetime(value) -> datetime.datetime | None:
	if isinstance(value, datetime.datetime):
		return value
	if isinstance(value, datetime.date):
		return datetime.datetime(value.year, value.month, value.day)
	if isinstance(value, str):
		try:
			return datetime.datetime.fromisoformat(value)
		except ValueError:
			return None
	return None


#============================================
def format_value(value, fmt: str | None = None) -> str:
	"""
	Format a record value for display.

	Args:
		value: Raw value.
		fmt: One of currency, date, datetime, number, integer, percentage.

	Returns:
		Display string, empty for None.
	"""
	if value is None:
		return ""
	is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
	if fmt == "currency" and is_number:
		return f"{value:.2f}"
	if fmt == "date":
		moment = _parse_datetime(value)
		if moment is not None:
			return moment.strftime("%d/%m/%Y")
	if fmt == "datetime":
		moment = _parse_datetime(value)
		if moment is not None:
			return moment.strftime("%d/%m/%Y %H:%M")
	if fmt == "number" and is_number:
		return str(value)
	if fmt == "integer" and is_number:
		return str(int(value))
	if fmt == "percentage" and is_number:
		return f"{value * 100:.1f}%"
	return str(value)
