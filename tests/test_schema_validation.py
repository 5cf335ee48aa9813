import dataclasses
import datetime

import pytest

import report_designer.model as model_lib
import report_designer.schema as schema_lib


#============================================
def make_field(**overrides) -> schema_lib.FieldDefinition:
	"""
	Build a string field named "code" with overrides.
	"""
	values = {"name": "code", "display_name": "Code", "type": "string"}
	values.update(overrides)
	return schema_lib.FieldDefinition(**values)


#============================================
def test_rules_fail_fast_in_declaration_order() -> None:
	"""
	The first failing rule decides the message.
	"""
	field = make_field(validation_rules=["minLength:2", "pattern:^[A-Z]+$"])
	result = schema_lib.validate_field(field, "a")
	assert not result.is_valid
	assert "at least 2 characters" in result.error_message
	assert len(result.errors) == 1


#============================================
def test_required_field_missing_in_record(product_schema) -> None:
	"""
	A missing required field names the field.
	"""
	result = schema_lib.validate_record(product_schema, {})
	assert not result.is_valid
	assert "SKU" in result.error_message
	assert "required" in result.error_message

	field = schema_lib.FieldDefinition(name="sku", type="string", is_required=True)
	bare_schema = schema_lib.DataSchema(name="Bare", fields=[field])
	result = schema_lib.validate_record(bare_schema, {})
	assert "sku" in result.error_message


#============================================
def test_blank_string_counts_as_missing() -> None:
	field = make_field(is_required=True)
	assert not schema_lib.validate_field(field, "   ").is_valid
	assert schema_lib.validate_field(field, "x").is_valid


#============================================
def test_optional_null_passes_rules() -> None:
	field = make_field(validation_rules=["minLength:5"])
	assert schema_lib.validate_field(field, None).is_valid


#============================================
def test_type_compatibility_with_strings() -> None:
	"""
	Strings are accepted for typed fields only when they parse.
	"""
	integer_field = make_field(type="integer")
	assert schema_lib.validate_field(integer_field, 12).is_valid
	assert schema_lib.validate_field(integer_field, "-12").is_valid
	assert not schema_lib.validate_field(integer_field, "1.5").is_valid
	assert not schema_lib.validate_field(integer_field, True).is_valid

	decimal_field = make_field(type="decimal")
	assert schema_lib.validate_field(decimal_field, 3).is_valid
	assert schema_lib.validate_field(decimal_field, "3.25").is_valid
	assert schema_lib.validate_field(decimal_field, "1e3").is_valid
	assert not schema_lib.validate_field(decimal_field, "3,25").is_valid
	assert not schema_lib.validate_field(decimal_field, "nan").is_valid

	boolean_field = make_field(type="boolean")
	assert schema_lib.validate_field(boolean_field, False).is_valid
	assert schema_lib.validate_field(boolean_field, "TRUE").is_valid
	assert not schema_lib.validate_field(boolean_field, "yes").is_valid

	date_field = make_field(type="datetime")
	assert schema_lib.validate_field(date_field, datetime.date(2024, 1, 2)).is_valid
	assert schema_lib.validate_field(date_field, "2024-01-02T10:00:00Z").is_valid
	assert not schema_lib.validate_field(date_field, "02/01/2024").is_valid

	string_field = make_field(type="string")
	result = schema_lib.validate_field(string_field, 42)
	assert not result.is_valid
	assert "must be of type" in result.error_message


#============================================
def test_numeric_and_length_rules() -> None:
	field = make_field(type="decimal", validation_rules=["min:1", "max:10"])
	assert schema_lib.validate_field(field, 5).is_valid
	assert "at least 1" in schema_lib.validate_field(field, 0.5).error_message
	assert "must not exceed 10" in schema_lib.validate_field(field, "11").error_message

	field = make_field(validation_rules=["maxLength:3"])
	assert not schema_lib.validate_field(field, "abcd").is_valid


#============================================
def test_unknown_rules_are_ignored() -> None:
	field = make_field(validation_rules=["luhn", "futureRule:7"])
	assert schema_lib.validate_field(field, "anything").is_valid


#============================================
def test_pattern_param_may_contain_colons() -> None:
	field = make_field(validation_rules=["pattern:^\\d{2}:\\d{2}$"])
	assert schema_lib.validate_field(field, "10:30").is_valid
	assert not schema_lib.validate_field(field, "1030").is_valid


#============================================
def test_invalid_pattern_is_reported_not_raised() -> None:
	field = make_field(validation_rules=["pattern:[unclosed"])
	result = schema_lib.validate_field(field, "x")
	assert not result.is_valid
	assert "invalid validation pattern" in result.error_message


#============================================
def test_validate_records_prefixes_row_index(product_schema) -> None:
	records = [
		{"sku": "AB-123", "price": 1.0},
		{"sku": "AB-124", "price": 2.0},
		{"sku": "x", "price": 3.0},
	]
	result = schema_lib.validate_records(product_schema, records)
	assert not result.is_valid
	assert result.error_message.startswith("Row 3: ")

	assert not schema_lib.validate_records(product_schema, []).is_valid
	assert schema_lib.validate_records(product_schema, records[:2]).is_valid


#============================================
def test_validate_record_accepts_dataclasses(product_schema) -> None:
	@dataclasses.dataclass
	class Product:
		sku: str
		price: float

	assert schema_lib.validate_record(product_schema, Product("AB-1", 2.0)).is_valid
	assert not schema_lib.validate_record(product_schema, None).is_valid
	assert not schema_lib.validate_record(product_schema, 42).is_valid


#============================================
def test_type_aliases_and_dict_round_trip() -> None:
	data = {"name": "qty", "type": "int", "isRequired": True, "validationRules": ["min:1"]}
	field = schema_lib.field_from_dict(data)
	assert field.type == "integer"
	assert field.display_name == "qty"
	assert schema_lib.field_from_dict(schema_lib.field_to_dict(field)) == field
	assert schema_lib.normalize_type("Double") == "decimal"
	assert schema_lib.normalize_type("mystery") == "string"


#============================================
def test_schema_rejects_duplicate_field_names() -> None:
	fields = [schema_lib.FieldDefinition(name="a"), schema_lib.FieldDefinition(name="a")]
	with pytest.raises(ValueError, match="Duplicate field name"):
		schema_lib.DataSchema(name="Dup", fields=fields)


#============================================
def test_registry_register_and_unregister(product_schema) -> None:
	registry = schema_lib.SchemaRegistry()
	registry.register("Product", lambda: product_schema)
	assert registry.has("Product")
	assert registry.get("Product") is product_schema
	assert registry.names() == ["Product"]
	assert registry.unregister("Product")
	assert registry.get("Product") is None
	assert not registry.unregister("Product")


#============================================
def test_template_binding_warnings(product_schema, blank_template) -> None:
	bound = model_lib.ReportElement(id="f1", type="dynamicField", properties={"fieldName": "sku"})
	unbound = model_lib.ReportElement(id="f2", type="dynamicField", properties={"fieldName": "color"})
	blank_template.add_element(bound)
	blank_template.add_element(unbound)
	result = schema_lib.check_template_bindings(blank_template, product_schema)
	assert result.is_valid
	assert len(result.warnings) == 1
	assert "color" in result.warnings[0]
