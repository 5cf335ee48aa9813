import dataclasses
import datetime

import report_designer.record_data as record_data


ORDER = {
	"order": {
		"number": "SO-7",
		"items": [
			{"sku": "AB-1", "qty": 2},
			{"sku": "CD-2", "qty": 1},
		],
		"customer": {"firstName": "Ada", "last_name": "Lovelace"},
	},
}


#============================================
def test_indexed_path_lookup() -> None:
	assert record_data.get_field_value(ORDER, "order.items[0].sku") == "AB-1"
	assert record_data.get_field_value(ORDER, "order.items[1].qty") == 1
	assert record_data.get_field_value(ORDER, "order.customer.firstName") == "Ada"


#============================================
def test_missing_paths_return_none() -> None:
	assert record_data.get_field_value(ORDER, "order.items[5].sku") is None
	assert record_data.get_field_value(ORDER, "order.number.length") is None
	assert record_data.get_field_value(ORDER, "nothing") is None
	assert record_data.get_field_value(None, "order") is None
	assert record_data.get_field_value(ORDER, "") is None


#============================================
def test_dataclass_records() -> None:
	@dataclasses.dataclass
	class Line:
		sku: str

	@dataclasses.dataclass
	class Order:
		number: str
		lines: list

	order = Order("SO-8", [Line("EF-3")])
	assert record_data.get_field_value(order, "number") == "SO-8"
	assert record_data.get_field_value(order, "lines[0].sku") == "EF-3"


#============================================
def test_display_names() -> None:
	assert record_data.format_display_name("firstName") == "First Name"
	assert record_data.format_display_name("last_name") == "Last Name"
	assert record_data.format_display_name("sku") == "Sku"


#============================================
def test_extract_fields_walks_nested_data() -> None:
	fields = {field.name: field for field in record_data.extract_fields(ORDER)}
	assert fields["order"].is_nested
	assert fields["order.items"].type_name == "list"
	assert fields["order.items[].sku"].type_name == "str"
	assert fields["order.customer.firstName"].display_name == "First Name"
	assert "order.number" in record_data.field_names(ORDER)
	assert "order.items" not in record_data.field_names(ORDER)
	assert record_data.field_types(ORDER)["order.items[].qty"] == "int"


#============================================
def test_format_value() -> None:
	assert record_data.format_value(None) == ""
	assert record_data.format_value(3.5, "currency") == "3.50"
	assert record_data.format_value(0.125, "percentage") == "12.5%"
	assert record_data.format_value(7.9, "integer") == "7"
	assert record_data.format_value("2024-03-05", "date") == "05/03/2024"
	assert record_data.format_value(datetime.datetime(2024, 3, 5, 14, 30), "datetime") == "05/03/2024 14:30"
	assert record_data.format_value("not a date", "date") == "not a date"
	assert record_data.format_value(True, "currency") == "True"
