import pytest

import report_designer.model as model_lib


#============================================
def test_every_type_has_defaults_and_name() -> None:
	for element_type in model_lib.ELEMENT_TYPES:
		element = model_lib.ReportElement(id=element_type, type=element_type)
		assert element.display_name
		assert element.properties == model_lib.DEFAULT_PROPERTIES[element_type]
		assert model_lib.check_element_properties(element) == []


#============================================
def test_default_properties_are_independent() -> None:
	first = model_lib.ReportElement(id="a", type="table")
	second = model_lib.ReportElement(id="b", type="table")
	first.properties["headerStyle"]["fontSize"] = 20.0
	assert second.properties["headerStyle"]["fontSize"] == 10.0

	chart = model_lib.ReportElement(id="c", type="barChart")
	chart.properties["title"] = "Sales"
	assert model_lib.ReportElement(id="d", type="pieChart").properties["title"] == ""


#============================================
def test_unknown_type_is_rejected() -> None:
	with pytest.raises(ValueError):
		model_lib.ReportElement(id="x", type="hologram")


#============================================
def test_property_type_warnings() -> None:
	element = model_lib.ReportElement(id="t", type="text")
	element.properties["fontSize"] = "big"
	element.properties["custom"] = object()
	element.properties["color"] = None
	warnings = model_lib.check_element_properties(element)
	assert len(warnings) == 1
	assert "fontSize" in warnings[0]

	box = model_lib.ReportElement(id="b", type="barcode")
	box.properties["textSize"] = True
	assert len(model_lib.check_element_properties(box)) == 1


#============================================
def test_element_ids_are_unique(blank_template) -> None:
	blank_template.add_element(model_lib.ReportElement(id="a", type="text"))
	with pytest.raises(model_lib.DuplicateElementError):
		blank_template.add_element(model_lib.ReportElement(id="a", type="line"))
	blank_template.add_element(model_lib.ReportElement(id="b", type="line"))
	with pytest.raises(model_lib.DuplicateElementError):
		blank_template.rename_element("b", "a")
	assert blank_template.rename_element("b", "c")
	assert not blank_template.rename_element("zzz", "y")
	assert blank_template.remove_element("a")
	assert not blank_template.remove_element("a")


#============================================
def test_sorted_elements_is_stable(blank_template) -> None:
	for element_id, z_index in (("a", 2), ("b", 0), ("c", 2), ("d", 1)):
		blank_template.add_element(model_lib.ReportElement(id=element_id, type="text", z_index=z_index))
	assert [element.id for element in blank_template.sorted_elements()] == ["b", "d", "a", "c"]


#============================================
def test_page_formats(blank_template) -> None:
	blank_template.set_page_format("a4Landscape")
	assert (blank_template.page_width, blank_template.page_height) == (297.0, 210.0)
	blank_template.set_page_format("custom")
	assert blank_template.page_format == "custom"
	assert blank_template.page_width == 297.0
	with pytest.raises(ValueError):
		blank_template.set_page_format("tabloid")


#============================================
def test_schema_helpers(blank_template, product_schema) -> None:
	assert blank_template.available_fields() == []
	assert blank_template.is_valid_field("anything")
	blank_template.set_data_schema(product_schema)
	assert blank_template.data_schema_name == "Product"
	assert blank_template.available_fields() == ["sku", "name", "price", "stock"]
	assert blank_template.field_definition("price").type == "decimal"
	assert not blank_template.is_valid_field("color")
	assert blank_template.sample_data()["sku"] == "AB-123"
