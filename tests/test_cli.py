import json
import pathlib

import report_designer.cli as cli
import report_designer.model as model_lib
import report_designer.rpt_format as rpt_format


#============================================
def _write_template(directory: pathlib.Path, product_schema=None) -> pathlib.Path:
	"""
	Save a one-element template and return its path.
	"""
	template = model_lib.ReportTemplate(
		id="tpl-cli",
		name="CLI tag",
		page_width=60.0,
		page_height=40.0,
		page_format="custom",
	)
	element = model_lib.ReportElement(id="sku_field", type="dynamicField", x=2.0, y=2.0)
	element.properties["fieldName"] = "sku"
	element.properties["maxLines"] = "two"
	template.add_element(element)
	if product_schema is not None:
		template.set_data_schema(product_schema)
	path = directory / "cli_tag.rpt"
	rpt_format.save_template(path, template)
	return path


#============================================
def test_info_lists_elements(tmp_path: pathlib.Path, capsys) -> None:
	path = _write_template(tmp_path)
	assert cli.main(["info", str(path)]) == 0
	output = capsys.readouterr().out
	assert "Template: CLI tag (tpl-cli)" in output
	assert "sku_field\tdynamicField" in output
	assert "property 'maxLines'" in output


#============================================
def test_validate_exit_codes(tmp_path: pathlib.Path, capsys, product_schema) -> None:
	path = _write_template(tmp_path, product_schema)
	good = tmp_path / "good.json"
	good.write_text(json.dumps([{"sku": "AB-1"}, {"sku": "CD-2"}]), encoding="utf-8")
	bad = tmp_path / "bad.json"
	bad.write_text(json.dumps({"sku": "a"}), encoding="utf-8")

	assert cli.main(["validate", str(path), str(good)]) == 0
	assert "Valid: 2 records" in capsys.readouterr().out
	assert cli.main(["validate", str(path), str(bad)]) == 1
	assert "Row 1: SKU must be at least 3 characters" in capsys.readouterr().out


#============================================
def test_validate_without_schema(tmp_path: pathlib.Path, capsys) -> None:
	path = _write_template(tmp_path)
	records = tmp_path / "records.json"
	records.write_text("[]", encoding="utf-8")
	assert cli.main(["validate", str(path), str(records)]) == 0
	assert "no data schema" in capsys.readouterr().out


#============================================
def test_validate_rejects_scalar_records(tmp_path: pathlib.Path, capsys, product_schema) -> None:
	path = _write_template(tmp_path, product_schema)
	records = tmp_path / "records.json"
	for content in ("5", "\"x\"", "null"):
		records.write_text(content, encoding="utf-8")
		assert cli.main(["validate", str(path), str(records)]) == 2
		assert "JSON object or array" in capsys.readouterr().err


#============================================
def test_proof_writes_files(tmp_path: pathlib.Path) -> None:
	path = _write_template(tmp_path)
	pdf_path = tmp_path / "proof.pdf"
	png_path = tmp_path / "proof.png"
	args = ["proof", str(path), "-o", str(pdf_path), "-t", str(png_path), "-s", "2"]
	assert cli.main(args) == 0
	assert pdf_path.stat().st_size > 0
	assert png_path.exists()


#============================================
def test_list_and_errors(tmp_path: pathlib.Path, capsys) -> None:
	_write_template(tmp_path)
	assert cli.main(["list", str(tmp_path)]) == 0
	assert "Templates found: 1" in capsys.readouterr().out

	broken = tmp_path / "broken.rpt"
	broken.write_text('{"format": "rpt", "version": "9.9", "template": {}}', encoding="utf-8")
	assert cli.main(["info", str(broken)]) == 2
	assert "Unsupported template version: 9.9" in capsys.readouterr().err
	assert cli.main(["info", str(tmp_path / "missing.rpt")]) == 2
