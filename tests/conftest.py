"""
Pytest configuration for local imports and shared template fixtures.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

# local repo modules
import report_designer as rptd  # noqa: E402
import report_designer.model  # noqa: E402
import report_designer.schema  # noqa: E402


#============================================
@pytest.fixture
def product_schema() -> rptd.schema.DataSchema:
	"""
	Schema for a small product record.
	"""
	return rptd.schema.DataSchema(
		name="Product",
		display_name="Product",
		description="Shelf label product",
		fields=[
			rptd.schema.FieldDefinition(
				name="sku",
				display_name="SKU",
				type="string",
				is_required=True,
				validation_rules=["minLength:3", "pattern:^[A-Z0-9-]+$"],
			),
			rptd.schema.FieldDefinition(name="name", display_name="Name", type="string"),
			rptd.schema.FieldDefinition(
				name="price",
				display_name="Price",
				type="decimal",
				validation_rules=["min:0"],
			),
			rptd.schema.FieldDefinition(name="stock", display_name="Stock", type="integer"),
		],
		sample_data={"sku": "AB-123", "name": "Widget", "price": 9.5, "stock": 4},
		metadata={"source": "tests"},
	)


#============================================
@pytest.fixture
def blank_template() -> rptd.model.ReportTemplate:
	"""
	Empty 100 x 80 mm label template.
	"""
	return rptd.model.ReportTemplate(
		id="tpl-1",
		name="Shelf label",
		page_width=100.0,
		page_height=80.0,
		page_format="custom",
	)
