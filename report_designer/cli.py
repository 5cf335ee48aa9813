"""
CLI entry points for inspecting, validating and proofing .rpt templates.
"""

# Standard Library
import argparse
import json
import pathlib
import sys

# local repo modules
import report_designer as rptd
import report_designer.config
import report_designer.model
import report_designer.proof
import report_designer.rpt_format
import report_designer.schema


FormatError = rptd.rpt_format.FormatError
DEFAULT_SCALE = rptd.config.DEFAULT_SCALE


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Optional argument list; defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Inspect, validate and proof .rpt report templates.")
	subparsers = parser.add_subparsers(dest="command", required=True)

	info_parser = subparsers.add_parser("info", help="Print template metadata and elements.")
	info_parser.add_argument("template", help="Template .rpt file.")

	validate_parser = subparsers.add_parser("validate", help="Validate records against the template schema.")
	validate_parser.add_argument("template", help="Template .rpt file.")
	validate_parser.add_argument("records", help="JSON file holding a record or a list of records.")

	proof_parser = subparsers.add_parser("proof", help="Write a layout proof PDF.")
	proof_parser.add_argument("template", help="Template .rpt file.")
	proof_parser.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF path.")
	proof_parser.add_argument("-t", "--thumbnail", dest="thumbnail_path", default=None, help="Optional PNG thumbnail path.")
	proof_parser.add_argument("-s", "--scale", dest="scale", type=float, default=DEFAULT_SCALE, help="Thumbnail pixels per mm.")

	list_parser = subparsers.add_parser("list", help="List .rpt templates in a directory.")
	list_parser.add_argument("directory", help="Directory to scan.")

	args = parser.parse_args(argv)
	return args


#============================================
def run_info(args: argparse.Namespace) -> int:
	loaded = rptd.rpt_format.load_template(pathlib.Path(args.template))
	template = loaded.template
	print(f"Template: {template.name} ({template.id})")
	if template.description:
		print(f"Description: {template.description}")
	print(f"Type: {template.report_type}")
	print(f"Page: {template.page_width:g} x {template.page_height:g} mm ({template.page_format})")
	print(f"Items: {template.items_per_row} x {template.items_per_column} of {template.item_width:g} x {template.item_height:g} mm")
	for key in ("author", "version", "createdAt", "updatedAt", "exportedAt"):
		if key in loaded.metadata:
			print(f"{key}: {loaded.metadata[key]}")
	if loaded.schema is not None:
		print(f"Schema: {loaded.schema.name} ({len(loaded.schema.fields)} fields)")
	print(f"Elements: {len(template.elements)}")
	for element in template.sorted_elements():
		print(
			f"  {element.id}\t{element.type}\t"
			f"x={element.x:g} y={element.y:g} w={element.width:g} h={element.height:g} z={element.z_index}"
		)
		for warning in rptd.model.check_element_properties(element):
			print(f"    warning: {warning}")
	return 0


#============================================
def run_validate(args: argparse.Namespace) -> int:
	loaded = rptd.rpt_format.load_template(pathlib.Path(args.template))
	if loaded.schema is None:
		print("Template has no data schema; nothing to validate.")
		return 0
	with open(args.records, "r", encoding="utf-8") as handle:
		records = json.load(handle)
	if isinstance(records, dict):
		records = [records]
	if not isinstance(records, list):
		print("Error: records file must hold a JSON object or array", file=sys.stderr)
		return 2

	bindings = rptd.schema.check_template_bindings(loaded.template, loaded.schema)
	for warning in bindings.warnings:
		print(f"Warning: {warning}")

	result = rptd.schema.validate_records(loaded.schema, records)
	if result.is_valid:
		print(f"Valid: {len(records)} records")
		return 0
	print(f"Invalid: {result.error_message}")
	return 1


#============================================
def run_proof(args: argparse.Namespace) -> int:
	loaded = rptd.rpt_format.load_template(pathlib.Path(args.template))
	rptd.proof.write_proof_pdf(loaded.template, pathlib.Path(args.output_path), verbose=True)
	if args.thumbnail_path:
		rptd.proof.write_thumbnail(
			loaded.template,
			pathlib.Path(args.thumbnail_path),
			args.scale,
			verbose=True,
		)
	return 0


#============================================
def run_list(args: argparse.Namespace) -> int:
	infos = rptd.rpt_format.list_templates(pathlib.Path(args.directory))
	print(f"Templates found: {len(infos)}")
	for info in infos:
		updated = info.updated_at.isoformat() if info.updated_at else "-"
		print(f"  {info.name}\t{updated}\t{info.file_path}")
	return 0


COMMANDS = {
	"info": run_info,
	"validate": run_validate,
	"proof": run_proof,
	"list": run_list,
}


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Main entry point.

	Returns:
		Process exit status.
	"""
	args = parse_args(argv)
	try:
		return COMMANDS[args.command](args)
	except (FormatError, OSError, json.JSONDecodeError) as error:
		print(f"Error: {error}", file=sys.stderr)
		return 2


if __name__ == "__main__":
	sys.exit(main())
