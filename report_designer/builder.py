"""
Builder session: load state machine, pointer and keyboard dispatch, edits.

A session owns exactly one template. Every completed edit is recorded in
the undo history and reported to the registered listeners.
"""

# Standard Library
import pathlib
import uuid
from collections.abc import Callable

# local repo modules
import report_designer as rptd
import report_designer.config
import report_designer.geometry
import report_designer.history
import report_designer.interaction
import report_designer.model
import report_designer.overlap
import report_designer.record_data
import report_designer.rpt_format
import report_designer.schema
import report_designer.snapping


ReportElement = rptd.model.ReportElement
ReportTemplate = rptd.model.ReportTemplate
DataSchema = rptd.schema.DataSchema
SchemaRegistry = rptd.schema.SchemaRegistry
ValidationResult = rptd.schema.ValidationResult
InteractionSettings = rptd.config.InteractionSettings
FieldInfo = rptd.record_data.FieldInfo
FormatError = rptd.rpt_format.FormatError
GuideSet = rptd.snapping.GuideSet
Viewport = rptd.geometry.Viewport

STATE_IDLE = "idle"
STATE_LOADING = "loading"
STATE_READY = "ready"
STATE_ERROR = "error"

DELETE_KEYS = ("delete", "backspace")


class BuilderStateError(RuntimeError):
	"""
	Raised when an edit is requested while the builder is not ready.
	"""


class ReportBuilder:
	"""
	Interactive template editing session.

	Args:
		template: Initial template; without one the session starts idle.
		registry: Schema registry used to resolve schemas by name.
		settings: Interaction tunables; defaults from config.
		renderer: Optional callable (element, record, scale) -> visual tree.
		sample_data: Record used to list fields when no schema is set.
	"""

	def __init__(
		self,
		template: ReportTemplate | None = None,
		registry: SchemaRegistry | None = None,
		settings: InteractionSettings | None = None,
		renderer: Callable | None = None,
		sample_data=None,
	) -> None:
		self.settings = settings or rptd.config.default_settings()
		self.registry = registry
		self.renderer = renderer
		self.sample_data = sample_data
		self.viewport = Viewport(scale=self.settings.default_scale)
		self.history = rptd.history.History(self.settings.history_max_size)
		self.template: ReportTemplate | None = None
		self.metadata: dict = {}
		self.state = STATE_IDLE
		self.last_error: Exception | None = None
		self.selected_id: str | None = None
		self.guides = GuideSet()
		self.active_guides = GuideSet()
		self.show_guides = False
		self._drag: rptd.interaction.DragSession | None = None
		self._resize: rptd.interaction.ResizeSession | None = None
		self._listeners: list[Callable[[ReportTemplate], None]] = []
		self._id_counter = 0
		if template is not None:
			self._install(template, {})

	@property
	def is_ready(self) -> bool:
		return self.state == STATE_READY

	@property
	def is_interacting(self) -> bool:
		return self._drag is not None or self._resize is not None

	def _require_ready(self) -> ReportTemplate:
		if self.state != STATE_READY or self.template is None:
			raise BuilderStateError(f"Builder is not ready (state: {self.state})")
		return self.template

	def _install(self, template: ReportTemplate, metadata: dict) -> None:
		self.template = template
		self.metadata = metadata
		self.selected_id = None
		self._end_session()
		self._id_counter = len(template.elements)
		self.history.reset(rptd.history.snapshot_template(template))
		self.last_error = None
		self.state = STATE_READY

	def new_template(self, name: str = "New template", **fields) -> ReportTemplate:
		"""
		Start a session on a blank template.

		Args:
			name: Template name.
			**fields: Extra ReportTemplate fields.

		Returns:
			The new template.
		"""
		template = ReportTemplate(id=str(uuid.uuid4()), name=name, **fields)
		self._install(template, {})
		self._notify()
		return template

	def load_json(self, text: str) -> ReportTemplate:
		"""
		Load a template from .rpt JSON text.

		On failure the current template stays installed and the error is
		re-raised.

		Args:
			text: JSON content.

		Returns:
			The loaded template.
		"""
		self.state = STATE_LOADING
		self._end_session()
		try:
			loaded = rptd.rpt_format.from_json(text, self.registry)
			self._install_loaded(loaded)
		except FormatError as error:
			self.last_error = error
			raise
		finally:
			self._leave_loading()
		return self.template

	def load_file(self, path: pathlib.Path) -> ReportTemplate:
		"""
		Load a template from an .rpt file.

		Args:
			path: File path.

		Returns:
			The loaded template.
		"""
		self.state = STATE_LOADING
		self._end_session()
		try:
			loaded = rptd.rpt_format.load_template(pathlib.Path(path), self.registry)
			self._install_loaded(loaded)
		except (FormatError, OSError) as error:
			self.last_error = error
			raise
		finally:
			self._leave_loading()
		return self.template

	def _install_loaded(self, loaded: rptd.rpt_format.LoadedTemplate) -> None:
		template = loaded.template
		if template.data_schema is None and loaded.schema is not None:
			template.data_schema = loaded.schema
			template.data_schema_name = loaded.schema.name
		self._install(template, loaded.metadata)
		self._notify()

	def _leave_loading(self) -> None:
		# a load that raised anything keeps the previous template
		if self.state != STATE_LOADING:
			return
		if self.template is not None:
			self.state = STATE_READY
		else:
			self.state = STATE_ERROR

	def save_json(self, metadata: dict | None = None) -> str:
		if self.template is None:
			raise BuilderStateError("No template loaded")
		return rptd.rpt_format.to_json(self.template, self.template.data_schema, metadata)

	def save_file(self, path: pathlib.Path, metadata: dict | None = None) -> None:
		if self.template is None:
			raise BuilderStateError("No template loaded")
		rptd.rpt_format.save_template(pathlib.Path(path), self.template, self.template.data_schema, metadata)

	def add_listener(self, callback: Callable[[ReportTemplate], None]) -> None:
		self._listeners.append(callback)

	def remove_listener(self, callback: Callable[[ReportTemplate], None]) -> None:
		if callback in self._listeners:
			self._listeners.remove(callback)

	def _notify(self) -> None:
		for callback in list(self._listeners):
			callback(self.template)

	def _commit(self) -> None:
		self.history.push(rptd.history.snapshot_template(self.template))
		self._notify()

	@property
	def can_undo(self) -> bool:
		return self.history.can_undo

	@property
	def can_redo(self) -> bool:
		return self.history.can_redo

	def undo(self) -> bool:
		self._require_ready()
		snapshot = self.history.undo()
		if snapshot is None:
			return False
		self._restore(snapshot)
		return True

	def redo(self) -> bool:
		self._require_ready()
		snapshot = self.history.redo()
		if snapshot is None:
			return False
		self._restore(snapshot)
		return True

	def _restore(self, snapshot: str) -> None:
		self.template = rptd.history.restore_template(snapshot)
		self.selected_id = None
		self._end_session()
		self._notify()

	@property
	def selected_element(self) -> ReportElement | None:
		if self.template is None or self.selected_id is None:
			return None
		return self.template.get_element(self.selected_id)

	def select(self, element_id: str | None) -> bool:
		template = self._require_ready()
		if element_id is not None and not template.has_element(element_id):
			return False
		self.selected_id = element_id
		return True

	def _start_guides(self, element_id: str) -> None:
		self.guides = rptd.snapping.build_guides(self.template, element_id)
		self.active_guides = GuideSet()
		self.show_guides = True

	def _refresh_active_guides(self, element: ReportElement) -> None:
		self.active_guides = rptd.snapping.active_guides(
			self.guides,
			element.x,
			element.y,
			element.width,
			element.height,
			self.settings.snap_threshold,
		)

	def _end_session(self) -> None:
		self._drag = None
		self._resize = None
		self.guides = GuideSet()
		self.active_guides = GuideSet()
		self.show_guides = False

	def pointer_down(self, x_px: float, y_px: float) -> bool:
		"""
		Start a resize or drag session under the pointer.

		A resize handle of the selected element wins over hit-testing. A
		miss clears the selection.

		Args:
			x_px: Pointer x in canvas pixels.
			y_px: Pointer y in canvas pixels.

		Returns:
			True if a session started.
		"""
		if not self.is_ready:
			return False
		x_mm, y_mm = self.viewport.point_to_mm(x_px, y_px)

		selected = self.selected_element
		if selected is not None:
			handle = rptd.interaction.handle_at(
				selected, x_mm, y_mm, self.viewport.scale, self.settings.handle_size_px,
			)
			if handle is not None:
				self._resize = rptd.interaction.ResizeSession(selected.id, handle, x_mm, y_mm)
				self._start_guides(selected.id)
				return True

		hit = rptd.interaction.hit_test(self.template, x_mm, y_mm)
		if hit is None:
			self.selected_id = None
			return False
		self.selected_id = hit.id
		self._drag = rptd.interaction.DragSession(hit.id, x_mm, y_mm)
		self._start_guides(hit.id)
		return True

	def pointer_move(self, x_px: float, y_px: float) -> bool:
		if not self.is_ready or not self.is_interacting:
			return False
		x_mm, y_mm = self.viewport.point_to_mm(x_px, y_px)
		if self._resize is not None:
			element = self._resize.move(self.template, x_mm, y_mm, self.settings.min_element_size)
		else:
			element = self._drag.move(self.template, x_mm, y_mm)
		if element is None:
			self._end_session()
			return False
		self._refresh_active_guides(element)
		return True

	def pointer_up(self) -> bool:
		"""
		Finish the current session.

		A drag snaps to the nearest active guide, then pushes overlapping
		elements away. Both kinds of session are recorded in history.

		Returns:
			True if a session was finished.
		"""
		if not self.is_ready or not self.is_interacting:
			return False
		template = self.template
		if self._resize is not None:
			element = template.get_element(self._resize.element_id)
			if element is not None:
				rptd.geometry.clamp_element_into_page(
					element, template.page_width, template.page_height, self.settings.min_element_size,
				)
			self._end_session()
			self._commit()
			return True

		element = template.get_element(self._drag.element_id)
		if element is not None:
			self._refresh_active_guides(element)
			snapped = rptd.snapping.snap_position(
				self.active_guides,
				element.x,
				element.y,
				element.width,
				element.height,
				self.settings.snap_threshold,
			)
			element.x, element.y = rptd.geometry.clamp_position(
				snapped.x, snapped.y, element.width, element.height,
				template.page_width, template.page_height,
			)
			rptd.overlap.push_apart(
				template, element, self.settings.push_gap, self.settings.push_max_passes,
			)
		self._end_session()
		self._commit()
		return True

	def handle_key(self, key: str, ctrl: bool = False, shift: bool = False) -> bool:
		"""
		Dispatch a keyboard shortcut.

		Delete/Backspace delete the selection, Ctrl+Z undoes, Ctrl+Y and
		Ctrl+Shift+Z redo.

		Args:
			key: Key name, for example "Delete" or "z".
			ctrl: Control (or Command) held.
			shift: Shift held.

		Returns:
			True if the key was handled.
		"""
		if not self.is_ready:
			return False
		name = key.lower()
		if name in DELETE_KEYS:
			if self.selected_id is None:
				return False
			self.delete_selected()
			return True
		if not ctrl:
			return False
		if name == "z" and shift:
			self.redo()
			return True
		if name == "z":
			self.undo()
			return True
		if name == "y":
			self.redo()
			return True
		return False

	def _next_element_id(self, prefix: str) -> str:
		template = self.template
		while True:
			self._id_counter += 1
			candidate = f"{prefix}_{self._id_counter}"
			if not template.has_element(candidate):
				return candidate

	def _place(self, element: ReportElement) -> ReportElement:
		template = self.template
		rptd.geometry.clamp_element_into_page(
			element, template.page_width, template.page_height, self.settings.min_element_size,
		)
		element.x, element.y = rptd.overlap.find_free_position(
			template,
			element,
			self.settings.placement_step,
			self.settings.placement_max_attempts,
		)
		template.add_element(element)
		self.selected_id = element.id
		self._commit()
		return element

	def add_element(
		self,
		element_type: str,
		x: float,
		y: float,
		width: float | None = None,
		height: float | None = None,
		properties: dict | None = None,
	) -> ReportElement:
		"""
		Create an element at a drop point in millimeters.

		The drop point is moved to a free spot when the element would
		overlap another one.

		Args:
			element_type: One of ELEMENT_TYPES.
			x: Drop x.
			y: Drop y.
			width: Optional width.
			height: Optional height.
			properties: Optional property overrides merged over the defaults.

		Returns:
			The new element, selected.
		"""
		self._require_ready()
		element = ReportElement(
			id=self._next_element_id(element_type),
			type=element_type,
			x=x,
			y=y,
			width=width if width is not None else rptd.config.DEFAULT_ELEMENT_WIDTH,
			height=height if height is not None else rptd.config.DEFAULT_ELEMENT_HEIGHT,
		)
		if properties:
			element.properties.update(properties)
		return self._place(element)

	def add_field_element(self, field_name: str, x: float, y: float) -> ReportElement:
		self._require_ready()
		element = ReportElement(
			id=self._next_element_id("field"),
			type="dynamicField",
			x=x,
			y=y,
		)
		element.properties["fieldName"] = field_name
		return self._place(element)

	def delete_element(self, element_id: str) -> bool:
		template = self._require_ready()
		if not template.remove_element(element_id):
			return False
		if self.selected_id == element_id:
			self.selected_id = None
		self._commit()
		return True

	def delete_selected(self) -> bool:
		self._require_ready()
		if self.selected_id is None:
			return False
		return self.delete_element(self.selected_id)

	def update_properties(self, element_id: str, changes: dict, replace: bool = False) -> bool:
		"""
		Edit an element's property bag.

		Args:
			element_id: Element id.
			changes: Keys to set.
			replace: Replace the whole bag instead of merging.

		Returns:
			True if the element exists.
		"""
		template = self._require_ready()
		element = template.get_element(element_id)
		if element is None:
			return False
		if replace:
			element.properties = dict(changes)
		else:
			element.properties.update(changes)
		template.touch()
		self._commit()
		return True

	def update_geometry(
		self,
		element_id: str,
		x: float | None = None,
		y: float | None = None,
		width: float | None = None,
		height: float | None = None,
		rotation: float | None = None,
		z_index: int | None = None,
	) -> bool:
		template = self._require_ready()
		element = template.get_element(element_id)
		if element is None:
			return False
		if width is not None:
			element.width = width
		if height is not None:
			element.height = height
		if x is not None:
			element.x = x
		if y is not None:
			element.y = y
		if rotation is not None:
			element.rotation = rotation
		if z_index is not None:
			element.z_index = z_index
		rptd.geometry.clamp_element_into_page(
			element, template.page_width, template.page_height, self.settings.min_element_size,
		)
		template.touch()
		self._commit()
		return True

	def rename_element(self, element_id: str, new_id: str) -> bool:
		template = self._require_ready()
		if not template.rename_element(element_id, new_id):
			return False
		if self.selected_id == element_id:
			self.selected_id = new_id
		self._commit()
		return True

	def set_page_format(self, page_format: str) -> None:
		template = self._require_ready()
		template.set_page_format(page_format)
		self._commit()

	def set_item_size(self, width: float, height: float) -> None:
		template = self._require_ready()
		template.item_width = max(width, self.settings.min_element_size)
		template.item_height = max(height, self.settings.min_element_size)
		template.touch()
		self._commit()

	def set_data_schema(self, schema: DataSchema) -> None:
		template = self._require_ready()
		template.set_data_schema(schema)
		self._commit()

	def set_data_schema_by_name(self, name: str) -> bool:
		self._require_ready()
		if self.registry is None:
			return False
		schema = self.registry.get(name)
		if schema is None:
			return False
		self.set_data_schema(schema)
		return True

	def available_fields(self) -> list[FieldInfo]:
		"""
		List bindable fields from the schema, or from sample data.
		"""
		if self.template is not None and self.template.data_schema is not None:
			return [
				FieldInfo(field.name, field.display_name, field.type, field.default_value)
				for field in self.template.data_schema.fields
			]
		if self.sample_data is not None:
			return rptd.record_data.extract_fields(self.sample_data)
		return []

	def validate_records(self, records: list) -> ValidationResult:
		if self.template is None or self.template.data_schema is None:
			return ValidationResult.success()
		return rptd.schema.validate_records(self.template.data_schema, records)

	def render_element(self, element_id: str, record=None):
		"""
		Ask the external renderer to draw one element.

		Args:
			element_id: Element id.
			record: Bound record.

		Returns:
			Whatever the renderer returns.
		"""
		if self.renderer is None:
			raise RuntimeError("No renderer configured")
		if self.template is None:
			raise BuilderStateError("No template loaded")
		element = self.template.get_element(element_id)
		if element is None:
			raise KeyError(element_id)
		return self.renderer(element, record, self.viewport.scale)
