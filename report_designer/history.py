"""
Snapshot-based undo/redo history.
"""

# Standard Library
import json

# local repo modules
import report_designer as rptd
import report_designer.config
import report_designer.model
import report_designer.rpt_format


ReportTemplate = rptd.model.ReportTemplate

HISTORY_MAX_SIZE = rptd.config.HISTORY_MAX_SIZE

# ignored when comparing snapshots, so a bare timestamp bump is not an edit
VOLATILE_KEYS = ("updatedAt",)


#============================================
def snapshot_template(template: ReportTemplate) -> str:
	"""
	Serialize a template into a history snapshot.

	Args:
		template: ReportTemplate.

	Returns:
		JSON text of the template section of the .rpt format.
	"""
	data = rptd.rpt_format.template_to_dict(template)
	return json.dumps(data, sort_keys=True, ensure_ascii=False)


#============================================
def restore_template(snapshot: str) -> ReportTemplate:
	data = json.loads(snapshot)
	return rptd.rpt_format.template_from_dict(data)


#============================================
def same_state(snapshot_a: str, snapshot_b: str) -> bool:
	"""
	Compare two snapshots while ignoring volatile keys.
	"""
	if snapshot_a == snapshot_b:
		return True
	data_a = json.loads(snapshot_a)
	data_b = json.loads(snapshot_b)
	for key in VOLATILE_KEYS:
		data_a.pop(key, None)
		data_b.pop(key, None)
	return data_a == data_b


class History:
	"""
	Bounded undo stack plus a redo stack.

	The oldest undo entry is the initial state and is never undone.
	"""

	def __init__(self, max_size: int = HISTORY_MAX_SIZE) -> None:
		if max_size < 1:
			raise ValueError("History size must be at least 1")
		self.max_size = max_size
		self.undo_stack: list[str] = []
		self.redo_stack: list[str] = []

	@property
	def can_undo(self) -> bool:
		return len(self.undo_stack) > 1

	@property
	def can_redo(self) -> bool:
		return bool(self.redo_stack)

	@property
	def current(self) -> str | None:
		if not self.undo_stack:
			return None
		return self.undo_stack[-1]

	def reset(self, snapshot: str | None = None) -> None:
		self.undo_stack = []
		self.redo_stack = []
		if snapshot is not None:
			self.undo_stack.append(snapshot)

	def push(self, snapshot: str) -> bool:
		"""
		Record a new state.

		Args:
			snapshot: Snapshot text.

		Returns:
			False when the snapshot matches the current top and was dropped.
		"""
		if self.undo_stack and same_state(self.undo_stack[-1], snapshot):
			return False
		self.undo_stack.append(snapshot)
		self.redo_stack.clear()
		if len(self.undo_stack) > self.max_size:
			self.undo_stack.pop(0)
		return True

	def undo(self) -> str | None:
		"""
		Step back one state.

		Returns:
			Snapshot to restore, or None when only the initial state is left.
		"""
		if len(self.undo_stack) <= 1:
			return None
		self.redo_stack.append(self.undo_stack.pop())
		return self.undo_stack[-1]

	def redo(self) -> str | None:
		"""
		Step forward one state.

		Returns:
			Snapshot to restore, or None when there is nothing to redo.
		"""
		if not self.redo_stack:
			return None
		snapshot = self.redo_stack.pop()
		self.undo_stack.append(snapshot)
		if len(self.undo_stack) > self.max_size:
			self.undo_stack.pop(0)
		return snapshot
