"""
Shared configuration and constants.
"""

import dataclasses


RPT_FORMAT = "rpt"
RPT_VERSION = "1.0"
SUPPORTED_VERSIONS = ("1.0",)
RPT_SUFFIX = ".rpt"
DEFAULT_AUTHOR = "Report Designer"

SNAP_THRESHOLD_MM = 2.0
PUSH_GAP_MM = 1.0
PUSH_MAX_PASSES = 20
HISTORY_MAX_SIZE = 50

MIN_ELEMENT_SIZE_MM = 5.0
HANDLE_SIZE_PX = 8.0
EDGE_HANDLE_FACTOR = 3.0

PLACEMENT_STEP_MM = 5.0
PLACEMENT_MAX_ATTEMPTS = 50

DEFAULT_SCALE = 3.0
MIN_SCALE = 1.0
MAX_SCALE = 6.0
ZOOM_STEP = 0.5
# fit_scale ignores changes smaller than this
SCALE_EPSILON = 0.1

DEFAULT_ELEMENT_WIDTH = 20.0
DEFAULT_ELEMENT_HEIGHT = 10.0

DEFAULT_PAGE_FORMAT = "a4Portrait"
DEFAULT_REPORT_TYPE = "label"
REPORT_TYPES = ("label", "document", "list")

# (width, height, grid override or None)
PAGE_FORMATS = {
	"a4Portrait": (210.0, 297.0, None),
	"a4Landscape": (297.0, 210.0, None),
	"letter": (216.0, 279.0, None),
	"thermal58mm": (58.0, 40.0, (1, 1)),
	"thermal80mm": (80.0, 40.0, (1, 1)),
	"custom": None,
}

PROOF_FONT = "Helvetica"
PROOF_FONT_SIZE = 6.0
PROOF_LINE_WIDTH = 0.3
THUMBNAIL_BACKGROUND = "#FFFFFF"
THUMBNAIL_OUTLINE = "#1565C0"
THUMBNAIL_GRID = "#BDBDBD"


@dataclasses.dataclass
class InteractionSettings:
	snap_threshold: float
	push_gap: float
	push_max_passes: int
	history_max_size: int
	min_element_size: float
	handle_size_px: float
	placement_step: float
	placement_max_attempts: int
	default_scale: float


#============================================
def default_settings() -> InteractionSettings:
	"""
	Build interaction settings from the module defaults.

	Returns:
		InteractionSettings.
	"""
	return InteractionSettings(
		snap_threshold=SNAP_THRESHOLD_MM,
		push_gap=PUSH_GAP_MM,
		push_max_passes=PUSH_MAX_PASSES,
		history_max_size=HISTORY_MAX_SIZE,
		min_element_size=MIN_ELEMENT_SIZE_MM,
		handle_size_px=HANDLE_SIZE_PX,
		placement_step=PLACEMENT_STEP_MM,
		placement_max_attempts=PLACEMENT_MAX_ATTEMPTS,
		default_scale=DEFAULT_SCALE,
	)
