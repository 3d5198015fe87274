"""Centralized constants for smoothkit."""

# Host requests
CMD_GET_APP_PATHS = "get_app_paths"
CMD_TOOL_STATUS = "tool_status"
CMD_CHECK_ENVIRONMENT = "check_environment"
CMD_INSTALL_TOOL = "install_tool"
CMD_VALIDATE_TOOLS = "validate_tools"
CMD_SMOOTH_VIDEO = "smooth_video"
CMD_REENCODE_ONLY = "reencode_only"

# Host events
EVENT_PROGRESS = "pipeline_progress"
EVENT_LOG = "pipeline_log"
EVENT_STAGE = "pipeline_stage"
EVENT_DONE = "pipeline_done"

# Order matters: subscriptions are acquired in this order and released in reverse
PIPELINE_EVENTS = (EVENT_PROGRESS, EVENT_LOG, EVENT_STAGE, EVENT_DONE)

# install_tool lays tools out as bin/<tool>/<version>
TOOL_FORMAT_VERSION = "v1"

# Settings
SETTINGS_ORGANIZATION = "SmoothKit"
SETTINGS_APPLICATION = "SmoothKit"
LAST_FRAMES_OUT_DIR_KEY = "last_frames_out_dir"

# User-facing text
MSG_PICK_FRAMES_DIR = "Pick a frames_out folder first."
MSG_PICK_INPUT = "Choose an input video first."
MSG_PICK_OUTPUT = "Choose an output video first."
MSG_DONE = "Done."
MSG_FAILED = "Failed."
MSG_STARTING = "Starting…"
MSG_JOB_BUSY = "A job is already running."
MSG_NO_LIVE_PROGRESS = "Live progress is unavailable for this session"

# Supported Formats
INPUT_VIDEO_EXTENSIONS = ("mp4", "mov", "mkv", "avi", "webm")
OUTPUT_VIDEO_EXTENSIONS = ("mp4", "mov", "mkv")
DEFAULT_OUTPUT_EXTENSION = "mp4"

# Environment variables
ENV_HOST = "SMOOTHKIT_HOST"
ENV_PREVIEW = "SMOOTHKIT_PREVIEW"
ENV_SETTINGS_PATH = "SMOOTHKIT_SETTINGS_PATH"
ENV_LOG_LEVEL = "SMOOTHKIT_LOG_LEVEL"
ENV_LOG_PATH = "SMOOTHKIT_LOG_PATH"

TRUTHY_VALUES = {"1", "true", "yes", "on"}
