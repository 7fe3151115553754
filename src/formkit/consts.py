"""Constants for formkit"""

# ==================== File Paths ====================
DATABASE_PATH = "data/formkit.db"
LOG_FILE = "data/formkit.log"

# ==================== Logging ====================
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(threadName)s] %(name)s - %(message)s"
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB
LOG_BACKUP_COUNT = 10

# ==================== Option Resolution ====================
DEFAULT_OPTIONS_LIMIT = 50
DEFAULT_RELATIONSHIP_LIMIT = 50
DEFAULT_TITLE_ATTRIBUTE = "name"
RESOLUTION_MAX_WORKERS = 4

# ==================== Timeouts (seconds) ====================
TIMEOUT_OPTION_RESOLUTION = 5.0  # relationship queries and computed options

# ==================== Debounce (milliseconds) ====================
DEFAULT_SEARCH_DEBOUNCE = 1000
DEFAULT_LIVE_DEBOUNCE = 500

# ==================== Database Pool ====================
DB_MAX_CONNECTIONS = 8
DB_STALE_TIMEOUT = 300
DB_PRAGMAS = {
    "journal_mode": "wal",
    "foreign_keys": 1,
}

# ==================== Dependency Inference ====================
# Matches get("field") / get('field') with a plain literal argument.
GET_CALL_PATTERN = r"""(?<![\w.])get\(\s*['"]([A-Za-z0-9_.]+)['"]\s*\)"""

# ==================== Validation ====================
DEFAULT_TEXT_MAX_LENGTH = 255
DEFAULT_TEXTAREA_MAX_LENGTH = 1000
COLOR_PATTERNS = {
    "hex": r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$",
    "rgb": r"^rgba?\(\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3}\s*(?:,\s*(?:0|1|0?\.\d+)\s*)?\)$",
    "hsl": r"^hsla?\(\s*\d{1,3}\s*,\s*\d{1,3}%\s*,\s*\d{1,3}%\s*(?:,\s*(?:0|1|0?\.\d+)\s*)?\)$",
}

WILDCARD_MIMES = {
    "image/*": ["jpg", "jpeg", "png", "gif", "svg", "webp"],
    "video/*": ["mp4", "avi", "mov", "wmv"],
    "audio/*": ["mp3", "wav", "ogg"],
}

MIME_EXTENSIONS = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "text/plain": "txt",
}

# ==================== Editors and pickers ====================
MARKDOWN_TOOLBAR_BUTTONS = [
    ["bold", "italic", "strike", "link"],
    ["heading"],
    ["blockquote", "codeBlock", "bulletList", "orderedList"],
    ["table", "attachFiles"],
    ["undo", "redo"],
]
ATTACHMENT_FILE_TYPES = ["image/png", "image/jpeg", "image/gif", "image/webp"]
ATTACHMENT_MAX_SIZE = 12288  # KB

DEFAULT_ICONS = [
    "home", "user", "users", "settings", "search", "heart", "star",
    "mail", "phone", "message-square", "bell", "calendar", "clock",
    "map-pin", "tag", "folder", "file", "image", "video", "music",
    "download", "upload", "trash", "edit", "check", "x", "plus", "minus",
    "chevron-right", "chevron-left", "chevron-up", "chevron-down",
    "arrow-right", "arrow-left", "arrow-up", "arrow-down",
    "external-link", "link", "copy", "share", "bookmark", "flag",
    "shield", "lock", "unlock", "eye", "eye-off", "help-circle",
    "info", "alert-circle", "alert-triangle", "check-circle", "x-circle",
    "sun", "moon", "cloud", "zap", "droplet", "flame",
    "shopping-cart", "shopping-bag", "credit-card", "dollar-sign",
    "briefcase", "layers", "grid", "list", "menu", "more-horizontal",
]
