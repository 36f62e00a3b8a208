"""
Shared constants for docs-toc.

Marker literals written into target documents and the default ignore list
applied when scanning a docs tree.
"""

# Start marker written by users where the TOC should appear
TOC_MARK = "<!--toc-->"

# End marker template written after every injected TOC block
TOC_END_TEMPLATE = "<!--tocEnd:offset={offset}-->"

# Default exclusion rules: system and asset directories are never scanned
DEFAULT_IGNORE = [
    "**/node_modules/**",
    "**/.git/**",
    "**/dist/**",
    "**/images/**",
    "**/assets/**",
]

# Preview display width for region first/last lines
PREVIEW_WIDTH = 60

# Maximum run of consecutive blank lines kept after a rewrite
MAX_BLANK_LINES = 2

DEFAULT_BASE_DIR = "docs"
DEFAULT_OUT_FILE = "README.md"
DEFAULT_MAX_DEPTH = 3

CONFIG_FILE_NAMES = ("toc.config.yaml", "toc.config.yml")
