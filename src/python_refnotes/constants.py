"""
Centralized constants for the document tree vocabulary and reference rendering.

This module consolidates the element tags, attribute names, macro names and
rendering defaults used across the package. Import from here to ensure
consistency and make updates easier.
"""

# =============================================================================
# Element Tags
# =============================================================================

TAG_DOCUMENT = "document"
TAG_PARAGRAPH = "paragraph"
TAG_WORD = "word"
TAG_SPACE = "space"
TAG_NEWLINE = "newline"
TAG_FORMAT = "format"
TAG_LINK = "link"
TAG_NUMBERED_LIST = "numberedlist"
TAG_LIST_ITEM = "listitem"
TAG_MACRO = "macro"


# =============================================================================
# Attribute Names
# =============================================================================

ATTR_ID = "id"
ATTR_CLASS = "class"
ATTR_FORMAT = "format"
ATTR_ANCHOR = "anchor"
ATTR_REFERENCE = "reference"

# Macro marker attributes
ATTR_MACRO_NAME = "name"
ATTR_MACRO_CONTENT = "content"
ATTR_MACRO_INLINE = "inline"
ATTR_MACRO_STATUS = "status"


# =============================================================================
# Formats
# =============================================================================

FORMAT_BOLD = "bold"
FORMAT_ITALIC = "italic"
FORMAT_STRIKEDOUT = "strikedout"
FORMAT_UNDERLINED = "underlined"
FORMAT_SUPERSCRIPT = "superscript"
FORMAT_MONOSPACE = "monospace"


# =============================================================================
# Macro Execution
# =============================================================================

REFERENCE_MACRO_NAME = "reference"
REFERENCES_MACRO_NAME = "references"

DEFAULT_PRIORITY = 1000
ENSURER_PRIORITY = 500

# Upper bound on executions of macros added while transforming
DEFAULT_MAX_EXECUTIONS = 1000

STATUS_EXECUTED = "executed"
STATUS_FAILED = "failed"
STATUS_UNKNOWN = "unknown"

DEFAULT_CATEGORY_CONTENT = "Content"


# =============================================================================
# Reference Rendering
# =============================================================================

# Prefix for the ID of the rendered note (target of forward links)
FOOTNOTE_ID_PREFIX = "x_reference_"

# Prefix for the ID of the in-text forward link (target of back links)
FOOTNOTE_REFERENCE_ID_PREFIX = "x_reference_pre_"

FORWARD_LINK_CLASS = "footnoteRef"
BACK_LINK_CLASS = "footnoteBackRef"
LIST_ITEM_CLASS = REFERENCE_MACRO_NAME
LIST_CLASS = REFERENCES_MACRO_NAME

# Label used when a group has a single occurrence
SINGLE_OCCURRENCE_LABEL = "^"


# =============================================================================
# Configuration
# =============================================================================

CONFIG_PATH_ENV = "REFNOTES_CONFIG"
CONFIG_SECTION = "references"
