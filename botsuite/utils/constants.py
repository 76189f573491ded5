"""
botsuite/utils/constants.py

Purpose: Centralized static content

- System instruction templates per bot
- Prompt markers and placeholders
- User-facing error messages

(Prevents hardcoding across the codebase)
"""

# ============================================================
# SYSTEM INSTRUCTIONS
# ============================================================

IMAGE_BOT_INSTRUCTION = (
    "You are an image generation assistant. "
    "Return a concise caption plus the generated image."
)

REPORT_BOT_INSTRUCTION = (
    "You are a report generation assistant. Return a structured report with title, "
    "executive summary, sections, key findings, and conclusion."
)

PAPER_BOT_INSTRUCTION = (
    "You are an academic paper analysis assistant. "
    "Return objective, methods, key results, limitations, and future work."
)

DATA_BOT_INSTRUCTION = (
    "You are a data analytics assistant. Provide dataset overview, descriptive stats, "
    "patterns, and insights. {chart_instruction}"
)
DATA_CHART_INSTRUCTION = "Include output for a {chart_type} chart."
DATA_DEFAULT_CHART_INSTRUCTION = "Include a recommended chart type."

GENERIC_BOT_INSTRUCTION = "You are an assistant."

SYSTEM_INSTRUCTIONS = {
    "image": IMAGE_BOT_INSTRUCTION,
    "report": REPORT_BOT_INSTRUCTION,
    "paper": PAPER_BOT_INSTRUCTION,
    "data": DATA_BOT_INSTRUCTION,
}

# Bots that ask the API for image output
IMAGE_OUTPUT_BOTS = {"image"}

# ============================================================
# PROMPT PARTS
# ============================================================

FILE_CONTENT_MARKER = "\n\n[File Content]\n"
NO_INPUT_PLACEHOLDER = "No input provided."
TRUNCATION_MARKER = "\n\n[Truncated {omitted} chars]"
CSV_PREVIEW_HEADER = "CSV preview (first rows):\n"
XLSX_PREVIEW_HEADER = "XLSX preview (CSV):\n"

# ============================================================
# ERROR MESSAGES
# ============================================================

MSG_NOT_AUTHENTICATED = "Not authenticated"
MSG_INVALID_CREDENTIALS = "Invalid credentials"
MSG_CREDENTIALS_REQUIRED = "UID and password required"
MSG_NICKNAME_REQUIRED = "Nickname required"
MSG_USER_NOT_FOUND = "User not found"
MSG_BOT_NOT_CONFIGURED = "Bot API not configured"
MSG_BOT_REQUEST_FAILED = "Bot request failed"
MSG_MEDIA_NOT_SUPPORTED = "Audio/video files are not supported."
MSG_FILE_TOO_LARGE = "File too large"
