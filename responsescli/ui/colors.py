# responsescli/ui/colors.py
"""
ResponsesCLI — Terminal Color Roles
ANSI color codes for the answer stream and the side panels.
"""

# ═══════════════════════════════════════════════════════════════
# PALETTE
# ═══════════════════════════════════════════════════════════════

NEON_PURPLE = "\033[38;5;165m"     # Prompt echo / borders
BRIGHT_MAGENTA = "\033[38;5;201m"  # Model names
ELECTRIC_CYAN = "\033[38;5;51m"    # Headings / links
DEEP_CYAN = "\033[38;5;39m"        # Web search panel
AQUA = "\033[38;5;122m"            # File search panel
LIGHT_PURPLE = "\033[38;5;141m"    # Reasoning panel
MID_GRAY = "\033[38;5;250m"        # Muted labels
GLITCH_RED = "\033[38;5;196m"      # Errors
GLITCH_GREEN = "\033[38;5;46m"     # Success
NEON_YELLOW = "\033[38;5;226m"     # Warnings

BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"

# ═══════════════════════════════════════════════════════════════
# SEMANTIC COLOR ROLES
# ═══════════════════════════════════════════════════════════════

PROMPT_FG = f"{BOLD}{NEON_PURPLE}"
ACCENT_FG = ELECTRIC_CYAN
MUTED_FG = MID_GRAY
ERROR_FG = GLITCH_RED
SUCCESS_FG = GLITCH_GREEN
WARNING_FG = NEON_YELLOW

FILE_SEARCH_FG = AQUA
WEB_SEARCH_FG = DEEP_CYAN
REASONING_FG = LIGHT_PURPLE


def colorize(text: str, color: str, style: str = "") -> str:
    """Apply color and optional style to text"""
    return f"{style}{color}{text}{RESET}"
