"""Color & style helpers.

Decisions:
- Truecolor preferred; falls back to 256-color cube if unsupported.
- Disables automatically when not a TTY unless FORCE_COLOR=1.
- Honors NO_COLOR for complete disable.
- Supports palette overrides via environment or project .env file
  (SUPERCHARGED_PRIMARY / _PENDING / _DONE / _BONUS).
"""
from __future__ import annotations
import os, sys

from .config import ENV_PREFIX, env_value

_FORCE = os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}
_NO_COLOR = os.environ.get("NO_COLOR") is not None
_ENABLE = (_FORCE or sys.stdout.isatty()) and not _NO_COLOR
_COLORTERM = os.environ.get("COLORTERM", "").lower()
_USE_TRUECOLOR = _ENABLE and any(tok in _COLORTERM for tok in ("truecolor", "24bit"))

def _code(part: str) -> str:
    """Generate ANSI escape code for a given style part."""
    return f"\033[{part}m" if _ENABLE else ''

def _hex_to_rgb(hex_code: str) -> tuple[int,int,int]:
    """Convert a hex color code to an RGB tuple."""
    h = hex_code.lstrip('#')
    return int(h[0:2],16), int(h[2:4],16), int(h[4:6],16)

def _fg_truecolor(r: int, g: int, b: int) -> str:
    return f"\033[38;2;{r};{g};{b}m"

def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    r6, g6, b6 = to_6(r), to_6(g), to_6(b)
    idx = 16 + 36 * r6 + 6 * g6 + b6
    return f"\033[38;5;{idx}m"

def _from_hex(hex_code: str) -> str:
    """Convert a hex color code to an ANSI escape sequence."""
    if not _ENABLE:
        return ''
    r, g, b = _hex_to_rgb(hex_code)
    if _USE_TRUECOLOR:
        return _fg_truecolor(r, g, b)
    return _fg_256(r, g, b)

def _valid_hex(value: str | None) -> bool:
    h = (value or '').lstrip('#')
    return len(h) == 6 and all(c in '0123456789abcdefABCDEF' for c in h)

def _palette(name: str, default: str) -> str:
    value = env_value(ENV_PREFIX + name)
    return '#' + value.lstrip('#') if value and _valid_hex(value) else default

RESET = _code('0')
BOLD = _code('1')
DIM = _code('2')
UNDERLINE = _code('4')

HEX_PRIMARY_DEFAULT = '#0EA5E9'  # sky
HEX_PENDING_DEFAULT = '#E2E8F0'
HEX_DONE_DEFAULT = '#2DD4BF'     # teal
HEX_BONUS_DEFAULT = '#FACC15'    # amber

HEX_PRIMARY = _palette('PRIMARY', HEX_PRIMARY_DEFAULT)
HEX_PENDING = _palette('PENDING', HEX_PENDING_DEFAULT)
HEX_DONE = _palette('DONE', HEX_DONE_DEFAULT)
HEX_BONUS = _palette('BONUS', HEX_BONUS_DEFAULT)

PRIMARY = _from_hex(HEX_PRIMARY)
C_PENDING = _from_hex(HEX_PENDING)
C_DONE = _from_hex(HEX_DONE)
C_BONUS = _from_hex(HEX_BONUS)

# bonus countdown levels
LEVEL_COLOR = {
    'green': _from_hex('#22C55E'),
    'yellow': _from_hex('#EAB308'),
    'red': _from_hex('#EF4444'),
}

HEADER_COLOR = PRIMARY
ID_COLOR = PRIMARY + BOLD
EMPTY_COLOR = DIM + PRIMARY
META_COLOR = DIM

def color(text: str, *styles: str) -> str:
    """Apply ANSI styles to a given text."""
    if not _ENABLE:
        return text
    return ''.join(styles) + text + RESET

__all__ = [
    'color','RESET','BOLD','DIM','UNDERLINE','HEADER_COLOR','ID_COLOR','EMPTY_COLOR','META_COLOR',
    'C_PENDING','C_DONE','C_BONUS','LEVEL_COLOR',
    'HEX_PRIMARY','HEX_PENDING','HEX_DONE','HEX_BONUS','_ENABLE','_USE_TRUECOLOR','_FORCE'
]
