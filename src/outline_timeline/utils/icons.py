"""
Project icon detection.

A project header may open with a single emoji grapheme ("## 🚀 Launch").
Python's ``re`` has no Unicode property classes, so the leading character is
checked against the Extended_Pictographic ranges of Unicode's emoji data
(plus regional indicators and skin-tone modifiers), and a grapheme is grown
over variation selectors, skin-tone modifiers, keycaps, flag pairs and ZWJ
joins.
"""

from typing import Optional, Tuple

DEFAULT_ICON = "📁"

_VARIATION_SELECTORS = {"\ufe0e", "\ufe0f"}
_ZWJ = "\u200d"
_KEYCAP = "\u20e3"

# Extended_Pictographic, from emoji-data.txt.
_PICTOGRAPHIC_RANGES = (
    (0x00A9, 0x00A9), (0x00AE, 0x00AE), (0x203C, 0x203C), (0x2049, 0x2049),
    (0x2122, 0x2122), (0x2139, 0x2139), (0x2194, 0x2199), (0x21A9, 0x21AA),
    (0x231A, 0x231B), (0x2328, 0x2328), (0x2388, 0x2388), (0x23CF, 0x23CF),
    (0x23E9, 0x23F3), (0x23F8, 0x23FA), (0x24C2, 0x24C2), (0x25AA, 0x25AB),
    (0x25B6, 0x25B6), (0x25C0, 0x25C0), (0x25FB, 0x25FE), (0x2600, 0x2605),
    (0x2607, 0x2612), (0x2614, 0x2685), (0x2690, 0x2705), (0x2708, 0x2712),
    (0x2714, 0x2714), (0x2716, 0x2716), (0x271D, 0x271D), (0x2721, 0x2721),
    (0x2728, 0x2728), (0x2733, 0x2734), (0x2744, 0x2744), (0x2747, 0x2747),
    (0x274C, 0x274C), (0x274E, 0x274E), (0x2753, 0x2755), (0x2757, 0x2757),
    (0x2763, 0x2767), (0x2795, 0x2797), (0x27A1, 0x27A1), (0x27B0, 0x27B0),
    (0x27BF, 0x27BF), (0x2934, 0x2935), (0x2B05, 0x2B07), (0x2B1B, 0x2B1C),
    (0x2B50, 0x2B50), (0x2B55, 0x2B55), (0x3030, 0x3030), (0x303D, 0x303D),
    (0x3297, 0x3297), (0x3299, 0x3299),
    (0x1F000, 0x1F0FF), (0x1F10D, 0x1F10F), (0x1F12F, 0x1F12F),
    (0x1F16C, 0x1F171), (0x1F17E, 0x1F17F), (0x1F18E, 0x1F18E),
    (0x1F191, 0x1F19A), (0x1F1AD, 0x1F1E5), (0x1F201, 0x1F20F),
    (0x1F21A, 0x1F21A), (0x1F22F, 0x1F22F), (0x1F232, 0x1F23A),
    (0x1F23C, 0x1F23F), (0x1F249, 0x1F3FA), (0x1F400, 0x1F53D),
    (0x1F546, 0x1F64F), (0x1F680, 0x1F6FF), (0x1F774, 0x1F77F),
    (0x1F7D5, 0x1F7FF), (0x1F80C, 0x1F80F), (0x1F848, 0x1F84F),
    (0x1F85A, 0x1F85F), (0x1F888, 0x1F88F), (0x1F8AE, 0x1F8FF),
    (0x1F90C, 0x1F93A), (0x1F93C, 0x1F945), (0x1F947, 0x1FAFF),
    (0x1FC00, 0x1FFFD),
)


def _is_regional_indicator(char: str) -> bool:
    return 0x1F1E6 <= ord(char) <= 0x1F1FF


def _is_skin_tone(char: str) -> bool:
    return 0x1F3FB <= ord(char) <= 0x1F3FF


def _is_pictographic(char: str) -> bool:
    if _is_regional_indicator(char) or _is_skin_tone(char):
        return True
    cp = ord(char)
    return any(lo <= cp <= hi for lo, hi in _PICTOGRAPHIC_RANGES)


def _is_modifier(char: str) -> bool:
    return char in _VARIATION_SELECTORS or char == _KEYCAP or _is_skin_tone(char)


def leading_emoji(text: str) -> Optional[str]:
    """Return the emoji grapheme at the start of text, or None."""
    if not text or not _is_pictographic(text[0]):
        return None

    if _is_regional_indicator(text[0]):
        if len(text) > 1 and _is_regional_indicator(text[1]):
            return text[:2]
        return text[0]

    end = 1
    while end < len(text):
        char = text[end]
        if _is_modifier(char):
            end += 1
        elif char == _ZWJ and end + 1 < len(text) and _is_pictographic(text[end + 1]):
            end += 2
        else:
            break
    return text[:end]


def split_icon(header: str) -> Tuple[str, str]:
    """
    Split a project header into (icon, name).

    The icon is taken only when a non-empty name follows it; otherwise the
    default folder icon is used and the header is returned unchanged.
    """
    icon = leading_emoji(header)
    if icon:
        name = header[len(icon):].strip()
        if name:
            return icon, name
    return DEFAULT_ICON, header
