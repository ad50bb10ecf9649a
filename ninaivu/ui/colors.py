"""Theme colors and color utilities for the UI."""


class GameColors:
    """Light teal palette shared by the game widgets."""

    BG_TOP = "#e0f7fa"
    BG_BOTTOM = "#80deea"

    PRIMARY = "#00838f"
    PRIMARY_LIGHT = "#4fb3bf"
    PRIMARY_DARK = "#005662"

    CORAL = "#ff8a65"
    AMBER = "#ffb74d"
    MINT = "#69f0ae"

    DISPLAY_BG = "#ffffff"
    FLASH = "#ffe082"
    WRONG = "#d84315"

    CARD_BG = "rgba(255, 255, 255, 0.85)"
    CARD_BORDER = "rgba(255, 255, 255, 0.6)"

    TEXT_PRIMARY = "#1a3a3a"
    TEXT_MUTED = "#78909c"

    PROGRESS_TRACK = "#e6f0f0"
    PROGRESS_FILL = "#107878"


def _rgb(color: str) -> tuple[int, int, int]:
    return int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)


def blend_hex(a: str, b: str, t: float) -> str:
    """Mix two #RRGGBB colors. t=0 gives a, t=1 gives b; bad input returns a."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        start, end = _rgb(a), _rgb(b)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    mixed = (int(s + (e - s) * t) for s, e in zip(start, end))
    return "#" + "".join(f"{channel:02X}" for channel in mixed)
