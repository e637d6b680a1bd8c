import random
import string
from typing import Dict, List, Tuple

from models import Placed

_SYMBOLS = string.ascii_uppercase + string.ascii_lowercase + string.digits

def _color(name: str) -> str:
    rng = random.Random(name)
    r = rng.randint(40, 200)
    g = rng.randint(40, 200)
    b = rng.randint(40, 200)
    return f"rgb({r},{g},{b})"

def _piece_symbol(k: int) -> str:
    return _SYMBOLS[k % len(_SYMBOLS)]

def render_ascii(placed: List[Placed], W: int, H: int) -> List[str]:
    """One text row per board row; '.' marks an uncovered cell."""
    grid = [["."] * W for _ in range(H)]
    for k, p in enumerate(placed):
        sym = _piece_symbol(k)
        for x, y in p.board_cells():
            grid[y][x] = sym
    return ["".join(row) for row in grid]

def render_result(placed: List[Placed], W: int, H: int) -> Tuple[str, str]:
    palette: Dict[str, str] = {}
    for p in placed:
        name = f"shape {p.shape_id}"
        palette.setdefault(name, _color(name))

    scale = 24
    svg_w = W * scale + 2
    svg_h = H * scale + 2

    rects = []
    for k, p in enumerate(placed):
        fill = palette[f"shape {p.shape_id}"]
        cells = p.board_cells()
        for x, y in cells:
            rects.append(
                f'<rect x="{x * scale + 1}" y="{y * scale + 1}" width="{scale}" height="{scale}" '
                f'fill="{fill}" stroke="black" stroke-width="1"/>'
            )
        lx, ly = cells[0]
        rects.append(
            f'<text x="{lx * scale + 5}" y="{ly * scale + 17}" font-size="12" fill="black">{_piece_symbol(k)}</text>'
        )
    grid = f'<rect x="1" y="1" width="{svg_w-2}" height="{svg_h-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{grid}{"".join(rects)}</svg>'
    )

    legend = "".join(f"<li><span class='swatch' style='background:{c}'></span>{n}</li>" for n, c in palette.items())
    return svg, legend
