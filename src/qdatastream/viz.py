from __future__ import annotations
from typing import Iterable, Optional

from .models.record import Record


def plot_vertices(vertices: Iterable[Record], *, title: Optional[str] = None, show: bool = True):
    """Top-down scatter of vertex X/Y for sanity-checking a vertices lump."""
    import matplotlib.pyplot as plt
    xs, ys = [], []
    for v in vertices:
        xs.append(v["point"][0])
        ys.append(v["point"][1])
    fig = plt.figure()
    plt.scatter(xs, ys, s=2)
    plt.xlabel("X (units)")
    plt.ylabel("Y (units)")
    plt.title(title or "BSP vertices (top-down)")
    plt.gca().set_aspect("equal", adjustable="datalim")
    if show:
        plt.show()
    return fig
