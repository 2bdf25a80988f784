import pytest

from qdatastream.binary.reader import read_lump


def test_plot_vertices_scatter(bsp_bytes):
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    from qdatastream.viz import plot_vertices

    fig = plot_vertices(read_lump(bsp_bytes, "vertices"), show=False)
    points = fig.axes[0].collections[0].get_offsets()
    assert points.tolist() == [[1.0, 2.0], [-4.5, 0.25]]
