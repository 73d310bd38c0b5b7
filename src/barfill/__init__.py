"""barfill - Fill closed boundaries with regular grids of structural bars.

barfill captures a closed polyline drawn in a host CAD document, sweeps
parallel scanlines across it at a configured spacing, and turns each pair
of boundary crossings into a bar. Bars are appended to the host document in
a single transaction and summarized into a report grouped by orientation
and length.

Example:
    $ barfill fill slab.dxf --mode both --spacing-h 150 --spacing-v 200

This will create slab_bars.json next to the input with the grouped bar
schedule for the boundary found in slab.dxf.
"""

__version__ = "0.1.0"
__author__ = "barfill contributors"

__all__ = ["__author__", "__version__"]
