"""Interactive mind map editor: radial layout, pan/zoom canvas and HDF5 store."""
