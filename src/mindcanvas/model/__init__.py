"""
The MODEL layer contains pure data structures and business logic.
It has NO knowledge of the GUI (Qt) or the rendering (QPainter).
It deals with the node tree, layout geometry, the viewport and I/O.
"""
