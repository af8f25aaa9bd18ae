"""
Node Control Panel
Side panel with the mind map actions, the selected node and map statistics.
"""
from typing import Dict, Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QGroupBox, QFormLayout,
    QLineEdit, QListWidget
)
from PySide6.QtCore import Qt, Slot

from mindcanvas.controller.interaction import InteractionController
from mindcanvas.model.graph import NodeLevel, ROOT_ID
from mindcanvas.model.palette import PaletteColor
from mindcanvas.view.render import PALETTE_FILL


LEVEL_NAMES = {
    NodeLevel.ROOT: "Central topic",
    NodeLevel.MAIN: "Main topic",
    NodeLevel.LEAF: "Subtopic",
}


class NodePanel(QWidget):
    def __init__(self, controller: InteractionController) -> None:
        super().__init__()
        self.controller = controller
        self.state = controller.state

        layout = QVBoxLayout(self)

        # --- Controls Group ---
        grp_controls = QGroupBox("Mind Map Controls")
        controls = QVBoxLayout(grp_controls)

        self.btn_add_main = QPushButton("Add Main Topic")
        self.btn_add_main.clicked.connect(lambda: self.controller.add_main_node())
        controls.addWidget(self.btn_add_main)

        self.btn_add_sub = QPushButton("Add Subtopic")
        self.btn_add_sub.clicked.connect(lambda: self.controller.add_subtopic())
        controls.addWidget(self.btn_add_sub)

        self.btn_delete = QPushButton("Delete Selected")
        self.btn_delete.setStyleSheet("color: #b91c1c;")
        self.btn_delete.clicked.connect(self.controller.delete_selected)
        controls.addWidget(self.btn_delete)

        layout.addWidget(grp_controls)

        # --- Selected Node Group ---
        self.grp_selected = QGroupBox("Selected Node")
        selected = QVBoxLayout(self.grp_selected)

        self.lbl_level = QLabel("")
        self.lbl_level.setStyleSheet("color: gray;")
        selected.addWidget(self.lbl_level)

        self.txt_node = QLineEdit()
        self.txt_node.setPlaceholderText("Node text")
        # Live rename; empty intermediate values are ignored by the controller
        self.txt_node.textEdited.connect(self.controller.rename_selected)
        selected.addWidget(self.txt_node)

        # Palette swatches
        swatches = QHBoxLayout()
        swatches.setSpacing(4)
        self.color_buttons: Dict[PaletteColor, QPushButton] = {}
        for color in PaletteColor:
            btn = QPushButton()
            btn.setFixedSize(24, 24)
            btn.setToolTip(color.value.capitalize())
            btn.setStyleSheet(
                f"background-color: {PALETTE_FILL[color]}; border: 1px solid #e2e8f0; border-radius: 12px;"
            )
            btn.clicked.connect(lambda _checked=False, c=color: self.controller.recolor_selected(c))
            swatches.addWidget(btn)
            self.color_buttons[color] = btn
        swatches.addStretch()
        selected.addLayout(swatches)

        self.btn_agent = QPushButton("Create AI Expert")
        self.btn_agent.setMinimumHeight(32)
        self.btn_agent.clicked.connect(self.controller.create_agent_from_selected)
        selected.addWidget(self.btn_agent)

        self.lbl_children = QLabel("Subtopics:")
        selected.addWidget(self.lbl_children)
        self.lst_children = QListWidget()
        self.lst_children.setMaximumHeight(120)
        selected.addWidget(self.lst_children)

        layout.addWidget(self.grp_selected)

        # --- Stats Group ---
        grp_stats = QGroupBox("Mind Map Stats")
        form = QFormLayout(grp_stats)
        self.lbl_main_count = QLabel("0")
        self.lbl_leaf_count = QLabel("0")
        self.lbl_total_count = QLabel("0")
        for lbl in (self.lbl_main_count, self.lbl_leaf_count, self.lbl_total_count):
            lbl.setAlignment(Qt.AlignmentFlag.AlignRight)
        form.addRow("Main topics:", self.lbl_main_count)
        form.addRow("Subtopics:", self.lbl_leaf_count)
        form.addRow("Total nodes:", self.lbl_total_count)
        layout.addWidget(grp_stats)

        layout.addStretch()

        # --- Connections ---
        self.controller.selection_changed.connect(self.on_selection_changed)
        self.controller.graph_changed.connect(self.refresh)

        self.refresh()

    # --- SLOTS ---

    @Slot(object)
    def on_selection_changed(self, node_id: Optional[str]) -> None:
        self.refresh()

    @Slot()
    def refresh(self) -> None:
        """Re-read selection and statistics from the state."""
        graph = self.state.graph
        self.lbl_main_count.setText(str(graph.main_count))
        self.lbl_leaf_count.setText(str(graph.leaf_count))
        self.lbl_total_count.setText(str(graph.total_count))

        self.btn_add_sub.setEnabled(self.controller.can_add_subtopic)
        self.btn_delete.setEnabled(self.controller.can_delete)
        self.btn_agent.setEnabled(self.controller.can_create_agent)

        sel = self.state.selected_id
        node = self.state.selected_node()
        self.grp_selected.setEnabled(sel is not None)

        if sel == ROOT_ID:
            level, text = NodeLevel.ROOT, graph.topic
        elif node is not None:
            level, text = node.level, node.text
        else:
            level, text = None, ""

        self.lbl_level.setText(LEVEL_NAMES[level] if level is not None else "Nothing selected")
        # Keep the cursor where it is while the user types
        if self.txt_node.text() != text:
            self.txt_node.blockSignals(True)
            self.txt_node.setText(text)
            self.txt_node.blockSignals(False)
        self.txt_node.setEnabled(sel is not None)

        for btn in self.color_buttons.values():
            btn.setEnabled(node is not None)

        self.lst_children.clear()
        children = graph.children_of(node.id) if node is not None and node.level == NodeLevel.MAIN else []
        for child in children:
            self.lst_children.addItem(child.text)
        self.lbl_children.setVisible(bool(children))
        self.lst_children.setVisible(bool(children))
