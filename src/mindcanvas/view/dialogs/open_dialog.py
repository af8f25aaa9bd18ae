"""
Modal Dialog listing the mind maps of the local store
"""
from typing import List, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QLabel, QDialogButtonBox, QTableWidget, QTableWidgetItem,
    QAbstractItemView, QHeaderView
)

from mindcanvas.model.io import MindMapSummary


class OpenMindMapDialog(QDialog):
    def __init__(self, summaries: List[MindMapSummary], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Open Mind Map")
        self.resize(560, 380)
        self.summaries = summaries

        layout = QVBoxLayout(self)

        if not summaries:
            layout.addWidget(QLabel("No saved mind maps yet."))

        self.table = QTableWidget(len(summaries), 3)
        self.table.setHorizontalHeaderLabels(["Topic", "Created", "Nodes"])
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)

        for row, summary in enumerate(summaries):
            created = summary.created
            date_text = created.strftime("%Y-%m-%d %H:%M") if created else summary.created_at
            topic_item = QTableWidgetItem(summary.topic)
            topic_item.setData(Qt.ItemDataRole.UserRole, summary.id)
            self.table.setItem(row, 0, topic_item)
            self.table.setItem(row, 1, QTableWidgetItem(date_text))
            count_item = QTableWidgetItem(str(summary.node_count))
            count_item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
            self.table.setItem(row, 2, count_item)

        if summaries:
            self.table.selectRow(0)
        self.table.doubleClicked.connect(self.accept)
        layout.addWidget(self.table)

        # Standard Buttons
        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Open | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        buttons.button(QDialogButtonBox.StandardButton.Open).setEnabled(bool(summaries))
        layout.addWidget(buttons)

    def selected_id(self) -> Optional[str]:
        row = self.table.currentRow()
        if row < 0 or row >= len(self.summaries):
            return None
        return self.summaries[row].id
