"""ScreenFlow I/O module -- dataset readers and artifact writers."""
from screenflow.io.readers import load_labels, read_dataset
from screenflow.io.writers import write_audit_bundle, write_audit_workbook, write_table

__all__ = [
    "load_labels",
    "read_dataset",
    "write_audit_bundle",
    "write_audit_workbook",
    "write_table",
]
