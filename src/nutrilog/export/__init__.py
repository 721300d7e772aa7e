"""Text exports of meal logs."""

from nutrilog.export.nlog import NlogRow, read_nlog, sanitize_food_name, to_nlog, write_nlog

__all__ = ["NlogRow", "read_nlog", "sanitize_food_name", "to_nlog", "write_nlog"]
