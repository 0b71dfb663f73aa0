from .numbering import KeyedLocks, current_counter, format_program_number, wants_auto_number

__all__ = ["KeyedLocks", "current_counter", "format_program_number", "wants_auto_number"]
