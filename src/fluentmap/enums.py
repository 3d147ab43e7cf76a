from enum import Enum


class Operation(Enum):
    """
    The data operations a mapped property can be excluded from.

    The query layer consults a property mapping's flags for the operation it
    is about to build before including the column.
    """

    INSERT = "insert"
    UPDATE = "update"
    SELECT = "select"
