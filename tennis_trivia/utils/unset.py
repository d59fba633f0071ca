"""Sentinel for partial updates where None is a meaningful value."""


class UnsetType:
    """Marks a field that was not supplied (as opposed to supplied as null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = UnsetType()
