"""Errors raised while computing a tree layout."""


class LayoutError(Exception):
    """Base class for all layout failures."""


class EmptyMemberList(LayoutError):
    def __init__(self):
        super().__init__("Cannot layout tree: member list is empty")


class RootNotFound(LayoutError, LookupError):
    def __init__(self, root_id: str):
        self.root_id = root_id
        super().__init__(f"Root member '{root_id}' not found in member list")


class InvalidTreeData(LayoutError, ValueError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid tree data: {reason}")


class PlacementFailed(LayoutError):
    def __init__(self, person_id: str, reason: str):
        self.person_id = person_id
        self.reason = reason
        super().__init__(f"Failed to place member '{person_id}': {reason}")


class InfiniteLoop(LayoutError):
    def __init__(self, description: str):
        self.description = description
        super().__init__(f"Layout algorithm detected infinite loop: {description}")
