import enum


class LifecycleState(str, enum.Enum):
    """
    Lifecycle of catalog entities (KPIs and company values).

    ACTIVE -> ARCHIVED

    Archived rows stay in place so templates and historical results keep
    their references.
    """
    ACTIVE = "active"
    ARCHIVED = "archived"
