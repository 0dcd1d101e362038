import uuid


def new_id() -> str:
    """Globally unique string key used by every collection."""
    return str(uuid.uuid4())
