import uuid


class IdentityGenerator:
    """Random UUID4 names; unique across restarts without any coordination."""

    def new_id(self) -> str:
        return str(uuid.uuid4())
