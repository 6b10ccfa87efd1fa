import secrets

def new_id(prefix: str = "flight", nbytes: int = 9) -> str:
    """URL-safe id, also used as the map file name."""
    return f"{prefix}_{secrets.token_urlsafe(nbytes)}"
