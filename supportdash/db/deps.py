from fastapi import Request


def get_db(request: Request):
    """Yields a session, or None when no DATABASE_URL is configured."""
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        yield None
        return

    db = session_factory()
    try:
        yield db
    finally:
        db.close()
