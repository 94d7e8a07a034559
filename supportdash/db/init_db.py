from supportdash.db.base import Base

from supportdash.models.user import User
from supportdash.models.session_message import SessionMessage
from supportdash.models.ticket import Ticket
from supportdash.models.survey import Survey


def init_db(engine):
    Base.metadata.create_all(bind=engine)
