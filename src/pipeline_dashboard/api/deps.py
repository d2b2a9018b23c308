"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from pipeline_dashboard.adapters.publisher import PublisherAdapter, get_publisher
from pipeline_dashboard.db.session import get_session
from pipeline_dashboard.services.dispatcher import AutomationDispatcher

# Database session dependency
SessionDep = Annotated[Session, Depends(get_session)]

# Publisher used for scheduled uploads
PublisherDep = Annotated[PublisherAdapter, Depends(get_publisher)]


def get_dispatcher(session: SessionDep, publisher: PublisherDep) -> AutomationDispatcher:
    """Get an automation dispatcher bound to the request's session."""
    return AutomationDispatcher(session, publisher=publisher)


DispatcherDep = Annotated[AutomationDispatcher, Depends(get_dispatcher)]
