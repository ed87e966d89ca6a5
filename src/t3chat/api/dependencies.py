"""FastAPI dependency injection.

Long-lived collaborators live on the Application stored in
``app.state.application``; handlers reach the guard, route table,
registry and orchestrator through it rather than module globals.
"""

from typing import Annotated

from fastapi import Depends, Request

from t3chat.app import Application


def get_application(request: Request) -> Application:
    """Get the running application."""
    return request.app.state.application


# Type aliases for dependency injection
ApplicationDep = Annotated[Application, Depends(get_application)]
