"""Dependencies for the account services.

Every factory resolves from the `AppContext` stored on ``app.state.context``
by the application factory, so request handlers share the collaborators of
the running application and tests can swap them by building their own
context.
"""

from typing import Annotated

from fastapi import Depends, Request

from src.core.context import AppContext
from src.domain.services.auth import AccountStateMachine, SessionIssuer


def get_app_context(request: Request) -> AppContext:
    """Factory that returns the running :class:`AppContext`."""
    return request.app.state.context


AppContextDep = Annotated[AppContext, Depends(get_app_context)]


def get_account_state_machine(context: AppContextDep) -> AccountStateMachine:
    """Factory that returns :class:`AccountStateMachine`."""
    return context.state_machine


def get_session_issuer(context: AppContextDep) -> SessionIssuer:
    """Factory that returns :class:`SessionIssuer`."""
    return context.session_issuer


StateMachineDep = Annotated[AccountStateMachine, Depends(get_account_state_machine)]
SessionIssuerDep = Annotated[SessionIssuer, Depends(get_session_issuer)]
