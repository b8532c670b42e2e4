"""Define the authentication collaborator interfaces.

The rest client never talks to the OAuth server itself. It consumes a
credential exchanger to trade a refresh token for a new credential, and
optionally notifies a refresh notifier so callers can persist whatever
credential is about to become active.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Union

from ..models import Credential

REFRESH_TOKEN_GRANT = "refresh_token"


class CredentialExchanger(ABC):
    """Exchange an OAuth grant for a freshly issued credential."""

    @abstractmethod
    def exchange(self, grant_type: str, params: Dict[str, Any]) -> Credential:
        """Return a new credential for the given grant.

        :param grant_type: OAuth grant type, e.g. "refresh_token".
        :param params: Grant parameters, e.g. {"refresh_token": "..."}.
        :return: Newly issued credential.
        """
        pass


class AsyncCredentialExchanger(ABC):
    """Async twin of :class:`CredentialExchanger`."""

    @abstractmethod
    async def exchange(self, grant_type: str, params: Dict[str, Any]) -> Credential:
        """Return a new credential for the given grant.

        :param grant_type: OAuth grant type, e.g. "refresh_token".
        :param params: Grant parameters, e.g. {"refresh_token": "..."}.
        :return: Newly issued credential.
        """
        pass


class RefreshNotifier(ABC):
    """Receive every credential issued by a refresh.

    The notifier runs before the new credential is adopted, so it always
    observes the credential about to become active.
    """

    @abstractmethod
    def on_credential_refreshed(self, credential: Credential) -> None:
        """Handle a newly issued credential.

        :param credential: Credential about to replace the current one.
        """
        pass


class CallbackRefreshNotifier(RefreshNotifier):
    """Adapt a plain callable to the notifier interface.

    The callable's return value is passed through, so the async client
    can await coroutine callbacks.
    """

    def __init__(self, callback: Callable[[Credential], Any]):
        self._callback = callback

    def on_credential_refreshed(self, credential: Credential) -> Any:
        return self._callback(credential)


NotifierLike = Union[RefreshNotifier, Callable[[Credential], Any]]


def resolve_notifier(notifier: Optional[NotifierLike]) -> Optional[RefreshNotifier]:
    """Return a notifier instance for the given notifier or callable.

    :param notifier: Notifier, plain callable, or None.
    :return: Notifier instance, or None when absent.
    :raises TypeError: If the value is neither a notifier nor callable.
    """
    if notifier is None or isinstance(notifier, RefreshNotifier):
        return notifier
    if callable(notifier):
        return CallbackRefreshNotifier(notifier)
    raise TypeError(
        f"notifier must be a RefreshNotifier or callable, got {type(notifier).__name__}"
    )
