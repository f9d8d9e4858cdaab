"""
Authorizers
-----------
Ready-made implementations of the Authorizer capability.

- DenyAllAuthorizer: nothing above regular clearance ever runs
- CallbackAuthorizer: wraps host callables (dialogs, chat UI hooks)
- ConsoleAuthorizer: terminal prompts; strong authentication is a
  passphrase read from the environment, never from code
"""

from typing import Any, Awaitable, Callable, Optional, Union
import asyncio
import hmac
import inspect
import logging
import os

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from .clearance import AuthenticationUnavailable

Decision = Union[bool, Awaitable[bool]]


class DenyAllAuthorizer:
    """Refuses every confirmation and authentication request."""

    async def confirm(self, message: str) -> bool:
        return False

    async def strong_authenticate(self, message: str) -> bool:
        return False


class CallbackAuthorizer:
    """
    Adapts plain or async callables to the Authorizer capability.

    Plain callables run in a worker thread so a blocking dialog does not
    stall the event loop. Without a strong_authenticate callable, dangerous
    tools report the mechanism as unavailable.
    """

    def __init__(
        self,
        confirm: Callable[[str], Decision],
        strong_authenticate: Optional[Callable[[str], Decision]] = None,
    ):
        self._confirm = confirm
        self._strong_authenticate = strong_authenticate

    @staticmethod
    async def _call(fn: Callable[[str], Decision], message: str) -> Any:
        if inspect.iscoroutinefunction(fn):
            return await fn(message)
        result = await asyncio.to_thread(fn, message)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def confirm(self, message: str) -> bool:
        return await self._call(self._confirm, message)

    async def strong_authenticate(self, message: str) -> bool:
        if self._strong_authenticate is None:
            raise AuthenticationUnavailable("no strong authentication callback configured")
        return await self._call(self._strong_authenticate, message)


class ConsoleAuthorizer:
    """
    Terminal authorizer using rich prompts.

    Strong authentication compares a typed passphrase against the secret in
    `env_var`, in constant time.
    """

    def __init__(
        self,
        env_var: str = "SIDEKICK_FUNCTIONS_PASSPHRASE",
        console: Optional[Console] = None,
    ):
        self.env_var = env_var
        self.console = console or Console()
        self._logger = logging.getLogger("sidekick.functions.authorizers")

    @classmethod
    def from_settings(cls, settings, console: Optional[Console] = None) -> "ConsoleAuthorizer":
        """Authorizer reading the passphrase from settings.strong_auth_env_var."""
        return cls(env_var=settings.strong_auth_env_var, console=console)

    def _show(self, title: str, message: str) -> None:
        self.console.print(Panel(message, title=title, border_style="yellow"))

    def _ask_confirmation(self, message: str) -> bool:
        self._show("Function Use", message)
        return Confirm.ask("Allow?", default=False, console=self.console)

    def _ask_passphrase(self, message: str, secret: str) -> bool:
        self._show("Authentication Required", message)
        typed = Prompt.ask("Passphrase", password=True, console=self.console)
        return hmac.compare_digest(typed.encode("utf-8"), secret.encode("utf-8"))

    async def confirm(self, message: str) -> bool:
        return await asyncio.to_thread(self._ask_confirmation, message)

    async def strong_authenticate(self, message: str) -> bool:
        secret = os.getenv(self.env_var)
        if not secret:
            self._logger.warning(f"Strong authentication unavailable: {self.env_var} not set")
            raise AuthenticationUnavailable(f"{self.env_var} is not set")
        return await asyncio.to_thread(self._ask_passphrase, message, secret)
