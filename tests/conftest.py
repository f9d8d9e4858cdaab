"""
Test Configuration
------------------
Shared fixtures: sample tools, a scripted authorizer and registries.
"""

import sys
from pathlib import Path
from typing import List

import pytest
from pydantic import BaseModel

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from functions import (  # noqa: E402
    Clearance, ClearanceGate, Datatype, ParameterSpec, ToolRegistry, ToolSpec
)


class ScriptedAuthorizer:
    """Authorizer that answers from fixed values and records every prompt."""

    def __init__(self, confirm: bool = True, authenticate: bool = True):
        self.confirm_answer = confirm
        self.authenticate_answer = authenticate
        self.confirm_messages: List[str] = []
        self.authenticate_messages: List[str] = []

    async def confirm(self, message: str) -> bool:
        self.confirm_messages.append(message)
        return self.confirm_answer

    async def strong_authenticate(self, message: str) -> bool:
        self.authenticate_messages.append(message)
        return self.authenticate_answer


class HandlerSpy:
    """Callable handler that counts invocations."""

    def __init__(self, result="ok"):
        self.result = result
        self.calls = []

    def __call__(self, args):
        self.calls.append(args)
        return self.result


class DeleteFileArguments(BaseModel):
    path: str


def make_add_numbers() -> ToolSpec:
    return ToolSpec(
        name="add_numbers",
        description="Add two integers",
        params=[
            ParameterSpec("a", "First addend", Datatype.INTEGER),
            ParameterSpec("b", "Second addend", Datatype.INTEGER),
        ],
        handler=lambda args: args.a + args.b,
    )


@pytest.fixture
def authorizer():
    return ScriptedAuthorizer()


@pytest.fixture
def add_numbers():
    return make_add_numbers()


@pytest.fixture
def registry(authorizer, add_numbers):
    """Registry with add_numbers registered and a scripted authorizer."""
    reg = ToolRegistry(gate=ClearanceGate(authorizer=authorizer))
    reg.register(add_numbers)
    return reg


@pytest.fixture
def delete_spy():
    return HandlerSpy(result="deleted")


@pytest.fixture
def delete_file(delete_spy):
    return ToolSpec(
        name="delete_file",
        description="Delete a file",
        params=[ParameterSpec("path", "File to delete", Datatype.STRING)],
        handler=delete_spy,
        clearance=Clearance.DANGEROUS,
        arguments=DeleteFileArguments,
    )
