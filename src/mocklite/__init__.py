"""Configurable test doubles with an invocation ledger and verification."""

import logging

from mocklite.behaviors import BehaviorEntry, BehaviorResolver, Handler
from mocklite.callbacks import CallbackDispatcher, CallbackEntry
from mocklite.config import MockOptions
from mocklite.contract import ConfigurationError, ContractSpec, MemberSpec, PropertySpec, capture, describe
from mocklite.generated import GeneratedMock, find_generated, generated_mock
from mocklite.ledger import Invocation, InvocationLedger
from mocklite.matchers import AnyArg, ArgumentSpec, It, LiteralArg, MatchesArg
from mocklite.mock import Mock, invocations_of
from mocklite.proxy import create_substitute, state_of, substitute_type
from mocklite.shapes import Completed, ReturnShape, type_default
from mocklite.signature import CallDescriptor, CallSignature, exact_key
from mocklite.state import MockState
from mocklite.verification import Times, VerificationEngine, VerificationFailure

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AnyArg",
    "ArgumentSpec",
    "BehaviorEntry",
    "BehaviorResolver",
    "CallDescriptor",
    "CallSignature",
    "CallbackDispatcher",
    "CallbackEntry",
    "Completed",
    "ConfigurationError",
    "ContractSpec",
    "GeneratedMock",
    "Handler",
    "Invocation",
    "InvocationLedger",
    "It",
    "LiteralArg",
    "MatchesArg",
    "MemberSpec",
    "Mock",
    "MockOptions",
    "MockState",
    "PropertySpec",
    "ReturnShape",
    "Times",
    "VerificationEngine",
    "VerificationFailure",
    "capture",
    "create_substitute",
    "describe",
    "exact_key",
    "find_generated",
    "generated_mock",
    "invocations_of",
    "state_of",
    "substitute_type",
    "type_default",
]
