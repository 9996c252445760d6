"""Python-native object mocking built around a stub-exercise-verify workflow.

Create doubles with :class:`ObjMox`, stub them with ``when``/``do_*``, run the
code under test, then check the recorded calls with ``verify`` and friends.
"""

from __future__ import annotations

from .answers import CallsRealMethod, Computes, Raises, Returns
from .controller import InOrder, ObjMox
from .declarations import Mocked, Spied, init_doubles
from .errors import (
    ConfigurationError,
    ConfiguredError,
    InOrderVerificationError,
    MissingInvocationError,
    NoInteractionsWantedError,
    ObjMoxError,
    TooFewInvocationsError,
    TooManyInvocationsError,
    UnnecessaryStubbingError,
    VerificationError,
    WantedButNotInvokedError,
)
from .invocation import Invocation, InvocationMatcher
from .matchers import (
    Any,
    ArgumentMatcher,
    Between,
    Contains,
    Eq,
    IsA,
    Not,
    Predicate,
    Regex,
    StartsWith,
)
from .stubbing import OngoingStubbing, Stubber, Stubbing
from .test_doubles import DoubleKind, TestDouble
from .verifiers import (
    AtLeast,
    AtMost,
    Times,
    at_least,
    at_least_once,
    at_most,
    never,
    times,
)

__all__ = [
    "Any",
    "ArgumentMatcher",
    "AtLeast",
    "AtMost",
    "Between",
    "CallsRealMethod",
    "Computes",
    "ConfigurationError",
    "ConfiguredError",
    "Contains",
    "DoubleKind",
    "Eq",
    "InOrder",
    "InOrderVerificationError",
    "Invocation",
    "InvocationMatcher",
    "IsA",
    "MissingInvocationError",
    "Mocked",
    "NoInteractionsWantedError",
    "Not",
    "ObjMox",
    "ObjMoxError",
    "OngoingStubbing",
    "Predicate",
    "Raises",
    "Regex",
    "Returns",
    "Spied",
    "StartsWith",
    "Stubber",
    "Stubbing",
    "TestDouble",
    "Times",
    "TooFewInvocationsError",
    "TooManyInvocationsError",
    "UnnecessaryStubbingError",
    "VerificationError",
    "WantedButNotInvokedError",
    "at_least",
    "at_least_once",
    "at_most",
    "init_doubles",
    "never",
    "times",
]
