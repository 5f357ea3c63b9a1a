"""
Post-deploy sanity checks of initial contract state.

Verification is diagnostic only: a failing query is recorded and
logged, never raised.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from web3 import Web3

from .executor import ContractHandle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateQuery:
    """A named read-only query against a deployed contract"""
    name: str
    label: str
    fetch: Callable[[ContractHandle], Any]
    render: Callable[[Any], str] = str


def _view(function_name: str) -> Callable[[ContractHandle], Any]:
    return lambda handle: handle.call(function_name)


def _ether(value: Any) -> str:
    return f"{Web3.from_wei(value, 'ether')} ETH"


DEFAULT_QUERIES: Sequence[StateQuery] = (
    StateQuery("owner", "Contract owner", _view("owner")),
    StateQuery("projectCounter", "Initial project counter", _view("projectCounter")),
    StateQuery("platformFeePercent", "Platform fee percentage", _view("platformFeePercent"),
               render=lambda v: f"{v}%"),
    StateQuery("balance", "Contract balance", lambda handle: handle.balance(), render=_ether),
)


@dataclass(frozen=True)
class QueryResult:
    name: str
    label: str
    value: Any = None
    error: Optional[str] = None
    display: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class VerificationResult:
    """Outcome of every query, keyed by query name"""
    results: Dict[str, QueryResult] = field(default_factory=dict)

    @property
    def failures(self) -> List[QueryResult]:
        return [r for r in self.results.values() if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failures

    def __getitem__(self, name: str) -> QueryResult:
        return self.results[name]


class StateVerifier:
    """Runs the post-deploy queries one after another."""

    def __init__(
        self,
        queries: Sequence[StateQuery] = DEFAULT_QUERIES,
        logger: Optional[logging.Logger] = None
    ):
        self.queries = list(queries)
        self.logger = logger or logging.getLogger(__name__)

    def verify(self, handle: ContractHandle) -> VerificationResult:
        result = VerificationResult()
        for query in self.queries:
            try:
                value = query.fetch(handle)
                display = query.render(value)
            except Exception as e:
                self.logger.warning(f"Verification query '{query.name}' failed: {e}")
                result.results[query.name] = QueryResult(
                    name=query.name, label=query.label, error=str(e) or type(e).__name__
                )
                continue
            result.results[query.name] = QueryResult(
                name=query.name, label=query.label, value=value, display=display
            )
        return result
