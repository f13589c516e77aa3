"""
NFT Registry - Call Script Replay

This module loads ordered call scripts (YAML or JSON) and replays them against
a freshly created registry. Because every operation is deterministic, replaying
the same script always yields the same outcomes, the same notification
sequence and the same final snapshot.
"""

import inspect
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError as SchemaValidationError, model_validator

from .events import EventCallback, EventRecorder
from .exceptions import RegistryError, ValidationError
from .manager import NFTRegistry
from .schema import RegistryEvent, RegistrySnapshot


logger = logging.getLogger(__name__)

MUTATIONS = frozenset({
    "mint", "safe_mint", "transfer_from", "safe_transfer_from", "approve",
    "set_approval_for_all", "pause", "unpause", "set_base_uri",
})

QUERIES = frozenset({
    "balance_of", "owner_of", "get_approved", "is_approved_for_all",
    "token_uri", "tokens_of",
})

# Script-friendly argument names
ARGUMENT_ALIASES = {
    "from": "from_account",
    "id": "token_id",
}


class RegistryCall(BaseModel):
    """A single scripted registry call."""

    op: str = Field(..., description="Registry operation name")
    caller: Optional[str] = Field(None, description="Calling account (mutations only)")
    args: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode='after')
    def validate_call(self):
        """Validate the operation name and argument binding."""
        if self.op not in MUTATIONS and self.op not in QUERIES:
            raise ValueError(f'Unknown operation: {self.op}')

        if self.op in MUTATIONS and self.caller is None:
            raise ValueError(f'Operation {self.op} requires a caller')

        self.args = {ARGUMENT_ALIASES.get(k, k): v for k, v in self.args.items()}

        if self.op == "safe_transfer_from" and isinstance(self.args.get("data"), str):
            self.args["data"] = self.args["data"].encode('utf-8')

        try:
            inspect.signature(getattr(NFTRegistry, self.op)).bind(None, **self._kwargs())
        except TypeError as e:
            raise ValueError(f'Invalid arguments for {self.op}: {e}')

        return self

    @property
    def is_mutation(self) -> bool:
        return self.op in MUTATIONS

    def _kwargs(self) -> Dict[str, Any]:
        if self.is_mutation:
            return {"caller": self.caller, **self.args}
        return dict(self.args)

    def apply(self, registry: NFTRegistry) -> Any:
        """Invoke the call against a registry."""
        return getattr(registry, self.op)(**self._kwargs())


class ReplayScript(BaseModel):
    """Collection parameters plus an ordered list of calls."""

    collection: Dict[str, Any] = Field(default_factory=dict)
    calls: List[RegistryCall] = Field(default_factory=list)


class CallOutcome(BaseModel):
    """Result of one replayed call."""

    index: int = Field(..., ge=0)
    op: str
    caller: Optional[str] = None
    ok: bool
    result: Any = None
    error: Optional[Dict[str, Any]] = None


class ReplayReport(BaseModel):
    """Outcome of a complete replay."""

    outcomes: List[CallOutcome] = Field(default_factory=list)
    events: List[RegistryEvent] = Field(default_factory=list)
    snapshot: RegistrySnapshot

    @property
    def failed(self) -> List[CallOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def summary(self) -> Dict[str, Any]:
        """Get replay summary."""
        return {
            "calls": len(self.outcomes),
            "succeeded": len(self.outcomes) - len(self.failed),
            "failed": len(self.failed),
            "events": len(self.events),
            "total_supply": self.snapshot.total_supply,
        }


def parse_script(data: Union[Dict[str, Any], List[Any], None]) -> ReplayScript:
    """
    Build a script from already-decoded data.

    A bare list is accepted as the list of calls.

    Raises:
        ValidationError: malformed script
    """
    if data is None:
        data = {}
    if isinstance(data, list):
        data = {"calls": data}

    try:
        return ReplayScript.model_validate(data)
    except SchemaValidationError as e:
        raise ValidationError(
            "Invalid call script",
            errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        ) from e


def load_script(path: Union[str, Path]) -> ReplayScript:
    """Load a call script from a YAML or JSON file."""
    path = Path(path)
    with open(path, 'r') as f:
        if path.suffix == '.json':
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    logger.debug(f"Loaded call script from {path}")
    return parse_script(data)


def replay(
    script: ReplayScript,
    defaults: Optional[Dict[str, Any]] = None,
    stop_on_error: bool = False,
    subscribers: Iterable[EventCallback] = ()
) -> ReplayReport:
    """
    Replay a script against a new registry.

    Args:
        script: Calls to execute, in order
        defaults: Collection parameters used where the script gives none
        stop_on_error: Stop at the first failing call
        subscribers: Extra notification subscribers

    Returns:
        ReplayReport with per-call outcomes, notifications and final state
    """
    collection = {**(defaults or {}), **script.collection}
    registry = NFTRegistry.from_config(collection)

    recorder = EventRecorder()
    registry.subscribe(recorder)
    for subscriber in subscribers:
        registry.subscribe(subscriber)

    outcomes: List[CallOutcome] = []
    for index, call in enumerate(script.calls):
        try:
            result = call.apply(registry)
        except RegistryError as e:
            outcomes.append(CallOutcome(
                index=index, op=call.op, caller=call.caller, ok=False, error=e.to_dict()
            ))
            if stop_on_error:
                logger.info(f"Replay stopped at call {index} ({call.op}): {e.message}")
                break
            continue

        outcomes.append(CallOutcome(
            index=index, op=call.op, caller=call.caller, ok=True, result=result
        ))

    return ReplayReport(
        outcomes=outcomes,
        events=list(recorder.events),
        snapshot=registry.snapshot()
    )
