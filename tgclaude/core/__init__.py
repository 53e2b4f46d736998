"""Usage ledger, conversation buffer, segmenter and the request gate."""

from tgclaude.core.conversation import ConversationBuffer, ConversationEntry
from tgclaude.core.gate import GateOutcome, RequestGate, RequestState
from tgclaude.core.ledger import Admission, DenialReason, UsageLedger, UsageRecord
from tgclaude.core.segmenter import split_message

__all__ = [
    "Admission",
    "ConversationBuffer",
    "ConversationEntry",
    "DenialReason",
    "GateOutcome",
    "RequestGate",
    "RequestState",
    "UsageLedger",
    "UsageRecord",
    "split_message",
]
