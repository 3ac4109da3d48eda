"""ABI of the deployed civic issues contract (only the members this client uses)."""

from typing import Any


def _fn(
    name: str,
    inputs: list[tuple[str, str]],
    outputs: list[tuple[str, str]] | None = None,
    mutability: str = "view",
) -> dict[str, Any]:
    return {
        "name": name,
        "type": "function",
        "stateMutability": mutability,
        "inputs": [{"internalType": t, "name": n, "type": t} for n, t in inputs],
        "outputs": [{"internalType": t, "name": n, "type": t} for n, t in outputs or []],
    }


CIVIC_ISSUES_ABI: list[dict[str, Any]] = [
    _fn(
        "reportIssue",
        [("_location", "string"), ("_description", "string"), ("_imageHash", "string")],
        mutability="nonpayable",
    ),
    _fn(
        "getIssue",
        [("_issueId", "uint256")],
        [
            ("id", "uint256"),
            ("reporter", "address"),
            ("location", "string"),
            ("description", "string"),
            ("imageHash", "string"),
            ("status", "uint8"),
            ("timestamp", "uint256"),
        ],
    ),
    _fn("issueCount", [], [("", "uint256")]),
    _fn(
        "updateIssueStatus",
        [("_issueId", "uint256"), ("_status", "uint8")],
        mutability="nonpayable",
    ),
    _fn("confirmIssue", [("_issueId", "uint256")], mutability="nonpayable"),
    _fn("getConfirmationCount", [("_issueId", "uint256")], [("", "uint256")]),
    _fn(
        "hasUserConfirmed",
        [("_issueId", "uint256"), ("_user", "address")],
        [("", "bool")],
    ),
    _fn(
        "fundIssue",
        [("_issueId", "uint256"), ("_amount", "uint256")],
        mutability="nonpayable",
    ),
    _fn(
        "withdrawFunds",
        [("_issueId", "uint256"), ("_amount", "uint256")],
        mutability="nonpayable",
    ),
    _fn(
        "getIssueFunding",
        [("_issueId", "uint256")],
        [("totalFunding", "uint256"), ("fundsUsed", "uint256"), ("available", "uint256")],
    ),
    _fn(
        "getUserFunding",
        [("_issueId", "uint256"), ("_user", "address")],
        [("", "uint256")],
    ),
    {
        "name": "IssueReported",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "issueId", "type": "uint256"},
            {"indexed": True, "internalType": "address", "name": "reporter", "type": "address"},
            {"indexed": False, "internalType": "string", "name": "location", "type": "string"},
        ],
    },
]
