# SPDX-License-Identifier: MIT
# src/juice_monitor/feeds/queries.py
"""
GraphQL documents for every incremental feed query.

All queries share one shape: filter ``<cursor>_gt: $watermark``, order
ascending by the same cursor, and cap the page at PAGE_SIZE items.
"""

PAGE_SIZE = 50


def _incremental(name: str, root: str, cursor: str, fields: str, extra_where: str = "") -> str:
    where = f"{cursor}_gt: $watermark"
    if extra_where:
        where = f"{where}, {extra_where}"
    return f"""
  query {name}($watermark: BigInt!) {{
    {root}(
      where: {{ {where} }}
      orderBy: "{cursor}"
      orderDirection: "asc"
      limit: {PAGE_SIZE}
    ) {{
      items {{
{fields}
      }}
    }}
  }}
"""


def _fields(*names: str) -> str:
    return "\n".join(f"        {n}" for n in names)


# ============================================================
# JuiceSwap
# ============================================================

GOVERNOR_PROPOSALS_NEW = _incremental(
    "GovernorProposalsNew", "governorProposals", "createdAt",
    _fields("id", "chainId", "proposalId", "proposer", "target", "calldata",
            "executeAfter", "description", "status", "createdAt", "txHash"),
    extra_where='status: "active"',
)

GOVERNOR_PROPOSALS_RESOLVED = _incremental(
    "GovernorProposalsResolved", "governorProposals", "resolvedAt",
    _fields("id", "chainId", "proposalId", "proposer", "target", "description",
            "status", "executedBy", "vetoedBy", "createdAt", "resolvedAt",
            "txHash", "resolvedTxHash"),
    extra_where='status_in: ["executed", "vetoed"]',
)

FACTORY_OWNER_CHANGES = _incremental(
    "FactoryOwnerChanges", "factoryOwnerChanges", "blockTimestamp",
    _fields("id", "chainId", "oldOwner", "newOwner", "blockTimestamp", "txHash"),
)

FEE_COLLECTOR_OWNER_UPDATES = _incremental(
    "FeeCollectorOwnerUpdates", "feeCollectorOwnerUpdates", "blockTimestamp",
    _fields("id", "chainId", "newOwner", "blockTimestamp", "txHash"),
)

FEE_COLLECTOR_ROUTER_UPDATES = _incremental(
    "FeeCollectorRouterUpdates", "feeCollectorRouterUpdates", "blockTimestamp",
    _fields("id", "chainId", "oldRouter", "newRouter", "blockTimestamp", "txHash"),
)

FEE_COLLECTOR_COLLECTOR_UPDATES = _incremental(
    "FeeCollectorCollectorUpdates", "feeCollectorCollectorUpdates", "blockTimestamp",
    _fields("id", "chainId", "oldCollector", "newCollector", "blockTimestamp", "txHash"),
)

FEE_COLLECTOR_PROTECTION_UPDATES = _incremental(
    "FeeCollectorProtectionUpdates", "feeCollectorProtectionUpdates", "blockTimestamp",
    _fields("id", "chainId", "twapPeriod", "maxSlippageBps", "blockTimestamp", "txHash"),
)

GATEWAY_BRIDGED_TOKEN_REGISTRATIONS = _incremental(
    "GatewayBridgedTokenRegistrations", "gatewayBridgedTokenRegistrations", "blockTimestamp",
    _fields("id", "chainId", "token", "bridge", "registeredBy", "decimals",
            "blockTimestamp", "txHash"),
)

# ============================================================
# JuiceDollar
# ============================================================

POSITION_V2S_NEW = _incremental(
    "PositionV2sNew", "positionV2s", "created",
    _fields("id", "txHash", "position", "owner", "collateral", "price", "created",
            "isOriginal", "denied", "cooldown", "collateralSymbol",
            "collateralDecimals", "stablecoinSymbol", "stablecoinDecimals",
            "minimumCollateral", "limitForClones"),
    extra_where="isOriginal: true, denied: false",
)

MINTERS_NEW = _incremental(
    "MintersNew", "minters", "applyDate",
    _fields("id", "txHash", "minter", "applicationPeriod", "applicationFee",
            "applyMessage", "applyDate", "suggestor", "denyDate", "denyMessage", "vetor"),
)

MINTERS_DENIED = _incremental(
    "MintersDenied", "minters", "denyDate",
    _fields("id", "txHash", "minter", "applyMessage", "applyDate", "suggestor",
            "denyDate", "denyMessage", "denyTxHash", "vetor"),
)

SAVINGS_RATE_PROPOSEDS = _incremental(
    "SavingsRateProposeds", "savingsRateProposeds", "created",
    _fields("id", "created", "blockheight", "txHash", "proposer", "nextRate", "nextChange"),
)

SAVINGS_RATE_CHANGEDS = _incremental(
    "SavingsRateChangeds", "savingsRateChangeds", "created",
    _fields("id", "created", "blockheight", "txHash", "approvedRate"),
)

RATE_CHANGES_PROPOSEDS = _incremental(
    "RateChangesProposeds", "rateChangesProposeds", "timestamp",
    _fields("id", "who", "nextFeeRate", "nextSavingsFeeRate", "nextMintingFeeRate",
            "nextChange", "blockheight", "timestamp", "txHash"),
)

RATE_CHANGES_EXECUTEDS = _incremental(
    "RateChangesExecuteds", "rateChangesExecuteds", "timestamp",
    _fields("id", "who", "nextFeeRate", "nextSavingsFeeRate", "nextMintingFeeRate",
            "blockheight", "timestamp", "txHash"),
)

EMERGENCY_STOPPEDS = _incremental(
    "EmergencyStoppeds", "emergencyStoppeds", "timestamp",
    _fields("id", "bridgeAddress", "caller", "message", "blockheight", "timestamp", "txHash"),
)

FORCED_SALES = _incremental(
    "ForcedSales", "forcedSales", "timestamp",
    _fields("id", "position", "amount", "priceE36MinusDecimals", "blockheight",
            "timestamp", "txHash"),
)

POSITION_DENIED_BY_GOVERNANCES = _incremental(
    "PositionDeniedByGovernances", "positionDeniedByGovernances", "timestamp",
    _fields("id", "position", "denier", "message", "blockheight", "timestamp", "txHash"),
)

CHALLENGE_V2S = _incremental(
    "ChallengeV2s", "challengeV2s", "created",
    _fields("id", "txHash", "position", "number", "challenger", "start", "created",
            "duration", "size", "liqPrice", "status"),
)

_CHALLENGE_BID_FIELDS = _fields(
    "id", "txHash", "position", "number", "numberBid", "bidder", "created", "bidType",
    "bid", "price", "filledSize", "acquiredCollateral", "challengeSize",
)

CHALLENGE_BID_V2S_SUCCEEDED = _incremental(
    "ChallengeBidV2sSucceeded", "challengeBidV2s", "created",
    _CHALLENGE_BID_FIELDS, extra_where='bidType: "Succeeded"',
)

CHALLENGE_BID_V2S_AVERTED = _incremental(
    "ChallengeBidV2sAverted", "challengeBidV2s", "created",
    _CHALLENGE_BID_FIELDS, extra_where='bidType: "Averted"',
)
