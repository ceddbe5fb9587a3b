"""
Account type classification from off-chain labels and tags.

Classification is an ordered cascade of rules. Each rule pairs an account
type with a matcher and a default confidence; the first rule whose matcher
fires decides the result, so the order of ``RULES`` is the priority order.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from solana_holders.models.metadata import AccountMetadata
from solana_holders.services.classification.helpers import contains_keyword
from solana_holders.services.classification.models import (
    AccountClassification,
    AccountType,
    Confidence,
)

# Centralized exchanges
CEX_LABELS = (
    "binance", "coinbase", "mexc", "okx", "bybit", "kucoin",
    "gate.io", "huobi", "htx", "crypto.com", "kraken", "bitfinex",
    "gemini", "bitstamp", "upbit", "bithumb",
)
CEX_TAGS = ("cex", "exchange", "centralized_exchange")

# Decentralized exchanges and aggregators
DEX_LABELS = (
    "raydium", "jupiter", "orca", "serum", "mango", "drift",
    "phoenix", "1inch", "uniswap", "sushiswap", "meteora", "meteora dex",
)
DEX_TAGS = ("dex", "dex_wallet", "aggregator", "amm")

DEFI_LABELS = (
    "solend", "kamino", "marginfi", "jet", "francium", "apricot",
    "port", "larix", "tulip", "quarry", "sunny", "saber",
)
DEFI_TAGS = ("defi", "lending", "yield_farming", "liquidity_provider", "protocol", "vault")

BRIDGE_LABELS = ("wormhole", "portal", "allbridge", "multichain", "synapse", "hop", "across", "stargate")
BRIDGE_TAGS = ("bridge", "cross_chain", "interoperability")

STAKING_LABELS = ("marinade", "lido", "jito", "blaze", "cogent", "stake_pool")
STAKING_TAGS = ("staking", "stake_pool", "validator", "liquid_staking")
GENERIC_STAKING_WORDS = ("stake", "staking", "staked", "validator")

NFT_LABELS = (
    "magic eden", "opensea", "solanart", "digitaleyes", "alpha art",
    "solsea", "hyperspace", "tensor", "coral cube",
)
NFT_TAGS = ("nft", "marketplace", "nft_trader", "collection")

MM_LABELS = (
    "market maker", "mm", "jump", "alameda", "wintermute",
    "galaxy digital", "hudson river", "optiver",
)
MM_TAGS = ("market_maker", "institutional", "prop_trading")

PROGRAM_KEYWORDS = (
    "authority", "program", "mint", "token program", "system program",
    "metaplex", "anchor", "multisig",
)

WHALE_TAGS = ("whale", "large_holder", "high_volume")
BOT_TAGS = ("bot", "automated", "high_frequency")

TYPE_DESCRIPTIONS = {
    AccountType.CEX: "Centralized Exchange",
    AccountType.DEX: "Decentralized Exchange",
    AccountType.DEFI_PROTOCOL: "DeFi Protocol",
    AccountType.BRIDGE: "Cross-chain Bridge",
    AccountType.STAKING: "Staking Service",
    AccountType.NFT_MARKETPLACE: "NFT Marketplace",
    AccountType.VALIDATOR: "Validator Node",
    AccountType.PROGRAM_AUTHORITY: "Program Authority",
    AccountType.MARKET_MAKER: "Market Maker",
    AccountType.WHALE: "Large Holder",
    AccountType.BOT_TRADER: "Automated Trading Bot",
    AccountType.INSTITUTIONAL: "Institutional Entity",
    AccountType.UNKNOWN: "Unknown/Unlabeled",
}


@dataclass(frozen=True)
class RuleMatch:
    """What a matcher found. ``confidence`` overrides the rule default when set."""

    reasoning: Tuple[str, ...]
    sub_type: Optional[str] = None
    confidence: Optional[Confidence] = None


Matcher = Callable[[str, Sequence[str]], Optional[RuleMatch]]


@dataclass(frozen=True)
class ClassificationRule:
    account_type: AccountType
    matcher: Matcher
    confidence: Confidence


def _label_matches(label: str, keywords: Sequence[str]) -> List[str]:
    return [keyword for keyword in keywords if contains_keyword(label, keyword)]


def _tag_matches(tags: Sequence[str], known_tags: Sequence[str]) -> List[str]:
    return [tag for tag in tags if tag in known_tags]


def keyword_matcher(description: str, labels: Sequence[str], tags: Sequence[str]) -> Matcher:
    """Match a label keyword or an exact tag; the first label match wins the sub-type."""

    def match(label: str, account_tags: Sequence[str]) -> Optional[RuleMatch]:
        label_hits = _label_matches(label, labels)
        tag_hits = _tag_matches(account_tags, tags)
        if not label_hits and not tag_hits:
            return None

        reasoning = []
        if label_hits:
            reasoning.append(f"Label contains {description}: {label_hits[0]}")
        if tag_hits:
            reasoning.append(f"Tagged as: {', '.join(tag_hits)}")
        sub_type = label_hits[0] if label_hits else tag_hits[0]
        return RuleMatch(reasoning=tuple(reasoning), sub_type=sub_type)

    return match


def staking_matcher(label: str, tags: Sequence[str]) -> Optional[RuleMatch]:
    """Known staking services or tags; a bare staking word only gives medium confidence."""
    label_hits = _label_matches(label, STAKING_LABELS)
    tag_hits = _tag_matches(tags, STAKING_TAGS)
    generic = any(contains_keyword(label, word) for word in GENERIC_STAKING_WORDS)
    if not (label_hits or tag_hits or generic):
        return None

    reasoning = []
    if label_hits:
        reasoning.append(f"Label contains staking service: {label_hits[0]}")
    if tag_hits:
        reasoning.append(f"Tagged as: {', '.join(tag_hits)}")
    if generic and not label_hits:
        reasoning.append("Label contains staking keywords")

    explicit = bool(label_hits or tag_hits)
    sub_type = label_hits[0] if label_hits else (tag_hits[0] if tag_hits else None)
    return RuleMatch(
        reasoning=tuple(reasoning),
        sub_type=sub_type,
        confidence=Confidence.HIGH if explicit else Confidence.MEDIUM,
    )


def program_matcher(label: str, tags: Sequence[str]) -> Optional[RuleMatch]:
    hits = _label_matches(label, PROGRAM_KEYWORDS)
    if not hits:
        return None
    return RuleMatch(
        reasoning=(f"Label contains program keywords: {', '.join(hits)}",),
        sub_type=hits[0],
    )


def validator_matcher(label: str, tags: Sequence[str]) -> Optional[RuleMatch]:
    has_keyword = contains_keyword(label, "validator") and not contains_keyword(label, "stake")
    has_tag = "validator" in tags
    if not (has_keyword or has_tag):
        return None

    reasoning = []
    if has_keyword:
        reasoning.append("Label contains validator keyword")
    if has_tag:
        reasoning.append("Tagged as validator")
    return RuleMatch(reasoning=tuple(reasoning))


def tag_indicator_matcher(description: str, indicators: Sequence[str]) -> Matcher:
    """Match behavioral tags only (labels are ignored)."""

    def match(label: str, tags: Sequence[str]) -> Optional[RuleMatch]:
        hits = _tag_matches(tags, indicators)
        if not hits:
            return None
        return RuleMatch(reasoning=(f"Tagged with {description} indicators: {', '.join(hits)}",))

    return match


RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule(AccountType.CEX, keyword_matcher("CEX keyword", CEX_LABELS, CEX_TAGS), Confidence.HIGH),
    ClassificationRule(AccountType.DEX, keyword_matcher("DEX keyword", DEX_LABELS, DEX_TAGS), Confidence.HIGH),
    ClassificationRule(AccountType.BRIDGE, keyword_matcher("bridge keyword", BRIDGE_LABELS, BRIDGE_TAGS),
                       Confidence.HIGH),
    ClassificationRule(AccountType.STAKING, staking_matcher, Confidence.HIGH),
    ClassificationRule(AccountType.DEFI_PROTOCOL, keyword_matcher("DeFi protocol", DEFI_LABELS, DEFI_TAGS),
                       Confidence.HIGH),
    ClassificationRule(AccountType.NFT_MARKETPLACE, keyword_matcher("NFT marketplace", NFT_LABELS, NFT_TAGS),
                       Confidence.HIGH),
    ClassificationRule(AccountType.MARKET_MAKER, keyword_matcher("market maker", MM_LABELS, MM_TAGS),
                       Confidence.HIGH),
    ClassificationRule(AccountType.PROGRAM_AUTHORITY, program_matcher, Confidence.HIGH),
    ClassificationRule(AccountType.VALIDATOR, validator_matcher, Confidence.HIGH),
    ClassificationRule(AccountType.WHALE, tag_indicator_matcher("whale", WHALE_TAGS), Confidence.MEDIUM),
    ClassificationRule(AccountType.BOT_TRADER, tag_indicator_matcher("bot", BOT_TAGS), Confidence.MEDIUM),
)


def classify(metadata: Optional[AccountMetadata],
             rules: Sequence[ClassificationRule] = RULES) -> AccountClassification:
    """Classify an address from its metadata.

    Pure and deterministic: the same metadata always yields the same result.

    Args:
        metadata: Off-chain metadata, or None when unavailable
        rules: Ordered rule cascade

    Returns:
        AccountClassification of the first matching rule, or UNKNOWN
    """
    if metadata is None:
        return AccountClassification(
            account_type=AccountType.UNKNOWN,
            confidence=Confidence.HIGH,
            reasoning=("No account data available",),
        )

    label = (metadata.label or "").lower()
    tags = [tag.lower() for tag in metadata.tags]

    for rule in rules:
        found = rule.matcher(label, tags)
        if found is not None:
            return AccountClassification(
                account_type=rule.account_type,
                confidence=found.confidence or rule.confidence,
                sub_type=found.sub_type,
                reasoning=found.reasoning,
            )

    reason = ("Labeled entity but type could not be determined" if metadata.has_identity
              else "No identifying information available")
    return AccountClassification(
        account_type=AccountType.UNKNOWN,
        confidence=Confidence.HIGH,
        reasoning=(reason,),
    )


def is_exchange(metadata: Optional[AccountMetadata], include_dex: bool = False) -> bool:
    """True for centralized exchanges, and for DEX venues when ``include_dex``."""
    account_type = classify(metadata).account_type
    if account_type is AccountType.CEX:
        return True
    return include_dex and account_type is AccountType.DEX


def describe_account_type(account_type: AccountType) -> str:
    """Human-readable name of an account type."""
    return TYPE_DESCRIPTIONS[account_type]
