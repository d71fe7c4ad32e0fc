"""Context-window usage estimation."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Protocol

import tiktoken

from cc_statusline.config import StatusConfig
from cc_statusline.models import ContextEstimate, ModelCapacity, Overhead

logger = logging.getLogger(__name__)

# Reported capacities outside this range are treated as bogus
MIN_REPORTED_CAPACITY = 10_000
MAX_REPORTED_CAPACITY = 2_000_000

DEFAULT_CAPACITY = 500_000

# Evaluated in order; the first match wins. Matching is case-sensitive.
MODEL_CAPACITIES: tuple[ModelCapacity, ...] = (
    ModelCapacity("sonnet", ("sonnet", "Sonnet"), 1_000_000),
    ModelCapacity("claude", ("claude", "Claude", "opus", "Opus", "haiku", "Haiku"), 200_000),
    ModelCapacity("gpt-4", ("gpt-4",), 128_000),
    ModelCapacity("gemini", ("gemini",), 1_048_576),
    ModelCapacity("grok", ("grok",), 128_000),
    ModelCapacity("default", (), DEFAULT_CAPACITY),
)

TIKTOKEN_ENCODING = "cl100k_base"


class Tokenizer(Protocol):
    name: str

    def count(self, text: str) -> int: ...


class TiktokenTokenizer:
    """Counts tokens with a tiktoken BPE encoding."""

    name = "tiktoken"

    def __init__(self, encoding: tiktoken.Encoding):
        self.encoding = encoding

    def count(self, text: str) -> int:
        return len(self.encoding.encode(text, disallowed_special=()))


@lru_cache(maxsize=1)
def _load_encoding(name: str) -> tiktoken.Encoding:
    return tiktoken.get_encoding(name)


def get_tokenizer(name: str) -> Tokenizer | None:
    """Return the named tokenizer, or None to use byte estimation."""
    if name != "tiktoken":
        return None
    try:
        return TiktokenTokenizer(_load_encoding(TIKTOKEN_ENCODING))
    except Exception as e:
        # tiktoken downloads encodings on first use; offline hosts land here
        logger.warning("tiktoken encoding %s unavailable (%s), using byte estimation", TIKTOKEN_ENCODING, e)
        return None


def model_capacity(model_id: str) -> int:
    """Look up the context window for a model id or display name."""
    for entry in MODEL_CAPACITIES:
        if entry.matches(model_id or ""):
            return entry.capacity
    return DEFAULT_CAPACITY


def resolve_capacity(reported_capacity: int | None, model_id: str) -> int:
    """Trust a plausible reported capacity, otherwise use the model table."""
    if reported_capacity and MIN_REPORTED_CAPACITY <= reported_capacity <= MAX_REPORTED_CAPACITY:
        return reported_capacity
    return model_capacity(model_id)


def count_transcript_tokens(path: Path, config: StatusConfig, tokenizer: Tokenizer | None = None) -> int:
    """Estimate the tokens held in a transcript file.

    Large files, and any file when no tokenizer is given, are approximated
    from their byte length.
    """
    try:
        size = path.stat().st_size
    except OSError:
        return 0

    if tokenizer is not None and size <= config.large_transcript_bytes:
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Could not read %s for tokenizing: %s", path, e)
        else:
            return tokenizer.count(text)

    return size // config.chars_per_token


def estimate_from_authoritative(
    tokens: int,
    reported_capacity: int | None,
    model_id: str,
) -> ContextEstimate:
    """Build an estimate from a token count supplied by the host."""
    capacity = resolve_capacity(reported_capacity, model_id)
    consumed = tokens
    if consumed > capacity:
        # Over-reporting guard
        logger.debug("Reported %d tokens exceeds capacity %d, clamping", consumed, capacity)
        consumed = capacity * 3 // 4
    return ContextEstimate(consumed_tokens=consumed, capacity=capacity, source="authoritative")


def estimate_from_transcript(
    transcript_path: Path,
    overhead: Overhead,
    config: StatusConfig,
    tokenizer: Tokenizer | None = None,
) -> ContextEstimate:
    """Estimate usage from transcript size plus fixed overhead."""
    transcript_tokens = count_transcript_tokens(transcript_path, config, tokenizer)
    estimated = transcript_tokens + overhead.total - config.message_overlap_tokens

    if estimated > config.sanity_ceiling_tokens:
        logger.debug("Estimate %d above ceiling, recomputing conservatively", estimated)
        estimated = transcript_tokens // 10 + overhead.total

    return ContextEstimate(
        consumed_tokens=max(0, estimated),
        capacity=config.transcript_capacity,
        source="transcript",
    )


def estimate_context(
    authoritative_tokens: int | None,
    reported_capacity: int | None,
    model_id: str,
    transcript_path: Path | None,
    overhead: Overhead,
    config: StatusConfig,
    tokenizer: Tokenizer | None = None,
    perf_hint_threshold: int = 0,
) -> ContextEstimate | None:
    """Estimate context usage, preferring an authoritative token count.

    Args:
        authoritative_tokens: Token count reported by the host, if any.
        reported_capacity: Context window reported by the host, if any.
        model_id: Model id or display name for the capacity table.
        transcript_path: Transcript to estimate from when no count is given.
        overhead: Fixed overhead added on the transcript path.
        config: Calibration constants.
        tokenizer: Optional tokenizer for the transcript path.
        perf_hint_threshold: Token count at which perf_hint is raised.

    Returns:
        The estimate, or None when there is nothing to estimate from.
    """
    if authoritative_tokens and authoritative_tokens > 0:
        estimate = estimate_from_authoritative(authoritative_tokens, reported_capacity, model_id)
    elif transcript_path is not None and transcript_path.is_file():
        estimate = estimate_from_transcript(transcript_path, overhead, config, tokenizer)
    else:
        return None

    if perf_hint_threshold > 0 and estimate.consumed_tokens >= perf_hint_threshold:
        estimate.perf_hint = True
    return estimate
