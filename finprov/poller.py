"""Settings for the chain block poller."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta


@dataclass
class ChainPollerConfig:
    """How blocks are fetched from the chain."""

    buffer_size: int = field(
        default=1000,
        metadata={
            "long": "buffersize",
            "description": "The maximum number of Babylon blocks that can be stored in the buffer",
        },
    )
    poll_interval: timedelta = field(
        default=timedelta(seconds=1),
        metadata={
            "long": "pollinterval",
            "description": "The interval between each polling of blocks; the value should be set "
            "depending on the block production time but could be set smaller for quick catching up",
        },
    )
    static_chain_scanning_start_height: int = field(
        default=1,
        metadata={
            "long": "staticchainscanningstartheight",
            "description": "The static height from which we start polling the chain",
        },
    )
    auto_chain_scanning_mode: bool = field(
        default=True,
        metadata={
            "long": "autochainscanningmode",
            "description": "Automatically discover the height from which to start polling the chain",
        },
    )
    poll_size: int = field(
        default=1000,
        metadata={
            "long": "pollsize",
            "description": "The poll batch size when polling for blocks",
        },
    )

    def validate(self) -> None:
        """Raise ValueError if a size or the interval is unusable."""
        if self.buffer_size < 1:
            raise ValueError(f"invalid buffersize: {self.buffer_size}")
        if self.poll_size < 1:
            raise ValueError(f"invalid pollsize: {self.poll_size}")
        if self.poll_interval == timedelta(0):
            raise ValueError("invalid pollinterval: 0")


def default_chain_poller_config() -> ChainPollerConfig:
    """Return the poller settings used when nothing is configured."""
    return ChainPollerConfig()