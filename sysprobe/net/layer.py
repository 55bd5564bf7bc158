"""The protocol layers a captured packet is decoded through."""

from __future__ import annotations

import enum


class Layer(enum.Enum):
    """A layer of the network stack."""

    DATA_LINK = "data_link"
    NETWORK = "network"
    TRANSPORT = "transport"
    APPLICATION = "application"

    def __str__(self) -> str:
        return self.value