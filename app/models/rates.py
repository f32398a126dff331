from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, RootModel


class RateSnapshot(BaseModel):
    """Point-in-time USD based rates as emitted by the provider.

    Unknown keys are kept so the payload round-trips verbatim.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    disclaimer: str = ""
    license: str = ""
    timestamp: int
    base: str = Field(..., min_length=1)
    rates: Dict[str, float]


class SymbolMap(RootModel[Dict[str, str]]):
    """Currency code -> display name."""

    model_config = ConfigDict(frozen=True)

    def __getitem__(self, code: str) -> str:
        return self.root[code]

    def __contains__(self, code: object) -> bool:
        return code in self.root

    def __len__(self) -> int:
        return len(self.root)
