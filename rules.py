from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class LifeRule:
    """
    Outer-totalistic binary rule for the 2-D Moore neighborhood.
    Bitstring layout (length = num_states x (neighbor_count + 1)):
        state 0 outcomes: indices 0 .. 8   (sum = 0-8)
        state 1 outcomes: indices 9 .. 17
    """
    rule_bits: str
    num_states: int = 2
    neighbor_count: int = 8 # Moore neighborhood

    def __post_init__(self) -> None:
        expected = self.num_states * (self.neighbor_count + 1)
        if len(self.rule_bits) != expected:
            raise ValueError(
                f"rule_bits length {len(self.rule_bits)} "
                f"does not match expected {expected} "
                f"({self.num_states} states × {self.neighbor_count + 1} sums)."
            )
        if set(self.rule_bits) - {"0", "1"}:
            raise ValueError("rule_bits must only contain '0' and '1'")

    def __call__(self, self_state: int, neighbor_sum: int) -> int:
        """Return next-state bit (0/1) for given cell state & neighbor sum."""
        if not (0 <= self_state < self.num_states):
            raise ValueError("invalid self_state")
        if not (0 <= neighbor_sum <= self.neighbor_count):
            raise ValueError("invalid neighbor sum")

        idx = self_state * (self.neighbor_count + 1) + neighbor_sum
        return int(self.rule_bits[idx])

    @property
    def notation(self) -> str:
        """Birth/survival notation, e.g. 'B3/S23'."""
        width = self.neighbor_count + 1
        born = "".join(str(i) for i in range(width) if self.rule_bits[i] == "1")
        survive = "".join(str(i) for i in range(width) if self.rule_bits[width + i] == "1")
        return f"B{born}/S{survive}"


# Dead cell is born on exactly 3 neighbors; live cell survives on 2 or 3.
CONWAY = LifeRule("000100000" + "001100000")
