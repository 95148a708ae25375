"""Compressed-NFT merkle tree sizes offered when creating a cPOP."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TreeSize:
    leaves: int
    tree_depth: int
    canopy_depth: int
    concurrency_buffer: int
    tree_cost: float
    cost_per_cnft: float


# Costs are in SOL.
TREE_SIZES: tuple[TreeSize, ...] = (
    TreeSize(16_384, 14, 8, 64, 0.3358, 0.0000255),
    TreeSize(65_536, 16, 10, 64, 0.7069, 0.00001579),
    TreeSize(262_144, 18, 12, 64, 2.1042, 0.00001303),
    TreeSize(1_048_576, 20, 13, 1024, 8.5012, 0.00001311),
    TreeSize(16_777_216, 24, 15, 2048, 26.1201, 0.00000656),
    TreeSize(67_108_864, 26, 17, 2048, 70.8213, 0.00000606),
    TreeSize(1_073_741_824, 30, 17, 2048, 72.6468, 0.00000507),
)


def recommend_tree_size(amount: int) -> TreeSize | None:
    """Smallest tree that can hold `amount` tokens, or None if none is big enough."""
    for size in TREE_SIZES:
        if size.leaves >= amount:
            return size
    return None
