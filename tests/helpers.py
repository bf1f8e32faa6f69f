import numpy as np


def markov(A, B, C, D, k):
    """First `k` Markov parameters [D, CB, CAB, ...] stacked horizontally."""
    blocks = [D]
    AkB = B
    for _ in range(1, k):
        blocks.append(C @ AkB)
        AkB = A @ AkB
    return np.hstack(blocks)
